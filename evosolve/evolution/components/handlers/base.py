"""
事件處理器基類

定義演化過程中事件處理的基本接口。
"""

from abc import ABC


class EventHandler(ABC):
    """
    事件處理器基類

    引擎以 `on_<event_name>(**kwargs)` 的形式通知處理器，
    子類只需覆寫關心的事件。
    """

    def __init__(self):
        self.name = "base_handler"
        self.engine = None

    def set_engine(self, engine):
        """設置演化引擎引用"""
        self.engine = engine

    def handle_event(self, event_name: str, **kwargs):
        """
        處理事件 (分派到對應的 on_* 方法)

        Args:
            event_name: 事件名稱
            **kwargs: 事件參數
        """
        callback = getattr(self, f'on_{event_name}', None)
        if callback is not None:
            callback(**kwargs)

    def on_evolution_start(self, **kwargs):
        """演化開始事件"""
        pass

    def on_generation_complete(self, **kwargs):
        """世代完成事件"""
        pass

    def on_evolution_complete(self, **kwargs):
        """演化完成事件"""
        pass

    def on_evolution_error(self, **kwargs):
        """演化錯誤事件"""
        pass
