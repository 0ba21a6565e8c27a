"""
進度條處理器 - 以 tqdm 顯示世代進度
"""
from typing import Optional

from tqdm import tqdm

from .base import EventHandler


class ProgressBarHandler(EventHandler):
    """每完成一代前進一格，後綴顯示目前歷史最佳適應度"""

    def __init__(self, desc: str = "Evolution", ncols: int = 100, disable: bool = False, **kwargs):
        super().__init__()
        self.name = "progress_bar_handler"
        self.desc = desc
        self.ncols = ncols
        self.disable = disable
        self.bar: Optional[tqdm] = None

    def on_evolution_start(self, engine, **kwargs):
        # 第 0 代也算一格
        self.bar = tqdm(total=engine.max_generations + 1, desc=self.desc, unit="gen",
                        ncols=self.ncols, disable=self.disable)

    def on_generation_complete(self, generation: int, best_individual, **kwargs):
        if self.bar is None:
            return
        self.bar.set_postfix(best=best_individual.fitness)
        self.bar.update(1)

    def on_evolution_complete(self, **kwargs):
        self._close()

    def on_evolution_error(self, **kwargs):
        self._close()

    def _close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None
