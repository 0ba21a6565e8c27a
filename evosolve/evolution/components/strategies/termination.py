"""
終止條件模組

提供引擎每代詢問一次的終止判斷 `(generation, best_fitness) -> bool`：
- 達到最大世代數
- 歷史最佳適應度達到最佳值 (如 0 個未滿足子句)
- 早停：連續 N 代歷史最佳沒有顯著改進
"""

from typing import Optional, Dict, Any
import logging

from ..exceptions import ConfigurationError
from ..individual import Number

logger = logging.getLogger(__name__)


class EarlyStopping:
    """
    早停機制類

    當連續 patience 代的最佳 fitness 沒有超過 min_delta 的改進時觸發。

    Example:
        >>> early_stopping = EarlyStopping(patience=10, min_delta=0.001, direction='min')
        >>> early_stopping.step(12.0)
        False
    """

    def __init__(self, patience: int = 10, min_delta: float = 0.0, direction: str = 'min'):
        """
        初始化早停機制

        Args:
            patience: 連續無進步的世代數量，達到時觸發早停
            min_delta: 最小改進閾值，改進量必須大於此值才算進步
            direction: 'min' (越小越好) 或 'max' (越大越好)

        Raises:
            ConfigurationError: patience < 1 或 direction 無效
        """
        if patience < 1:
            raise ConfigurationError(f"patience must be >= 1, got {patience}")

        if direction not in ('min', 'max'):
            raise ConfigurationError(f"direction must be 'min' or 'max', got {direction!r}")

        self.patience = patience
        self.min_delta = min_delta
        self.direction = direction

        self.counter = 0
        self.best_fitness: Optional[Number] = None
        self.should_stop = False

    def step(self, current_fitness: Number) -> bool:
        """
        記錄一代的最佳 fitness 並判斷是否停止

        Returns:
            True 表示應該停止
        """
        if self.best_fitness is None:
            self.best_fitness = current_fitness
            return False

        if self.direction == 'max':
            improvement = current_fitness - self.best_fitness
        else:
            improvement = self.best_fitness - current_fitness

        if improvement > self.min_delta:
            self.best_fitness = current_fitness
            self.counter = 0
        else:
            self.counter += 1

        if self.counter >= self.patience:
            self.should_stop = True

        return self.should_stop

    def reset(self):
        """重置早停狀態"""
        self.counter = 0
        self.best_fitness = None
        self.should_stop = False

    def get_status(self) -> Dict[str, Any]:
        return {
            'counter': self.counter,
            'best_fitness': self.best_fitness,
            'should_stop': self.should_stop,
            'patience': self.patience,
            'min_delta': self.min_delta,
            'direction': self.direction,
        }

    def __repr__(self) -> str:
        return (f"EarlyStopping(patience={self.patience}, min_delta={self.min_delta}, "
                f"direction='{self.direction}', counter={self.counter})")


class TerminationCriteria:
    """
    標準終止條件

    `generation >= max_generations` 或最佳 fitness 達到 optimum 時停止；
    若有設定 early_stopping，也會在其觸發時停止。
    """

    def __init__(self, max_generations: int, optimum: Optional[Number] = None,
                 direction: str = 'min', early_stopping: Optional[EarlyStopping] = None):
        if max_generations < 0:
            raise ConfigurationError(f"max_generations must be >= 0, got {max_generations}")

        if direction not in ('min', 'max'):
            raise ConfigurationError(f"direction must be 'min' or 'max', got {direction!r}")

        self.max_generations = max_generations
        self.optimum = optimum
        self.direction = direction
        self.early_stopping = early_stopping
        self.reason: Optional[str] = None

    def reached_optimum(self, best_fitness: Number) -> bool:
        if self.optimum is None:
            return False
        if self.direction == 'min':
            return best_fitness <= self.optimum
        return best_fitness >= self.optimum

    def reset(self):
        """清除上一次演化留下的終止原因與早停狀態"""
        self.reason = None
        if self.early_stopping is not None:
            self.early_stopping.reset()

    def __call__(self, generation: int, best_fitness: Number) -> bool:
        # 第 0 代代表新的一次演化
        if generation == 0:
            self.reset()

        if generation >= self.max_generations:
            self.reason = 'max_generations'
        elif self.reached_optimum(best_fitness):
            self.reason = 'optimum'
        elif self.early_stopping is not None and self.early_stopping.step(best_fitness):
            self.reason = 'early_stopping'
        else:
            return False

        logger.debug(f"終止條件觸發: {self.reason} (generation={generation}, best={best_fitness})")
        return True

    def __repr__(self) -> str:
        return (f"TerminationCriteria(max_generations={self.max_generations}, optimum={self.optimum}, "
                f"direction='{self.direction}', early_stopping={self.early_stopping!r})")
