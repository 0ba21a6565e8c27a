"""
變異策略模組

實現以 Poisson 次數驅動的「不變差才接受」變異流程，並帶有嘗試次數上限，
確保變異一定會結束。具體的移動 (交換城市、翻轉變數等) 由子類定義。
"""

from typing import Any, Optional
import copy
import logging

from ....utils.random_source import RandomSource
from ..exceptions import ConfigurationError
from .base import EvolutionStrategy

logger = logging.getLogger(__name__)


class MutationStrategy(EvolutionStrategy):
    """
    變異策略基類

    流程:
    1. 複製輸入解 (不修改原解)
    2. 以 Poisson(mean_mutations) 決定要接受的變異次數
    3. 反覆提出候選移動，通過 `_accept` 才套用，直到次數用完或嘗試達上限
    """

    def __init__(self, mean_mutations: float = 2.0, max_attempts: int = 100):
        """
        初始化變異策略

        Args:
            mean_mutations: 每次呼叫接受變異次數的 Poisson 平均值
            max_attempts: 每次呼叫最多提出的候選移動數
        """
        super().__init__()
        if mean_mutations <= 0:
            raise ConfigurationError(f"mean_mutations must be > 0, got {mean_mutations}")
        if max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {max_attempts}")

        self.name = "mutation_strategy"
        self.mean_mutations = mean_mutations
        self.max_attempts = max_attempts

    def __call__(self, solution: Any, rng: RandomSource) -> Any:
        return self.mutate(solution, rng)

    def mutate(self, solution: Any, rng: RandomSource) -> Any:
        """
        執行變異

        Args:
            solution: 要變異的解
            rng: 隨機來源

        Returns:
            變異後的新解
        """
        mutant = self._clone(solution)
        remaining = rng.poisson(self.mean_mutations)
        self._count('total_mutations')

        attempts = 0
        while remaining > 0 and attempts < self.max_attempts:
            attempts += 1
            move = self._propose(mutant, rng)
            if move is None:
                continue

            if self._accept(mutant, move):
                self._apply(mutant, move)
                self._count('accepted_moves')
                remaining -= 1
            else:
                self._count('rejected_moves')

        if remaining > 0:
            self._count('exhausted_attempts')
            logger.debug(f"變異嘗試 {self.max_attempts} 次後仍有 {remaining} 次未完成")

        return mutant

    def _clone(self, solution: Any) -> Any:
        """複製解"""
        return copy.deepcopy(solution)

    def _propose(self, solution: Any, rng: RandomSource) -> Optional[Any]:
        """提出候選移動，無可行移動時回傳 None"""
        raise NotImplementedError("子類必須實現 _propose 方法")

    def _accept(self, solution: Any, move: Any) -> bool:
        """是否接受移動 (預設全部接受)"""
        return True

    def _apply(self, solution: Any, move: Any) -> None:
        """原地套用移動"""
        raise NotImplementedError("子類必須實現 _apply 方法")
