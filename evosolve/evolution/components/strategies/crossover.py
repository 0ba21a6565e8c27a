"""
交配策略模組

提供與問題無關的通用交配：
- 矩陣逐列交配 (如數獨，每一列保持完整)
- 屬性均勻交配 (如 SAT 變數指派)

兩者都不修改父代，子代的列 / 值都是新複製的。
"""

from typing import Any, Dict, List, Mapping, Sequence, Tuple, TypeVar
import logging

from ....utils.random_source import RandomSource
from .base import EvolutionStrategy

logger = logging.getLogger(__name__)

T = TypeVar('T')
K = TypeVar('K')

Matrix = List[List[T]]


def row_wise_matrix_crossover(parent1: Sequence[Sequence[T]], parent2: Sequence[Sequence[T]],
                              rng: RandomSource) -> Tuple[Matrix, Matrix]:
    """
    逐列交配

    隨機選擇切點 [0, 列數)，子代 1 取父代 1 切點前的列與父代 2 切點後的列，
    子代 2 相反。

    Args:
        parent1: 父代矩陣 1
        parent2: 父代矩陣 2 (列數必須相同)
        rng: 隨機來源

    Returns:
        (child1, child2)
    """
    if len(parent1) != len(parent2):
        raise ValueError(f"父代列數不一致: {len(parent1)} != {len(parent2)}")

    if not parent1:
        return [], []

    cut = rng.randint(0, len(parent1))

    child1 = [list(row) for row in parent1[:cut]] + [list(row) for row in parent2[cut:]]
    child2 = [list(row) for row in parent2[:cut]] + [list(row) for row in parent1[cut:]]
    return child1, child2


def uniform_property_crossover(parent1: Mapping[K, T], parent2: Mapping[K, T],
                               rng: RandomSource) -> Tuple[Dict[K, T], Dict[K, T]]:
    """
    屬性均勻交配

    每個鍵以 1/2 機率決定來自哪個父代，另一個子代取得另一個父代的值。

    Args:
        parent1: 父代字典 1
        parent2: 父代字典 2 (鍵集合必須相同)
        rng: 隨機來源

    Returns:
        (child1, child2)
    """
    if parent1.keys() != parent2.keys():
        raise ValueError("父代的鍵集合不一致，無法進行屬性交配")

    child1: Dict[K, T] = {}
    child2: Dict[K, T] = {}
    for key in parent1:
        if rng.random() < 0.5:
            child1[key], child2[key] = parent1[key], parent2[key]
        else:
            child1[key], child2[key] = parent2[key], parent1[key]

    return child1, child2


class CrossoverStrategy(EvolutionStrategy):
    """
    交配策略基類

    子類實現 `_perform_crossover`，基類負責統計。
    """

    def __init__(self):
        super().__init__()
        self.name = "crossover_strategy"

    def __call__(self, parent1: Any, parent2: Any, rng: RandomSource) -> Tuple[Any, Any]:
        self._count('total_crossovers')
        return self._perform_crossover(parent1, parent2, rng)

    def _perform_crossover(self, parent1: Any, parent2: Any, rng: RandomSource) -> Tuple[Any, Any]:
        raise NotImplementedError("子類必須實現 _perform_crossover 方法")


class RowWiseMatrixCrossover(CrossoverStrategy):
    """逐列矩陣交配策略"""

    def __init__(self):
        super().__init__()
        self.name = "row_wise_matrix"

    def _perform_crossover(self, parent1, parent2, rng):
        return row_wise_matrix_crossover(parent1, parent2, rng)


class UniformPropertyCrossover(CrossoverStrategy):
    """屬性均勻交配策略"""

    def __init__(self):
        super().__init__()
        self.name = "uniform_property"

    def _perform_crossover(self, parent1, parent2, rng):
        return uniform_property_crossover(parent1, parent2, rng)
