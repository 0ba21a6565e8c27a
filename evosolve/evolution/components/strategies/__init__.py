"""
演化策略模組

包含所有可重用的演化策略：
- 選擇策略
- 交配策略
- 變異策略
- 終止條件
"""

from .base import EvolutionStrategy, compare_fitness
from .selection import SelectionStrategy, TournamentStrategy
from .crossover import (
    CrossoverStrategy,
    RowWiseMatrixCrossover,
    UniformPropertyCrossover,
    row_wise_matrix_crossover,
    uniform_property_crossover,
)
from .mutation import MutationStrategy
from .termination import EarlyStopping, TerminationCriteria

__all__ = [
    'EvolutionStrategy', 'compare_fitness',
    # 選擇策略
    'SelectionStrategy', 'TournamentStrategy',
    # 交配策略
    'CrossoverStrategy', 'RowWiseMatrixCrossover', 'UniformPropertyCrossover',
    'row_wise_matrix_crossover', 'uniform_property_crossover',
    # 變異策略
    'MutationStrategy',
    # 終止條件
    'EarlyStopping', 'TerminationCriteria',
]
