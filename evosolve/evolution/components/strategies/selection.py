"""
選擇策略模組

實現錦標賽選擇：每次從完整族群中均勻 (可重複) 抽出候選者，
保留最適者，重複直到選滿指定數量。
"""

from typing import List, Sequence
import logging

from ....utils.random_source import RandomSource
from ..exceptions import ConfigurationError
from ..individual import EvaluatedIndividual
from .base import EvolutionStrategy, compare_fitness

logger = logging.getLogger(__name__)


class SelectionStrategy(EvolutionStrategy):
    """
    選擇策略基類
    """

    def __init__(self, direction: str = 'min'):
        super().__init__()
        self.name = "selection_strategy"
        if direction not in ('min', 'max'):
            raise ConfigurationError(f"direction must be 'min' or 'max', got {direction!r}")
        self.direction = direction

    def __call__(self, population: Sequence[EvaluatedIndividual], count: int,
                 rng: RandomSource) -> List[EvaluatedIndividual]:
        return self.select_individuals(population, count, rng)

    def select_individuals(self, population: Sequence[EvaluatedIndividual], count: int,
                           rng: RandomSource) -> List[EvaluatedIndividual]:
        """
        選擇個體

        Args:
            population: 已評估族群
            count: 選擇個體數量
            rng: 隨機來源

        Returns:
            選中的個體列表 (長度恰為 count)
        """
        raise NotImplementedError("子類必須實現 select_individuals 方法")


class TournamentStrategy(SelectionStrategy):
    """
    錦標賽選擇策略

    預設為二元錦標賽：不需要整體排序即可產生選擇壓力，
    並自然允許同一個體被重複選中。平手時保留先抽到的候選者。
    """

    def __init__(self, direction: str = 'min', tournament_size: int = 2):
        """
        初始化錦標賽選擇策略

        Args:
            direction: 最佳化方向
            tournament_size: 錦標賽大小 (>= 1)
        """
        super().__init__(direction)
        if tournament_size < 1:
            raise ConfigurationError(f"tournament_size must be >= 1, got {tournament_size}")
        self.name = "tournament"
        self.tournament_size = tournament_size

    def select_individuals(self, population: Sequence[EvaluatedIndividual], count: int,
                           rng: RandomSource) -> List[EvaluatedIndividual]:
        if count <= 0:
            return []

        if not population:
            raise ValueError(f"無法從空族群選出 {count} 個個體")

        chosen = []
        for _ in range(count):
            winner = population[rng.randint(0, len(population))]
            for _ in range(self.tournament_size - 1):
                competitor = population[rng.randint(0, len(population))]
                if compare_fitness(competitor.fitness, winner.fitness, self.direction):
                    winner = competitor
            chosen.append(winner)

        self._count('tournaments', count)
        return chosen
