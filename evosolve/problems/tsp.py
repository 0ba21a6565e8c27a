"""
Traveling Salesman Problem Adapter

A path visits every city exactly once, starting at `source` and ending at
`destination`. Only the inner cities are permuted by the operators, so the
endpoints never move. Fitness is the total travelled distance (lower is
better).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import logging

from ..evolution.components.exceptions import ConfigurationError
from ..evolution.components.individual import EvaluatedIndividual, EvaluatedPopulation
from ..evolution.components.strategies import (
    EarlyStopping,
    MutationStrategy,
    TerminationCriteria,
    TournamentStrategy,
)
from ..utils.random_source import RandomSource

logger = logging.getLogger(__name__)

Path = List[str]
Leg = Tuple[str, str]


class PathSwapMutation(MutationStrategy):
    """
    Swap two inner cities, accepting the swap when the path gets at most
    `margin` longer.
    """

    def __init__(self, problem: 'TravelingSalesmanProblem', margin: float = 10.0, **kwargs):
        super().__init__(**kwargs)
        self.name = "path_swap"
        self.problem = problem
        self.margin = margin

    def _clone(self, solution: Path) -> Path:
        return list(solution)

    def _propose(self, solution: Path, rng: RandomSource) -> Optional[Tuple[int, int]]:
        inner_count = len(solution) - 2
        if inner_count < 2:
            return None
        i, j = rng.sample_indices(inner_count, 2)
        return i + 1, j + 1

    def _accept(self, solution: Path, move: Tuple[int, int]) -> bool:
        candidate = list(solution)
        self._apply(candidate, move)
        return self.problem.evaluate(candidate) <= self.problem.evaluate(solution) + self.margin

    def _apply(self, solution: Path, move: Tuple[int, int]) -> None:
        i, j = move
        solution[i], solution[j] = solution[j], solution[i]


@dataclass
class TravelingSalesmanProblem:
    """
    TSP adapter conforming to the engine's Problem interface.

    Attributes:
        cities: All city names (unique)
        source: First city of every path
        destination: Last city of every path
        distances: Leg lengths keyed by (from, to)
        max_generations: Generation cap for the termination check
        symmetric: Look up (to, from) when (from, to) is missing
        mutation_margin: Allowed worsening per accepted mutation swap
        mean_mutations: Poisson mean of accepted swaps per mutation
        mean_crossover_swaps: Poisson mean of position swaps per crossover
        max_mutation_attempts: Upper bound on proposed swaps per mutation
        target_distance: Stop once the best path is this short (optional)
        patience: Early stopping patience in generations (optional)
    """

    cities: Sequence[str]
    source: str
    destination: str
    distances: Mapping[Leg, float]
    max_generations: int = 1000
    symmetric: bool = False
    mutation_margin: float = 10.0
    mean_mutations: float = 2.0
    mean_crossover_swaps: float = 2.0
    max_mutation_attempts: int = 100
    target_distance: Optional[float] = None
    patience: Optional[int] = None

    direction: str = field(default='min', init=False)
    inner_cities: List[str] = field(default_factory=list, init=False)

    def __post_init__(self):
        self.cities = list(self.cities)
        if len(set(self.cities)) != len(self.cities):
            raise ConfigurationError("city names must be unique")

        for endpoint in (self.source, self.destination):
            if endpoint not in self.cities:
                raise ConfigurationError(f"endpoint {endpoint!r} is not one of the cities")

        if self.source == self.destination:
            raise ConfigurationError("source and destination must differ")

        self.inner_cities = [c for c in self.cities if c not in (self.source, self.destination)]

        self._selection = TournamentStrategy(direction=self.direction)
        self._mutation = PathSwapMutation(self, margin=self.mutation_margin,
                                          mean_mutations=self.mean_mutations,
                                          max_attempts=self.max_mutation_attempts)
        early_stopping = EarlyStopping(patience=self.patience, direction=self.direction) if self.patience else None
        self._termination = TerminationCriteria(self.max_generations, optimum=self.target_distance,
                                                direction=self.direction, early_stopping=early_stopping)

    @classmethod
    def from_config(cls, instance: Dict[str, Any], max_generations: int, **parameters) -> 'TravelingSalesmanProblem':
        """
        Build from a configuration dictionary.

        Distances are given as {"A:B": 1.0, ...}, the key being "from:to".
        """
        try:
            distances = {}
            for key, value in instance['distances'].items():
                origin, target = key.split(':')
                distances[(origin, target)] = value
            return cls(
                cities=instance['cities'],
                source=instance['source'],
                destination=instance['destination'],
                distances=distances,
                max_generations=max_generations,
                symmetric=instance.get('symmetric', False),
                **parameters,
            )
        except (KeyError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"invalid TSP instance: {e}")

    def distance(self, origin: str, target: str) -> float:
        """Length of one leg; raises KeyError for a leg missing from the table."""
        if (origin, target) in self.distances:
            return self.distances[(origin, target)]
        if self.symmetric and (target, origin) in self.distances:
            return self.distances[(target, origin)]
        raise KeyError(f"no distance for leg {origin} -> {target}")

    def is_valid_path(self, path: Sequence[str]) -> bool:
        return (len(path) == len(self.cities)
                and path[0] == self.source
                and path[-1] == self.destination
                and sorted(path[1:-1]) == sorted(self.inner_cities))

    def generate_solution(self, rng: RandomSource) -> Path:
        inner = list(self.inner_cities)
        rng.shuffle(inner)
        return [self.source] + inner + [self.destination]

    def evaluate(self, solution: Sequence[str]) -> float:
        """Total distance, lower is better."""
        return sum(self.distance(origin, target) for origin, target in zip(solution, solution[1:]))

    def crossover(self, parent1: Path, parent2: Path, rng: RandomSource) -> Tuple[Path, Path]:
        """
        Swap-based recombination.

        For each of Poisson-many random inner cities, child1 moves the city to
        the position it holds in child2, and child2 moves it to the position it
        holds in child1. Each move is a swap, so both children stay valid paths.
        """
        child1, child2 = list(parent1), list(parent2)
        if not self.inner_cities:
            return child1, child2

        for _ in range(rng.poisson(self.mean_crossover_swaps)):
            city = rng.choice(self.inner_cities)
            idx1 = child1.index(city)
            idx2 = child2.index(city)
            child1[idx1], child1[idx2] = child1[idx2], child1[idx1]
            child2[idx1], child2[idx2] = child2[idx2], child2[idx1]

        return child1, child2

    def mutate(self, solution: Path, rng: RandomSource) -> Path:
        if len(self.inner_cities) < 2:
            return list(solution)
        return self._mutation(solution, rng)

    def select(self, population: Sequence[EvaluatedIndividual], count: int,
               rng: RandomSource) -> List[EvaluatedIndividual]:
        return self._selection(population, count, rng)

    def is_finished(self, generation: int, best_fitness: float) -> bool:
        return self._termination(generation, best_fitness)

    def on_progress(self, generation: int, evaluated_population: EvaluatedPopulation) -> None:
        logger.debug(f"Generation: {generation}, Best distance: {evaluated_population.best_individual.fitness}")
