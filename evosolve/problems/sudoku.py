"""
Sudoku Adapter

The puzzle is a 9x9 grid where 0 marks an empty cell; every non-zero cell is
fixed. A solution fills the empty cells so that each row is a permutation of
1..9 agreeing with the fixed cells. Generation, crossover (whole rows) and
mutation (swaps inside one row) all keep rows valid, so fitness only counts
digits missing from columns and 3x3 sub-grids.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from ..evolution.components.exceptions import ConfigurationError
from ..evolution.components.individual import EvaluatedIndividual, EvaluatedPopulation
from ..evolution.components.strategies import (
    EarlyStopping,
    MutationStrategy,
    TerminationCriteria,
    TournamentStrategy,
    row_wise_matrix_crossover,
)
from ..utils.random_source import RandomSource

logger = logging.getLogger(__name__)

Grid = List[List[int]]
Swap = Tuple[int, int, int]

SIZE = 9
BOX = 3
DIGITS = frozenset(range(1, SIZE + 1))


def copy_grid(grid: Sequence[Sequence[int]]) -> Grid:
    return [list(row) for row in grid]


class FreeCellSwapMutation(MutationStrategy):
    """
    Swap two free cells of one row.

    A swap is accepted only when it introduces no new conflict with a fixed
    cell AND removes an existing one.
    """

    def __init__(self, problem: 'SudokuProblem', **kwargs):
        super().__init__(**kwargs)
        self.name = "free_cell_swap"
        self.problem = problem

    def _clone(self, solution: Grid) -> Grid:
        return copy_grid(solution)

    def _propose(self, solution: Grid, rng: RandomSource) -> Optional[Swap]:
        if not self.problem.mutable_rows:
            return None
        row = rng.choice(self.problem.mutable_rows)
        free = self.problem.free_columns[row]
        first, second = rng.sample_indices(len(free), 2)
        return row, free[first], free[second]

    def _accept(self, solution: Grid, move: Swap) -> bool:
        row, col1, col2 = move
        value1, value2 = solution[row][col1], solution[row][col2]
        conflicts = self.problem.conflicts_with_fixed

        adds_conflict = conflicts(solution, row, col2, value1) or conflicts(solution, row, col1, value2)
        removes_conflict = conflicts(solution, row, col1, value1) or conflicts(solution, row, col2, value2)
        return not adds_conflict and removes_conflict

    def _apply(self, solution: Grid, move: Swap) -> None:
        row, col1, col2 = move
        solution[row][col1], solution[row][col2] = solution[row][col2], solution[row][col1]


@dataclass
class SudokuProblem:
    """
    Sudoku adapter conforming to the engine's Problem interface.

    Attributes:
        puzzle: 9x9 grid, 0 for empty cells
        max_generations: Generation cap for the termination check
        mean_mutations: Poisson mean of accepted swaps per mutation
        max_mutation_attempts: Upper bound on proposed swaps per mutation
        patience: Early stopping patience in generations (optional)
    """

    puzzle: Grid
    max_generations: int = 1000
    mean_mutations: float = 2.0
    max_mutation_attempts: int = 50
    patience: Optional[int] = None

    direction: str = field(default='min', init=False)
    free_columns: Dict[int, List[int]] = field(default_factory=dict, init=False)
    mutable_rows: List[int] = field(default_factory=list, init=False)

    def __post_init__(self):
        self._validate_puzzle()
        self.puzzle = copy_grid(self.puzzle)

        self.free_columns = {
            row: [col for col in range(SIZE) if self.puzzle[row][col] == 0]
            for row in range(SIZE)
        }
        self.mutable_rows = [row for row, cols in self.free_columns.items() if len(cols) >= 2]

        self._selection = TournamentStrategy(direction=self.direction)
        self._mutation = FreeCellSwapMutation(self, mean_mutations=self.mean_mutations,
                                              max_attempts=self.max_mutation_attempts)
        early_stopping = EarlyStopping(patience=self.patience, direction=self.direction) if self.patience else None
        self._termination = TerminationCriteria(self.max_generations, optimum=0,
                                                direction=self.direction, early_stopping=early_stopping)

    def _validate_puzzle(self):
        if len(self.puzzle) != SIZE or any(len(row) != SIZE for row in self.puzzle):
            raise ConfigurationError("sudoku puzzle must be a 9x9 grid")

        for index, row in enumerate(self.puzzle):
            if any(not isinstance(v, int) or not 0 <= v <= SIZE for v in row):
                raise ConfigurationError(f"row {index} holds values outside 0..9")
            fixed = [v for v in row if v]
            if len(fixed) != len(set(fixed)):
                raise ConfigurationError(f"row {index} repeats a fixed digit")

    @classmethod
    def from_config(cls, instance: Dict[str, Any], max_generations: int, **parameters) -> 'SudokuProblem':
        if 'puzzle' not in instance:
            raise ConfigurationError("invalid sudoku instance: missing 'puzzle'")
        return cls(puzzle=instance['puzzle'], max_generations=max_generations, **parameters)

    def is_fixed(self, row: int, col: int) -> bool:
        return self.puzzle[row][col] != 0

    def conflicts_with_fixed(self, grid: Grid, row: int, col: int, value: int) -> bool:
        """Whether `value` at (row, col) clashes with a fixed cell of its column or sub-grid."""
        for r in range(SIZE):
            if r != row and self.is_fixed(r, col) and grid[r][col] == value:
                return True

        top, left = (row // BOX) * BOX, (col // BOX) * BOX
        for r in range(top, top + BOX):
            for c in range(left, left + BOX):
                if (r, c) != (row, col) and self.is_fixed(r, c) and grid[r][c] == value:
                    return True

        return False

    def generate_solution(self, rng: RandomSource) -> Grid:
        """Fill every row with its missing digits in shuffled order."""
        grid = copy_grid(self.puzzle)
        for row in grid:
            missing = sorted(DIGITS - set(row))
            rng.shuffle(missing)
            for col in range(SIZE):
                if row[col] == 0:
                    row[col] = missing.pop()
        return grid

    def evaluate(self, solution: Grid) -> int:
        """Digits missing from columns plus digits missing from sub-grids."""
        score = 0

        for col in range(SIZE):
            score += len(DIGITS - {solution[row][col] for row in range(SIZE)})

        for top in range(0, SIZE, BOX):
            for left in range(0, SIZE, BOX):
                box = {solution[r][c] for r in range(top, top + BOX) for c in range(left, left + BOX)}
                score += len(DIGITS - box)

        return score

    def crossover(self, parent1: Grid, parent2: Grid, rng: RandomSource) -> Tuple[Grid, Grid]:
        return row_wise_matrix_crossover(parent1, parent2, rng)

    def mutate(self, solution: Grid, rng: RandomSource) -> Grid:
        if not self.mutable_rows:
            return copy_grid(solution)
        return self._mutation(solution, rng)

    def select(self, population: Sequence[EvaluatedIndividual], count: int,
               rng: RandomSource) -> List[EvaluatedIndividual]:
        return self._selection(population, count, rng)

    def is_finished(self, generation: int, best_fitness: int) -> bool:
        return self._termination(generation, best_fitness)

    def on_progress(self, generation: int, evaluated_population: EvaluatedPopulation) -> None:
        logger.debug(f"Generation: {generation}, Best score: {evaluated_population.best_individual.fitness}")
