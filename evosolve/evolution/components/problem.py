"""
問題介面 (遺傳算子約定)

引擎只透過這組能力與問題互動，從不檢查解的內部結構：
- generate_solution: 產生隨機解
- evaluate: 純函數評分
- crossover: 兩個父代產生兩個子代
- mutate: 擾動單一解
- select: 從已評估族群選出指定數量的個體 (可重複)
- is_finished: 終止判斷
- on_progress: 每世代進度回呼

需要隨機數的算子都以最後一個參數接收 RandomSource。
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ...utils.random_source import RandomSource
from .individual import EvaluatedIndividual, EvaluatedPopulation, Number

S = TypeVar('S')


class Problem(Protocol[S]):
    """任何提供以下方法的物件都符合問題介面"""

    def generate_solution(self, rng: RandomSource) -> S: ...

    def evaluate(self, solution: S) -> Number: ...

    def crossover(self, parent1: S, parent2: S, rng: RandomSource) -> Tuple[S, S]: ...

    def mutate(self, solution: S, rng: RandomSource) -> S: ...

    def select(self, population: Sequence[EvaluatedIndividual[S]], count: int,
               rng: RandomSource) -> List[EvaluatedIndividual[S]]: ...

    def is_finished(self, generation: int, best_fitness: Number) -> bool: ...

    def on_progress(self, generation: int, evaluated_population: EvaluatedPopulation[S]) -> None: ...


def _never_finished(generation: int, best_fitness: Number) -> bool:
    return False


def _no_progress(generation: int, evaluated_population: EvaluatedPopulation) -> None:
    return None


@dataclass
class ProblemDefinition:
    """
    以純函數組合出的問題定義

    適合不想另外寫類別的情境；終止判斷預設只依賴引擎的世代上限，
    進度回呼預設不做任何事。

    Example:
        >>> problem = ProblemDefinition(
        ...     generate_solution=lambda rng: rng.randint(0, 100),
        ...     evaluate=lambda x: abs(x - 42),
        ...     crossover=lambda a, b, rng: (a, b),
        ...     mutate=lambda x, rng: x + rng.randint(-1, 2),
        ...     select=TournamentStrategy(direction='min'),
        ... )
    """

    generate_solution: Callable[[RandomSource], Any]
    evaluate: Callable[[Any], Number]
    crossover: Callable[[Any, Any, RandomSource], Tuple[Any, Any]]
    mutate: Callable[[Any, RandomSource], Any]
    select: Callable[[Sequence[EvaluatedIndividual], int, RandomSource], List[EvaluatedIndividual]]
    is_finished: Callable[[int, Number], bool] = field(default=_never_finished)
    on_progress: Callable[[int, EvaluatedPopulation], None] = field(default=_no_progress)
    name: Optional[str] = None
