"""
演化個體類

個體只由解的編碼與唯一 ID 構成。ID 僅作為菁英快取的鍵，
不代表解內容是否相等。
"""

from dataclasses import dataclass
from typing import Generic, List, TypeVar, Union

S = TypeVar('S')

Number = Union[int, float]


@dataclass
class Individual(Generic[S]):
    """
    未評估個體

    Attributes:
        solution: 解的編碼 (對引擎而言是不透明的)
        id: 建立時分配的唯一標識
    """

    solution: S
    id: str

    def __repr__(self) -> str:
        return f"Individual({self.id[:8]}...)"


@dataclass
class EvaluatedIndividual(Individual[S]):
    """已評估個體 (每世代每個個體只建立一次)"""

    fitness: Number = 0.0

    def to_individual(self) -> Individual[S]:
        """去掉適應度，保留 ID 與解 (菁英保留用)"""
        return Individual(solution=self.solution, id=self.id)

    def __repr__(self) -> str:
        return f"EvaluatedIndividual({self.id[:8]}..., fitness={self.fitness})"


@dataclass(frozen=True)
class IndividualRecord(Generic[S]):
    """
    演化歷史記錄

    某世代的最佳個體，建立後不可變更。
    """

    solution: S
    id: str
    fitness: Number
    generation: int

    @classmethod
    def from_evaluated(cls, individual: EvaluatedIndividual[S], generation: int) -> 'IndividualRecord[S]':
        return cls(
            solution=individual.solution,
            id=individual.id,
            fitness=individual.fitness,
            generation=generation,
        )

    def __repr__(self) -> str:
        return f"IndividualRecord({self.id[:8]}..., gen={self.generation}, fitness={self.fitness})"


@dataclass
class EvaluatedPopulation(Generic[S]):
    """
    一個世代的評估結果

    Attributes:
        individuals: 依適應度排序 (最佳在前) 的已評估個體
        best_individual: 本世代最佳個體的記錄
    """

    individuals: List[EvaluatedIndividual[S]]
    best_individual: IndividualRecord[S]

    @property
    def fitness_values(self) -> List[Number]:
        return [ind.fitness for ind in self.individuals]

    def __len__(self) -> int:
        return len(self.individuals)
