"""
3-SAT Adapter

A formula is a conjunction of clauses; each clause is a disjunction of
literals written as "x1" or "!x1". A solution assigns a boolean to every
variable and its fitness is the number of unsatisfied clauses, so 0 means
the formula is satisfied.
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
    uniform_property_crossover,
)
from ..utils.random_source import RandomSource

logger = logging.getLogger(__name__)

Assignment = Dict[str, bool]

NEGATION = '!'


def parse_literal(literal: str) -> Tuple[str, bool]:
    """Split a literal into (variable, negated)."""
    if literal.startswith(NEGATION):
        return literal[len(NEGATION):], True
    return literal, False


@dataclass
class SatFormula:
    """
    CNF formula.

    Attributes:
        clauses: Clauses as sequences of literals
        variables: Variable names; derived from the clauses when empty
    """

    clauses: List[Tuple[str, ...]]
    variables: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.clauses = [tuple(clause) for clause in self.clauses]
        if any(not clause for clause in self.clauses):
            raise ConfigurationError("clauses must not be empty")

        used = []
        for clause in self.clauses:
            for literal in clause:
                name, _ = parse_literal(literal)
                if not name:
                    raise ConfigurationError(f"invalid literal {literal!r}")
                if name not in used:
                    used.append(name)

        if not self.variables:
            self.variables = used
        else:
            # negated entries in a variable list are redundant
            self.variables = [v for v in dict.fromkeys(self.variables) if not v.startswith(NEGATION)]
            unknown = [name for name in used if name not in self.variables]
            if unknown:
                raise ConfigurationError(f"clauses reference undeclared variables: {unknown}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SatFormula':
        try:
            return cls(clauses=data['clauses'], variables=list(data.get('variables', [])))
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"invalid SAT formula: {e}")

    @staticmethod
    def is_clause_satisfied(clause: Sequence[str], assignment: Assignment) -> bool:
        for literal in clause:
            name, negated = parse_literal(literal)
            if assignment[name] != negated:
                return True
        return False

    def count_unsatisfied(self, assignment: Assignment) -> int:
        return sum(1 for clause in self.clauses if not self.is_clause_satisfied(clause, assignment))


class VariableFlipMutation(MutationStrategy):
    """Flip one variable; accept when the unsatisfied count does not grow."""

    def __init__(self, formula: SatFormula, **kwargs):
        super().__init__(**kwargs)
        self.name = "variable_flip"
        self.formula = formula

    def _clone(self, solution: Assignment) -> Assignment:
        return dict(solution)

    def _propose(self, solution: Assignment, rng: RandomSource) -> Optional[str]:
        if not self.formula.variables:
            return None
        return rng.choice(self.formula.variables)

    def _accept(self, solution: Assignment, move: str) -> bool:
        candidate = dict(solution)
        self._apply(candidate, move)
        return self.formula.count_unsatisfied(candidate) <= self.formula.count_unsatisfied(solution)

    def _apply(self, solution: Assignment, move: str) -> None:
        solution[move] = not solution[move]


@dataclass
class SatisfiabilityProblem:
    """
    3-SAT adapter conforming to the engine's Problem interface.

    Stops at the generation cap or as soon as every clause is satisfied.
    """

    formula: SatFormula
    max_generations: int = 1000
    mean_mutations: float = 2.0
    max_mutation_attempts: int = 100
    patience: Optional[int] = None

    direction: str = field(default='min', init=False)

    def __post_init__(self):
        self._selection = TournamentStrategy(direction=self.direction)
        self._mutation = VariableFlipMutation(self.formula, mean_mutations=self.mean_mutations,
                                              max_attempts=self.max_mutation_attempts)
        early_stopping = EarlyStopping(patience=self.patience, direction=self.direction) if self.patience else None
        self._termination = TerminationCriteria(self.max_generations, optimum=0,
                                                direction=self.direction, early_stopping=early_stopping)

    @classmethod
    def from_config(cls, instance: Dict[str, Any], max_generations: int, **parameters) -> 'SatisfiabilityProblem':
        return cls(formula=SatFormula.from_dict(instance), max_generations=max_generations, **parameters)

    def generate_solution(self, rng: RandomSource) -> Assignment:
        return {variable: rng.randint(0, 2) == 0 for variable in self.formula.variables}

    def evaluate(self, solution: Assignment) -> int:
        """Number of unsatisfied clauses, lower is better."""
        return self.formula.count_unsatisfied(solution)

    def crossover(self, parent1: Assignment, parent2: Assignment,
                  rng: RandomSource) -> Tuple[Assignment, Assignment]:
        return uniform_property_crossover(parent1, parent2, rng)

    def mutate(self, solution: Assignment, rng: RandomSource) -> Assignment:
        return self._mutation(solution, rng)

    def select(self, population: Sequence[EvaluatedIndividual], count: int,
               rng: RandomSource) -> List[EvaluatedIndividual]:
        return self._selection(population, count, rng)

    def is_finished(self, generation: int, best_fitness: int) -> bool:
        return self._termination(generation, best_fitness)

    def on_progress(self, generation: int, evaluated_population: EvaluatedPopulation) -> None:
        logger.debug(f"Generation: {generation}, Unsatisfied clauses: {evaluated_population.best_individual.fitness}")
