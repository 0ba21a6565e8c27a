"""
Problem Adapters

Reference adapters plugging TSP, 3-SAT and Sudoku into the evolution
engine. Each takes a ready-made instance; none generates instances.
"""

from typing import Any, Dict

from ..evolution.components.exceptions import ConfigurationError
from .sat import SatFormula, SatisfiabilityProblem
from .sudoku import SudokuProblem
from .tsp import TravelingSalesmanProblem

PROBLEM_MAPPINGS = {
    'tsp': TravelingSalesmanProblem,
    'sat': SatisfiabilityProblem,
    'sudoku': SudokuProblem,
}


def create_problem(problem_config: Dict[str, Any], max_generations: int):
    """
    Build a problem adapter from the 'problem' section of a configuration.

    Args:
        problem_config: {'type': ..., 'instance': {...}, 'parameters': {...}}
        max_generations: Generation cap handed to the adapter's termination check

    Raises:
        ConfigurationError: unknown type or malformed instance
    """
    problem_type = problem_config.get('type')
    if problem_type not in PROBLEM_MAPPINGS:
        available = list(PROBLEM_MAPPINGS.keys())
        raise ConfigurationError(f"unsupported problem type: {problem_type!r}. available: {available}")

    if 'instance' not in problem_config:
        raise ConfigurationError("problem configuration is missing 'instance'")

    problem_class = PROBLEM_MAPPINGS[problem_type]
    parameters = problem_config.get('parameters', {})
    try:
        return problem_class.from_config(problem_config['instance'], max_generations, **parameters)
    except TypeError as e:
        raise ConfigurationError(f"invalid parameters for {problem_type}: {e}")


__all__ = [
    'SatFormula',
    'SatisfiabilityProblem',
    'SudokuProblem',
    'TravelingSalesmanProblem',
    'create_problem',
]
