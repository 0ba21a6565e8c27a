"""
evosolve - Generic evolutionary search

One generational control loop with elitism and fitness caching, driven by
pluggable problem-specific operators (TSP, 3-SAT, Sudoku adapters included).
"""

__version__ = "0.1.0"

from .evolution import (
    ConfigurationError,
    EngineConfig,
    EvolutionEngine,
    EvolutionResult,
    IndividualRecord,
    OperatorContractError,
    ProblemDefinition,
    create_evolution_engine,
)
from .utils import RandomSource

__all__ = [
    'ConfigurationError',
    'EngineConfig',
    'EvolutionEngine',
    'EvolutionResult',
    'IndividualRecord',
    'OperatorContractError',
    'ProblemDefinition',
    'RandomSource',
    'create_evolution_engine',
]
