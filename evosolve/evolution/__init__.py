"""
Evolution Module

The generational engine, its data model and the reusable operator strategies.
"""

from .components import (
    ConfigurationError,
    EngineConfig,
    EvaluatedIndividual,
    EvaluatedPopulation,
    EvolutionEngine,
    EvolutionResult,
    Individual,
    IndividualRecord,
    OperatorContractError,
    Problem,
    ProblemDefinition,
    create_evolution_engine,
)

__all__ = [
    'ConfigurationError',
    'EngineConfig',
    'EvaluatedIndividual',
    'EvaluatedPopulation',
    'EvolutionEngine',
    'EvolutionResult',
    'Individual',
    'IndividualRecord',
    'OperatorContractError',
    'Problem',
    'ProblemDefinition',
    'create_evolution_engine',
]
