"""
Unit tests for the 3-SAT adapter
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from evosolve.evolution.components import ConfigurationError, EngineConfig, EvolutionEngine
from evosolve.problems import SatFormula, SatisfiabilityProblem, create_problem
from evosolve.problems.sat import parse_literal
from evosolve.utils import RandomSource

FORMULA = {
    'variables': ['x1', 'x2', 'x3', '!x1'],
    'clauses': [
        ['x1', 'x2', 'x3'],
        ['!x1', 'x2', '!x3'],
        ['!x2', 'x3', 'x1'],
    ],
}


class TestSatFormula:
    """Test cases for SatFormula"""

    def test_parse_literal(self):
        assert parse_literal('x1') == ('x1', False)
        assert parse_literal('!x1') == ('x1', True)

    def test_variables_strip_negations(self):
        """測試變數列表中的否定項會被忽略"""
        formula = SatFormula.from_dict(FORMULA)
        assert formula.variables == ['x1', 'x2', 'x3']

    def test_variables_derived_from_clauses(self):
        formula = SatFormula(clauses=[['a', '!b'], ['c']])
        assert formula.variables == ['a', 'b', 'c']

    def test_count_unsatisfied(self):
        """測試未滿足子句計數"""
        formula = SatFormula.from_dict(FORMULA)

        assert formula.count_unsatisfied({'x1': False, 'x2': False, 'x3': False}) == 1
        assert formula.count_unsatisfied({'x1': True, 'x2': True, 'x3': True}) == 0
        assert formula.count_unsatisfied({'x1': True, 'x2': False, 'x3': True}) == 1

    def test_invalid_formulas(self):
        with pytest.raises(ConfigurationError):
            SatFormula(clauses=[[]])
        with pytest.raises(ConfigurationError):
            SatFormula(clauses=[['a', 'z']], variables=['a'])
        with pytest.raises(ConfigurationError):
            SatFormula.from_dict({'variables': ['a']})


class TestSatisfiabilityProblem:
    """Test cases for SatisfiabilityProblem"""

    def test_generate_solution_covers_variables(self):
        problem = SatisfiabilityProblem.from_config(FORMULA, max_generations=10)
        solution = problem.generate_solution(RandomSource(seed=0))

        assert set(solution) == {'x1', 'x2', 'x3'}
        assert all(isinstance(v, bool) for v in solution.values())

    def test_mutation_never_increases_unsatisfied(self):
        """測試變異不會增加未滿足子句數"""
        problem = SatisfiabilityProblem.from_config(FORMULA, max_generations=10, mean_mutations=3.0)
        rng = RandomSource(seed=3)

        for _ in range(30):
            assignment = problem.generate_solution(rng)
            mutant = problem.mutate(assignment, rng)

            assert problem.evaluate(mutant) <= problem.evaluate(assignment)
            assert set(mutant) == set(assignment)

    def test_is_finished_on_zero(self):
        problem = SatisfiabilityProblem.from_config(FORMULA, max_generations=10)

        assert problem.is_finished(3, 0)
        assert not problem.is_finished(3, 1)
        assert problem.is_finished(10, 1)

    def test_run_satisfies_formula(self):
        """測試演化找到可滿足指派並提前結束"""
        problem = create_problem({'type': 'sat', 'instance': FORMULA}, max_generations=50)
        engine = EvolutionEngine(EngineConfig(population_size=20, max_generations=50, elitism=2, seed=7), problem)

        best = engine.run()

        assert best.fitness == 0
        assert problem.formula.count_unsatisfied(best.solution) == 0
        assert engine.result.generations_completed == best.generation

    def test_rerun_with_patience_is_reproducible(self):
        """測試同一個問題物件以相同種子重跑兩次結果相同"""
        # 無法滿足的公式，只能靠早停結束
        problem = SatisfiabilityProblem(formula=SatFormula(clauses=[['a'], ['!a']]),
                                        max_generations=50, patience=3)

        histories = []
        for _ in range(2):
            engine = EvolutionEngine(EngineConfig(population_size=10, max_generations=50, elitism=2, seed=7), problem)
            engine.run()
            histories.append([(r.id, r.fitness) for r in engine.evolution_history])

        assert len(histories[0]) == 4
        assert histories[0] == histories[1]
        assert problem._termination.reason == 'early_stopping'

    def test_unknown_parameter(self):
        with pytest.raises(ConfigurationError):
            create_problem({'type': 'sat', 'instance': FORMULA, 'parameters': {'bogus': 1}}, max_generations=5)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
