"""
Unit tests for EvolutionEngine
"""

import pytest
import unittest
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from deap import tools

from evosolve.evolution.components import (
    ConfigurationError,
    EngineConfig,
    EvolutionEngine,
    EvolutionResult,
    Individual,
    IndividualRecord,
    OperatorContractError,
    ProblemDefinition,
    create_evolution_engine,
)
from evosolve.evolution.components.handlers import EventHandler
from evosolve.evolution.components.strategies import TournamentStrategy
from evosolve.utils import RandomSource


TARGET = 42


class CountingEvaluate:
    """記錄呼叫次數的評分函數 (離 TARGET 的距離)"""

    def __init__(self):
        self.calls = 0

    def __call__(self, solution):
        self.calls += 1
        return abs(solution - TARGET)


class RecordingHandler(EventHandler):
    """記錄每個事件的處理器"""

    def __init__(self):
        super().__init__()
        self.events = []
        self.population_sizes = []
        self.best_fitness = []

    def on_evolution_start(self, engine, **kwargs):
        self.events.append('evolution_start')

    def on_generation_complete(self, generation, evaluated_population, best_individual, **kwargs):
        self.events.append('generation_complete')
        self.population_sizes.append(len(evaluated_population))
        self.best_fitness.append(best_individual.fitness)

    def on_evolution_complete(self, engine, result, **kwargs):
        self.events.append('evolution_complete')

    def on_evolution_error(self, engine, error, **kwargs):
        self.events.append('evolution_error')


def make_problem(direction='min', **overrides):
    """整數最佳化問題：找出接近 TARGET 的整數"""
    operators = dict(
        generate_solution=lambda rng: rng.randint(0, 100),
        evaluate=CountingEvaluate(),
        crossover=lambda a, b, rng: (a, b),
        mutate=lambda x, rng: x + rng.randint(-2, 3),
        select=TournamentStrategy(direction=direction),
    )
    operators.update(overrides)
    return ProblemDefinition(**operators)


def make_engine(problem=None, population_size=10, max_generations=5, elitism=3,
                direction='min', seed=1234, handlers=None):
    config = EngineConfig(population_size=population_size, max_generations=max_generations,
                          elitism=elitism, direction=direction, seed=seed)
    return EvolutionEngine(config, problem or make_problem(direction), handlers=handlers)


class TestEvolutionEngineRun:
    """Test cases for a complete run"""

    def test_run_returns_best_record(self):
        """測試 run 回傳歷史最佳記錄並建立結果"""
        engine = make_engine()
        best = engine.run()

        assert isinstance(best, IndividualRecord)
        assert isinstance(engine.result, EvolutionResult)
        assert engine.result.best_individual == best
        assert best.fitness == min(record.fitness for record in engine.evolution_history)

    def test_population_size_constant(self):
        """測試每代族群大小不變"""
        handler = RecordingHandler()
        engine = make_engine(population_size=11, elitism=2, max_generations=6, handlers=[handler])
        engine.run()

        assert handler.population_sizes == [11] * 7

    def test_history_one_record_per_generation(self):
        """測試每代一筆歷史記錄"""
        engine = make_engine(max_generations=8)
        engine.run()

        assert [r.generation for r in engine.evolution_history] == list(range(9))
        assert engine.result.generations_completed == 8

    def test_best_never_regresses(self):
        """測試歷史最佳不會變差"""
        handler = RecordingHandler()
        engine = make_engine(population_size=20, elitism=0, max_generations=15, handlers=[handler])
        engine.run()

        for previous, current in zip(handler.best_fitness, handler.best_fitness[1:]):
            assert current <= previous

    def test_elites_are_not_reevaluated(self):
        """測試菁英透過快取沿用適應度"""
        problem = make_problem()
        engine = make_engine(problem, population_size=10, elitism=3, max_generations=5)
        engine.run()

        assert problem.evaluate.calls == 10 + 5 * 7
        assert engine.total_evaluations == 10 + 5 * 7
        assert engine.cache_hits == 5 * 3

    def test_deterministic_with_seed(self):
        """測試相同種子結果完全相同"""
        first = make_engine(seed=99)
        second = make_engine(seed=99)
        first.run()
        second.run()

        assert [(r.id, r.fitness) for r in first.evolution_history] == \
               [(r.id, r.fitness) for r in second.evolution_history]

    def test_injected_random_source(self):
        """測試注入的隨機來源會被使用"""
        rng = RandomSource(seed=5)
        config = EngineConfig(population_size=6, max_generations=2, elitism=1)
        engine = EvolutionEngine(config, make_problem(), random_source=rng)

        assert engine.rng is rng

    def test_max_direction(self):
        """測試最大化方向"""
        problem = make_problem('max', evaluate=lambda x: x)
        engine = make_engine(problem, direction='max', population_size=12, max_generations=10)
        best = engine.run()

        assert best.fitness == max(r.fitness for r in engine.evolution_history)
        fitness = engine.result.final_population
        assert [ind.fitness for ind in fitness] == sorted((ind.fitness for ind in fitness), reverse=True)

    def test_run_twice_resets_state(self):
        """測試重複執行會重置狀態"""
        engine = make_engine(max_generations=3)
        engine.run()
        engine.run()

        assert len(engine.evolution_history) == 4
        assert len(engine.logbook) == 4

    def test_logbook_records(self):
        """測試每代統計"""
        engine = make_engine(max_generations=4)
        engine.run()

        assert isinstance(engine.logbook, tools.Logbook)
        assert engine.logbook.select('gen') == [0, 1, 2, 3, 4]
        assert engine.logbook.select('evals') == [10, 7, 7, 7, 7]
        assert engine.logbook.select('cache_hits') == [0, 3, 3, 3, 3]
        for record in engine.logbook:
            assert record['min'] <= record['avg'] <= record['max']


class TestEvolutionEngineBoundaries:
    """Test cases for boundary configurations"""

    def test_zero_generations(self):
        """測試 max_generations=0 只評估初始族群"""
        crossover = MagicMock(side_effect=lambda a, b, rng: (a, b))
        problem = make_problem(crossover=crossover)
        engine = make_engine(problem, max_generations=0)
        best = engine.run()

        assert best.generation == 0
        assert len(engine.evolution_history) == 1
        assert problem.evaluate.calls == 10
        crossover.assert_not_called()

    def test_full_elitism_skips_selection(self):
        """測試 elitism == population_size 時不做選擇"""
        select = MagicMock(side_effect=AssertionError("select should not be called"))
        crossover = MagicMock(side_effect=lambda a, b, rng: (a, b))
        mutate = MagicMock(side_effect=lambda x, rng: x)
        problem = make_problem(select=select, crossover=crossover, mutate=mutate)
        engine = make_engine(problem, population_size=6, elitism=6, max_generations=4)
        engine.run()

        select.assert_not_called()
        crossover.assert_not_called()
        mutate.assert_not_called()
        assert problem.evaluate.calls == 6
        ids = {r.id for r in engine.evolution_history}
        assert len(ids) == 1

    def test_zero_elitism_keeps_cache_empty(self):
        """測試 elitism=0 時快取為空，每代全部重新評估"""
        problem = make_problem()
        engine = make_engine(problem, population_size=8, elitism=0, max_generations=3)
        engine.run()

        assert engine.elitism_cache == {}
        assert engine.cache_hits == 0
        assert problem.evaluate.calls == 8 * 4

    def test_odd_selection_count(self):
        """測試選擇數為奇數時最後一個個體直接通過"""
        handler = RecordingHandler()
        engine = make_engine(population_size=7, elitism=0, max_generations=3, handlers=[handler])
        engine.run()

        assert handler.population_sizes == [7, 7, 7, 7]

    def test_is_finished_stops_early(self):
        """測試問題的終止條件"""
        problem = make_problem(is_finished=lambda generation, best: generation >= 2)
        engine = make_engine(problem, max_generations=50)
        engine.run()

        assert engine.result.generations_completed == 2
        assert len(engine.evolution_history) == 3

    def test_engine_enforces_generation_cap(self):
        """測試即使問題永不結束，引擎仍遵守世代上限"""
        problem = make_problem(is_finished=lambda generation, best: False)
        engine = make_engine(problem, max_generations=4)
        engine.run()

        assert engine.result.generations_completed == 4

    def test_constant_fitness_keeps_earliest_best(self):
        """測試平手時保留最早的最佳記錄"""
        problem = make_problem(evaluate=lambda x: 1)
        engine = make_engine(problem, max_generations=5)
        best = engine.run()

        assert best.generation == 0
        assert best.id == engine.evolution_history[0].id


class TestEvaluateGeneration:
    """Test cases for a single generation evaluation"""

    def test_first_seen_wins_ties(self):
        """測試本代最佳平手時取先出現者，排序保持穩定"""
        problem = make_problem(evaluate=lambda x: x % 2)
        engine = make_engine(problem, population_size=4, elitism=2)
        population = [Individual(solution=s, id=i) for s, i in [(3, 'a'), (4, 'b'), (6, 'c'), (5, 'd')]]

        evaluated = engine.evaluate_generation(population, 0)

        assert evaluated.best_individual.id == 'b'
        assert [ind.id for ind in evaluated.individuals] == ['b', 'c', 'a', 'd']

    def test_cache_holds_top_elites(self):
        """測試快取只保留本代前 elitism 名"""
        problem = make_problem()
        engine = make_engine(problem, population_size=4, elitism=2)
        population = [Individual(solution=s, id=str(s)) for s in (10, 40, 45, 90)]

        engine.evaluate_generation(population, 0)

        assert engine.elitism_cache == {'40': 2, '45': 3}

    def test_cached_fitness_zero_is_hit(self):
        """測試快取中適應度為 0 的個體仍視為命中"""
        problem = make_problem()
        engine = make_engine(problem, population_size=2, elitism=1)
        population = [Individual(solution=TARGET, id='best'), Individual(solution=0, id='other')]

        engine.evaluate_generation(population, 0)
        calls = problem.evaluate.calls
        engine.evaluate_generation(population, 1)

        assert problem.evaluate.calls == calls + 1
        assert engine.cache_hits == 1

    def test_empty_population(self):
        """測試空族群"""
        engine = make_engine()
        with pytest.raises(ValueError):
            engine.evaluate_generation([], 0)

    def test_next_generation_keeps_elite_ids(self):
        """測試下一代保留菁英 ID，子代為新 ID"""
        engine = make_engine(population_size=6, elitism=2)
        population = engine.generate_initial_population()
        evaluated = engine.evaluate_generation(population, 0)

        offspring = engine.next_generation(evaluated)

        elite_ids = [ind.id for ind in evaluated.individuals[:2]]
        assert len(offspring) == 6
        assert [ind.id for ind in offspring[:2]] == elite_ids
        assert not {ind.id for ind in offspring[2:]} & {ind.id for ind in population}


class TestOperatorContracts:
    """Test cases for operator contract violations"""

    def test_select_wrong_count(self):
        """測試 select 回傳數量錯誤"""
        problem = make_problem(select=lambda population, count, rng: list(population[:1]))
        engine = make_engine(problem)

        with pytest.raises(OperatorContractError, match="select"):
            engine.run()

    def test_crossover_wrong_arity(self):
        """測試 crossover 未回傳兩個子代"""
        problem = make_problem(crossover=lambda a, b, rng: (a,))
        engine = make_engine(problem)

        with pytest.raises(OperatorContractError, match="crossover"):
            engine.run()

    def test_evaluate_non_numeric(self):
        """測試 evaluate 回傳非數值"""
        problem = make_problem(evaluate=lambda x: 'bad')
        engine = make_engine(problem)

        with pytest.raises(OperatorContractError, match="evaluate"):
            engine.run()

    def test_operator_exception_propagates(self):
        """測試算子例外向外傳遞並觸發錯誤事件"""
        def failing_evaluate(solution):
            raise RuntimeError("boom")

        handler = RecordingHandler()
        engine = make_engine(make_problem(evaluate=failing_evaluate), handlers=[handler])

        with pytest.raises(RuntimeError, match="boom"):
            engine.run()

        assert handler.events == ['evolution_start', 'evolution_error']
        assert engine.is_running is False

    def test_missing_operator(self):
        """測試問題缺少算子"""
        class Incomplete:
            def generate_solution(self, rng):
                return 0

        config = EngineConfig(population_size=4, max_generations=1)
        engine = EvolutionEngine(config, Incomplete())

        with pytest.raises(TypeError, match="mutate"):
            engine.run()


class TestEngineHandlers:
    """Test cases for event handlers"""

    def test_event_order(self):
        """測試事件順序"""
        handler = RecordingHandler()
        engine = make_engine(max_generations=2, handlers=[handler])
        engine.run()

        assert handler.events == ['evolution_start'] + ['generation_complete'] * 3 + ['evolution_complete']
        assert handler.engine is engine

    def test_handler_error_does_not_stop_run(self):
        """測試處理器出錯不影響演化"""
        broken = MagicMock(spec=EventHandler)
        broken.handle_event.side_effect = RuntimeError("handler failure")
        engine = make_engine(max_generations=2)
        engine.handlers.append(broken)

        best = engine.run()

        assert best is not None
        assert broken.handle_event.call_count == 5

    def test_add_handler_rejects_non_handler(self):
        """測試添加非處理器物件"""
        engine = make_engine()
        with pytest.raises(TypeError):
            engine.add_handler(object())

    def test_get_status(self):
        """測試引擎狀態"""
        engine = make_engine(max_generations=2)
        engine.run()
        status = engine.get_status()

        assert status['is_running'] is False
        assert status['current_generation'] == 2
        assert status['elitism_cache_size'] == 3
        assert status['best_fitness'] == engine.best_individual.fitness


class TestCreateEvolutionEngine(unittest.TestCase):
    """Test suite for the configuration-driven engine factory."""

    def setUp(self):
        self.config = {
            'experiment': {'name': 'factory_test'},
            'evolution': {'population_size': 8, 'generations': 3, 'elitism': 2, 'seed': 1},
            'logging': {},
        }

    def test_default_handlers(self):
        """測試預設只加入日誌處理器"""
        engine = create_evolution_engine(self.config, make_problem())

        self.assertEqual([h.name for h in engine.handlers], ['logging_handler'])
        self.assertEqual(engine.population_size, 8)
        self.assertEqual(engine.max_generations, 3)

    def test_progress_bar_handler(self):
        """測試進度條處理器"""
        self.config['logging'] = {'progress_bar': True, 'parameters': {'progress_bar': {'disable': True}}}
        engine = create_evolution_engine(self.config, make_problem())
        engine.run()

        self.assertEqual([h.name for h in engine.handlers], ['logging_handler', 'progress_bar_handler'])
        self.assertIsNone(engine.handlers[1].bar)

    def test_logging_disabled(self):
        """測試關閉日誌處理器"""
        self.config['logging'] = {'enabled': False}
        engine = create_evolution_engine(self.config, make_problem())
        self.assertEqual(engine.handlers, [])

    def test_missing_evolution_section(self):
        """測試缺少 evolution 區段"""
        with self.assertRaises(ConfigurationError):
            create_evolution_engine({'logging': {}}, make_problem())

    def test_dict_config(self):
        """測試直接以字典建立引擎"""
        engine = EvolutionEngine({'population_size': 4, 'generations': 2, 'direction': 'max'}, make_problem('max'))
        self.assertEqual(engine.direction, 'max')
        self.assertEqual(engine.elitism, 0)


if __name__ == '__main__':
    unittest.main()
