"""
演化引擎核心類

這個模組實現了演化引擎的核心邏輯：世代循環、菁英保留與適應度快取、
選擇 / 交配 / 變異的協調，以及終止判斷。問題相關的部分全部透過
`Problem` 介面注入，引擎從不檢查解的內部結構。

每代流程:
1. 評估：菁英快取命中則沿用，否則呼叫 evaluate
2. 記錄本代最佳、排序族群、重建菁英快取、記錄統計、回報進度
3. 終止判斷 (世代上限或問題的終止條件)
4. 產生下一代：菁英原樣保留 + 選擇 → 洗牌 → 配對交配 → 各自變異
"""

from typing import Dict, List, Any, Optional, Generic, Sequence, TypeVar
from datetime import datetime
import logging
import numbers
import time
import uuid

import numpy as np
from deap import tools

from ...utils.random_source import RandomSource
from .config import EngineConfig
from .exceptions import OperatorContractError
from .handlers.base import EventHandler
from .individual import EvaluatedIndividual, EvaluatedPopulation, Individual, IndividualRecord, Number
from .problem import Problem
from .result import EvolutionResult
from .strategies.base import compare_fitness

logger = logging.getLogger(__name__)

S = TypeVar('S')

REQUIRED_OPERATORS = ('generate_solution', 'evaluate', 'crossover', 'mutate', 'select',
                      'is_finished', 'on_progress')


class EvolutionEngine(Generic[S]):
    """
    演化引擎

    這個類是演化計算的核心，負責：
    1. 管理族群與世代循環
    2. 以菁英快取避免重複評估未改變的個體
    3. 協調問題提供的選擇、交配、變異算子
    4. 記錄演化歷史與每代統計
    5. 通知事件處理器並返回歷史最佳記錄
    """

    def __init__(self, config: EngineConfig, problem: Problem[S],
                 random_source: Optional[RandomSource] = None,
                 handlers: Optional[Sequence[EventHandler]] = None):
        """
        初始化演化引擎

        Args:
            config: 引擎配置 (EngineConfig 或配置字典)
            problem: 符合 Problem 介面的問題
            random_source: 隨機來源 (預設以 config.seed 建立)
            handlers: 事件處理器列表
        """
        if isinstance(config, dict):
            config = EngineConfig.from_dict(config)

        self.config = config
        self.problem = problem
        self.rng = random_source if random_source is not None else RandomSource(config.seed)
        self.engine_id = str(uuid.uuid4())[:8]
        self.created_at = datetime.now()

        # 演化參數
        self.population_size = config.population_size
        self.max_generations = config.max_generations
        self.elitism = config.elitism
        self.direction = config.direction

        # 演化狀態
        self.current_generation = 0
        self.evolution_history: List[IndividualRecord[S]] = []
        self.elitism_cache: Dict[str, Number] = {}
        self.best_individual: Optional[IndividualRecord[S]] = None
        self.total_evaluations = 0
        self.cache_hits = 0
        self.is_running = False
        self.result: Optional[EvolutionResult] = None

        # 每代統計
        self.statistics = tools.Statistics(key=lambda ind: ind.fitness)
        self.statistics.register('min', np.min)
        self.statistics.register('max', np.max)
        self.statistics.register('avg', np.mean)
        self.statistics.register('std', np.std)
        self.logbook = tools.Logbook()
        self.logbook.header = ['gen', 'evals', 'cache_hits'] + self.statistics.fields

        self.handlers: List[EventHandler] = []
        for handler in handlers or []:
            self.add_handler(handler)

        logger.info(f"演化引擎已創建 (ID: {self.engine_id})")
        logger.info(f"配置: 族群={self.population_size}, 世代={self.max_generations}, "
                    f"菁英={self.elitism}, 方向={self.direction}, 種子={self.rng.seed}")

    def add_handler(self, handler: EventHandler):
        """
        添加事件處理器

        Args:
            handler: 處理器實例
        """
        if not isinstance(handler, EventHandler):
            raise TypeError(f"處理器必須繼承自 EventHandler: {type(handler)}")

        self.handlers.append(handler)
        handler.set_engine(self)
        logger.debug(f"已添加事件處理器: {handler.__class__.__name__}")

    def _validate_problem(self):
        """驗證問題提供了所有必要算子"""
        missing = [name for name in REQUIRED_OPERATORS if not callable(getattr(self.problem, name, None))]
        if missing:
            raise TypeError(f"問題缺少必要的算子: {missing}")

    def _fire_event(self, event_name: str, **kwargs):
        """
        觸發事件，通知所有處理器

        處理器本身出錯只記錄日誌，不中斷演化。
        """
        for handler in self.handlers:
            try:
                handler.handle_event(event_name, **kwargs)
            except Exception as e:
                logger.error(f"事件處理器 {handler.__class__.__name__} 處理 {event_name} 事件時出錯: {e}")

    def compare_fitness(self, more_fit: Number, less_fit: Number) -> bool:
        """more_fit 是否嚴格優於 less_fit ('min' 為 <，'max' 為 >)"""
        return compare_fitness(more_fit, less_fit, self.direction)

    def _new_id(self) -> str:
        return self.rng.uuid4()

    def generate_initial_population(self) -> List[Individual[S]]:
        """
        產生初始族群 (可能包含重複的解)

        Returns:
            population_size 個帶新 ID 的個體
        """
        population = []
        for _ in range(self.population_size):
            solution = self.problem.generate_solution(self.rng)
            population.append(Individual(solution=solution, id=self._new_id()))
        return population

    def _fitness_of(self, individual: Individual[S]) -> Number:
        if individual.id in self.elitism_cache:
            return self.elitism_cache[individual.id]

        fitness = self.problem.evaluate(individual.solution)
        if not isinstance(fitness, numbers.Real):
            raise OperatorContractError(f"evaluate 必須回傳數值，得到 {type(fitness).__name__}: {fitness!r}")
        return fitness

    def evaluate_generation(self, population: Sequence[Individual[S]], generation: int) -> EvaluatedPopulation[S]:
        """
        評估一個世代

        Args:
            population: 本代族群
            generation: 世代編號

        Returns:
            排序後 (最佳在前) 的已評估族群與本代最佳記錄
        """
        if not population:
            raise ValueError(f"第 {generation} 世代族群為空")

        evaluated: List[EvaluatedIndividual[S]] = []
        generation_best: Optional[EvaluatedIndividual[S]] = None
        fresh_evaluations = 0
        hits = 0

        for individual in population:
            cached = individual.id in self.elitism_cache
            fitness = self._fitness_of(individual)
            if cached:
                hits += 1
            else:
                fresh_evaluations += 1

            current = EvaluatedIndividual(solution=individual.solution, id=individual.id, fitness=fitness)
            evaluated.append(current)

            # 平手保留先出現者
            if generation_best is None or self.compare_fitness(fitness, generation_best.fitness):
                generation_best = current

        best_record = IndividualRecord.from_evaluated(generation_best, generation)
        self.evolution_history.append(best_record)

        evaluated.sort(key=lambda ind: ind.fitness, reverse=self.direction == 'max')

        # 快取整個重建，只保留本代前 elitism 名
        self.elitism_cache = {ind.id: ind.fitness for ind in evaluated[:self.elitism]}

        self.total_evaluations += fresh_evaluations
        self.cache_hits += hits
        self.logbook.record(gen=generation, evals=fresh_evaluations, cache_hits=hits,
                            **self.statistics.compile(evaluated))

        evaluated_population = EvaluatedPopulation(individuals=evaluated, best_individual=best_record)
        self.problem.on_progress(generation, evaluated_population)

        logger.debug(f"第 {generation} 世代評估完成: 新評估={fresh_evaluations}, 快取命中={hits}, "
                     f"本代最佳={best_record.fitness}")
        return evaluated_population

    def next_generation(self, evaluated_population: EvaluatedPopulation[S]) -> List[Individual[S]]:
        """
        產生下一代族群

        Args:
            evaluated_population: 已排序的本代評估結果

        Returns:
            菁英 (保留原 ID) + 子代 (新 ID)，共 population_size 個
        """
        individuals = evaluated_population.individuals
        new_population: List[Individual[S]] = [ind.to_individual() for ind in individuals[:self.elitism]]

        selection_count = self.population_size - self.elitism
        if selection_count > 0:
            selected = list(self.problem.select(individuals, selection_count, self.rng))
            if len(selected) != selection_count:
                raise OperatorContractError(
                    f"select 必須回傳 {selection_count} 個個體，實際回傳 {len(selected)} 個"
                )

            # 隨機配對，避免連續勝者的位置偏差
            self.rng.shuffle(selected)
            new_population.extend(self._breed(selected))

        return new_population

    def _breed(self, selected: List[EvaluatedIndividual[S]]) -> List[Individual[S]]:
        """兩兩交配並各自變異；奇數時最後一個原樣通過 (給新 ID)"""
        offspring: List[Individual[S]] = []

        for i in range(0, len(selected), 2):
            parent1 = selected[i]
            if i + 1 >= len(selected):
                offspring.append(Individual(solution=parent1.solution, id=self._new_id()))
                break

            parent2 = selected[i + 1]
            children = self._check_children(
                self.problem.crossover(parent1.solution, parent2.solution, self.rng)
            )
            for child in children:
                mutant = self.problem.mutate(child, self.rng)
                offspring.append(Individual(solution=mutant, id=self._new_id()))

        return offspring

    @staticmethod
    def _check_children(children: Any) -> List[Any]:
        try:
            children = list(children)
        except TypeError:
            raise OperatorContractError(f"crossover 必須回傳兩個子代，得到 {type(children).__name__}")

        if len(children) != 2:
            raise OperatorContractError(f"crossover 必須回傳兩個子代，實際回傳 {len(children)} 個")
        return children

    def _should_stop(self, generation: int) -> bool:
        if generation >= self.max_generations:
            return True
        return bool(self.problem.is_finished(generation, self.best_individual.fitness))

    def _reset_state(self):
        self.current_generation = 0
        self.evolution_history = []
        self.elitism_cache = {}
        self.best_individual = None
        self.total_evaluations = 0
        self.cache_hits = 0
        self.logbook = tools.Logbook()
        self.logbook.header = ['gen', 'evals', 'cache_hits'] + self.statistics.fields
        self.result = None

    def run(self) -> IndividualRecord[S]:
        """
        執行演化直到終止

        Returns:
            所有世代中的最佳記錄 (平手保留較早者)
        """
        logger.info(f"🚀 開始演化過程 (引擎 ID: {self.engine_id})")

        try:
            self._validate_problem()
            self._reset_state()
            self.is_running = True
            start_time = time.perf_counter()
            self._fire_event('evolution_start', engine=self)

            generation = 0
            population = self.generate_initial_population()
            evaluated_population = self.evaluate_generation(population, generation)
            self.best_individual = evaluated_population.best_individual
            self._fire_event('generation_complete',
                             generation=generation,
                             evaluated_population=evaluated_population,
                             best_individual=self.best_individual,
                             engine=self)

            while not self._should_stop(generation):
                generation += 1
                self.current_generation = generation

                population = self.next_generation(evaluated_population)
                evaluated_population = self.evaluate_generation(population, generation)

                if self.compare_fitness(evaluated_population.best_individual.fitness, self.best_individual.fitness):
                    self.best_individual = evaluated_population.best_individual
                    logger.debug(f"在 generation {generation} 發現新的最佳個體: fitness={self.best_individual.fitness}")

                self._fire_event('generation_complete',
                                 generation=generation,
                                 evaluated_population=evaluated_population,
                                 best_individual=self.best_individual,
                                 engine=self)

            self.is_running = False
            self.result = self._create_result(evaluated_population, time.perf_counter() - start_time)
            self._fire_event('evolution_complete', engine=self, result=self.result)

            logger.info(f"✅ 演化完成! 世代={generation}, 最佳適應度={self.best_individual.fitness} "
                        f"(第 {self.best_individual.generation} 世代)")
            return self.best_individual

        except Exception as e:
            self.is_running = False
            self._fire_event('evolution_error', engine=self, error=e)
            logger.error(f"❌ 演化過程出錯: {e}")
            raise

    def _create_result(self, evaluated_population: EvaluatedPopulation[S], execution_time: float) -> EvolutionResult:
        """創建演化結果"""
        return EvolutionResult(
            engine_id=self.engine_id,
            config=self.config.to_dict(),
            best_individual=self.best_individual,
            final_population=list(evaluated_population.individuals),
            history=list(self.evolution_history),
            logbook=self.logbook,
            generations_completed=self.current_generation,
            total_evaluations=self.total_evaluations,
            cache_hits=self.cache_hits,
            execution_time=execution_time,
        )

    def get_status(self) -> Dict[str, Any]:
        """獲取引擎狀態"""
        return {
            'engine_id': self.engine_id,
            'is_running': self.is_running,
            'current_generation': self.current_generation,
            'max_generations': self.max_generations,
            'elitism_cache_size': len(self.elitism_cache),
            'best_fitness': self.best_individual.fitness if self.best_individual else None,
            'total_evaluations': self.total_evaluations,
            'created_at': self.created_at.isoformat(),
        }
