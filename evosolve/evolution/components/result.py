"""
演化結果類

封裝演化過程的結果，包括歷史最佳個體、演化歷史、每代統計等。
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass

import pandas as pd
from deap import tools

from .individual import EvaluatedIndividual, IndividualRecord


@dataclass
class EvolutionResult:
    """
    演化結果封裝類

    包含歷史最佳記錄、每代最佳的演化歷史、最終族群、
    deap Logbook 形式的每代統計與配置參數。
    """

    # 基本信息
    engine_id: str
    config: Dict[str, Any]

    # 演化結果
    best_individual: IndividualRecord
    final_population: List[EvaluatedIndividual]
    history: List[IndividualRecord]

    # 統計信息
    logbook: tools.Logbook
    generations_completed: int
    total_evaluations: int
    cache_hits: int = 0
    execution_time: Optional[float] = None

    @property
    def direction(self) -> str:
        return self.config.get('direction', 'min')

    @property
    def best_fitness(self):
        """歷史最佳適應度值"""
        return self.best_individual.fitness

    @property
    def best_solution(self):
        return self.best_individual.solution

    @property
    def convergence_generation(self) -> Optional[int]:
        """收斂世代 (首次出現歷史最佳適應度的世代)"""
        for record in self.history:
            if abs(record.fitness - self.best_fitness) < 1e-10:
                return record.generation
        return None

    @property
    def improvement_rate(self) -> float:
        """改進率 (依最佳化方向，最終最佳相對於第 0 代最佳的改進)"""
        if len(self.history) < 2:
            return 0.0

        initial_fitness = self.history[0].fitness
        if self.direction == 'min':
            improvement = initial_fitness - self.best_fitness
        else:
            improvement = self.best_fitness - initial_fitness

        if initial_fitness == 0:
            return float('inf') if improvement > 0 else 0.0

        return improvement / abs(initial_fitness)

    def get_fitness_statistics(self) -> Dict[str, Any]:
        """獲取適應度統計信息"""
        if not self.logbook:
            return {}

        initial_stats = self.logbook[0]
        final_stats = self.logbook[-1]

        return {
            'initial_best': self.history[0].fitness if self.history else None,
            'initial_avg': initial_stats.get('avg'),
            'final_best': self.history[-1].fitness if self.history else None,
            'final_avg': final_stats.get('avg'),
            'best_ever': self.best_fitness,
            'improvement_rate': self.improvement_rate,
            'convergence_generation': self.convergence_generation,
        }

    def get_summary(self) -> Dict[str, Any]:
        """獲取結果摘要"""
        return {
            'engine_id': self.engine_id,
            'generations_completed': self.generations_completed,
            'total_evaluations': self.total_evaluations,
            'cache_hits': self.cache_hits,
            'population_size': len(self.final_population),
            'best_fitness': self.best_fitness,
            'best_generation': self.best_individual.generation,
            'execution_time': self.execution_time,
            'fitness_statistics': self.get_fitness_statistics(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """轉換為字典格式"""
        return {
            'engine_id': self.engine_id,
            'config': self.config,
            'best_individual': {
                'id': self.best_individual.id,
                'generation': self.best_individual.generation,
                'fitness': self.best_fitness,
                'solution': self.best_solution,
            },
            'generations_completed': self.generations_completed,
            'total_evaluations': self.total_evaluations,
            'cache_hits': self.cache_hits,
            'execution_time': self.execution_time,
            'history': [
                {'generation': record.generation, 'id': record.id, 'fitness': record.fitness}
                for record in self.history
            ],
            'summary': self.get_summary(),
        }

    def history_frame(self) -> pd.DataFrame:
        """
        演化歷史表格

        Returns:
            每代一列的 DataFrame，包含當代最佳 (id, fitness) 與 Logbook 統計欄位
        """
        history = pd.DataFrame(
            [{'generation': r.generation, 'id': r.id, 'best_fitness': r.fitness} for r in self.history],
            columns=['generation', 'id', 'best_fitness'],
        )

        if not self.logbook:
            return history

        stats = pd.DataFrame(list(self.logbook)).rename(columns={'gen': 'generation'})
        return history.merge(stats, on='generation', how='left')
