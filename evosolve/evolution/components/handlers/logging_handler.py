"""
日誌處理器 - 以 logging 記錄演化進度
"""
import logging

from .base import EventHandler

logger = logging.getLogger(__name__)


class LoggingHandler(EventHandler):
    """每 log_every 代輸出一次世代摘要"""

    def __init__(self, log_every: int = 1, level: str = 'INFO', **kwargs):
        """
        初始化日誌處理器

        Args:
            log_every: 輸出間隔 (世代數)
            level: 日誌等級名稱
        """
        super().__init__()
        self.name = "logging_handler"
        self.log_every = max(1, int(log_every))
        self.level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        if not isinstance(self.level, int):
            self.level = logging.INFO

    def on_evolution_start(self, engine, **kwargs):
        logger.log(self.level, f"🚀 演化開始: 族群={engine.population_size}, "
                               f"世代上限={engine.max_generations}, 菁英={engine.elitism}, "
                               f"方向={engine.direction}")

    def on_generation_complete(self, generation: int, evaluated_population, best_individual, **kwargs):
        if generation % self.log_every != 0:
            return

        logger.log(self.level, f"🔄 第 {generation} 世代: 本代最佳={evaluated_population.best_individual.fitness}, "
                               f"歷史最佳={best_individual.fitness}")

    def on_evolution_complete(self, result, **kwargs):
        logger.log(self.level, f"✅ 演化完成: 世代={result.generations_completed}, "
                               f"最佳適應度={result.best_fitness}, 評估次數={result.total_evaluations}")

    def on_evolution_error(self, error, **kwargs):
        logger.error(f"❌ 演化過程出錯: {error}")
