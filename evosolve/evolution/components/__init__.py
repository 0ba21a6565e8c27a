"""
組件化演化計算框架

將演化過程中的各個部分 (選擇、交配、變異、終止、事件處理) 抽象成
可插拔的組件，由同一個演化引擎協調。
"""

from typing import Any, Dict, Optional
import logging

from ...utils.random_source import RandomSource
from .config import EngineConfig
from .engine import EvolutionEngine
from .exceptions import ConfigurationError, OperatorContractError
from .individual import EvaluatedIndividual, EvaluatedPopulation, Individual, IndividualRecord
from .problem import Problem, ProblemDefinition
from .result import EvolutionResult

logger = logging.getLogger(__name__)

HANDLER_MAPPINGS = {
    'logging_handler': 'LoggingHandler',
    'progress_bar': 'ProgressBarHandler',
}


def _create_handler(handler_name: str, config: Dict[str, Any]):
    """
    根據配置動態創建事件處理器

    Args:
        handler_name: 處理器名稱 ('logging_handler' 或 'progress_bar')
        config: 配置字典

    Returns:
        創建的處理器實例

    Raises:
        ConfigurationError: 處理器不存在或參數錯誤
    """
    if handler_name not in HANDLER_MAPPINGS:
        available = list(HANDLER_MAPPINGS.keys())
        raise ConfigurationError(f"不支持的處理器: {handler_name}。可用處理器: {available}")

    from . import handlers as handlers_module

    handler_class = getattr(handlers_module, HANDLER_MAPPINGS[handler_name])

    logging_config = config.get('logging', {})
    if handler_name == 'logging_handler':
        handler_params = {
            'log_every': logging_config.get('log_every', 1),
            'level': logging_config.get('level', 'INFO'),
        }
    else:
        handler_params = {'desc': config.get('experiment', {}).get('name', 'Evolution')}
    handler_params.update(logging_config.get('parameters', {}).get(handler_name, {}))

    try:
        return handler_class(**handler_params)
    except TypeError as e:
        raise ConfigurationError(f"創建處理器 {handler_name} 失敗: {e}. 參數: {handler_params}")


def create_evolution_engine(config: Dict[str, Any], problem: Problem,
                            random_source: Optional[RandomSource] = None) -> EvolutionEngine:
    """
    工廠函數：根據配置創建演化引擎

    Args:
        config: 配置字典 (需包含 'evolution' 區段，'logging' 區段可選)
        problem: 符合 Problem 介面的問題
        random_source: 隨機來源 (預設以 evolution.seed 建立)

    Returns:
        配置好的演化引擎實例

    Raises:
        ConfigurationError: 如果配置參數無效
    """
    if 'evolution' not in config:
        raise ConfigurationError("配置文件缺少必要部分: evolution")

    engine_config = EngineConfig.from_dict(config)
    engine = EvolutionEngine(engine_config, problem, random_source=random_source)

    logging_config = config.get('logging', {})
    if logging_config.get('enabled', True):
        engine.add_handler(_create_handler('logging_handler', config))
    if logging_config.get('progress_bar', False):
        engine.add_handler(_create_handler('progress_bar', config))

    logger.info(f"演化引擎創建完成: 處理器數={len(engine.handlers)}")
    return engine


__all__ = [
    'EngineConfig',
    'EvolutionEngine',
    'EvolutionResult',
    'Individual',
    'EvaluatedIndividual',
    'EvaluatedPopulation',
    'IndividualRecord',
    'Problem',
    'ProblemDefinition',
    'ConfigurationError',
    'OperatorContractError',
    'create_evolution_engine',
]
