"""
演化策略基類

定義所有演化策略的統一接口與共用的適應度比較。
"""

from abc import ABC
from typing import Dict, Any
import logging

from ..exceptions import ConfigurationError
from ..individual import Number

logger = logging.getLogger(__name__)


def compare_fitness(more_fit: Number, less_fit: Number, direction: str) -> bool:
    """
    判斷 more_fit 是否嚴格優於 less_fit

    Args:
        more_fit: 候選較佳的適應度
        less_fit: 比較對象的適應度
        direction: 'min' 或 'max'

    Returns:
        'min' 時為 more_fit < less_fit，'max' 時為 more_fit > less_fit

    Raises:
        ConfigurationError: 方向不是 'min' / 'max'
    """
    if direction == 'min':
        return more_fit < less_fit

    if direction == 'max':
        return more_fit > less_fit

    raise ConfigurationError(f"Invalid optimization direction: {direction!r}")


class EvolutionStrategy(ABC):
    """
    演化策略基類

    策略是可呼叫物件，透過呼叫參數取得 RandomSource，不持有全域狀態。
    """

    def __init__(self):
        self.name = "base_strategy"
        self.stats: Dict[str, int] = {}

    def _count(self, key: str, amount: int = 1):
        self.stats[key] = self.stats.get(key, 0) + amount

    def get_stats(self) -> Dict[str, Any]:
        """獲取策略統計信息"""
        return dict(self.stats)

    def reset_stats(self):
        self.stats = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
