"""
演化引擎配置

封裝引擎在整個生命週期內固定不變的參數，並支援從 JSON 配置字典
(`config['evolution']` 區段) 建立。
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from .exceptions import ConfigurationError

DIRECTIONS = ('min', 'max')


@dataclass(frozen=True)
class EngineConfig:
    """
    引擎配置

    Attributes:
        population_size: 每個世代的族群大小 (>= 2)
        max_generations: 最大世代數 (>= 0)
        elitism: 每代直接保留的菁英數量 (0 <= elitism <= population_size)
        direction: 最佳化方向 'min' (越小越好) 或 'max' (越大越好)
        seed: 隨機種子 (None 表示不固定)
    """

    population_size: int
    max_generations: int
    elitism: int = 0
    direction: str = 'min'
    seed: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.population_size, int) or self.population_size < 2:
            raise ConfigurationError(f"population_size must be an integer >= 2, got {self.population_size!r}")

        if not isinstance(self.max_generations, int) or self.max_generations < 0:
            raise ConfigurationError(f"max_generations must be an integer >= 0, got {self.max_generations!r}")

        if not isinstance(self.elitism, int) or not 0 <= self.elitism <= self.population_size:
            raise ConfigurationError(
                f"elitism must be an integer in [0, {self.population_size}], got {self.elitism!r}"
            )

        if self.direction not in DIRECTIONS:
            raise ConfigurationError(f"direction must be 'min' or 'max', got {self.direction!r}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'EngineConfig':
        """
        從配置字典建立引擎配置

        Args:
            config: 完整配置 (含 'evolution' 區段) 或 evolution 區段本身

        Returns:
            EngineConfig 實例

        Raises:
            ConfigurationError: 缺少必要欄位
        """
        if not isinstance(config, dict):
            raise ConfigurationError(f"配置必須是字典: {type(config)}")

        section = config.get('evolution', config)

        missing = [key for key in ('population_size', 'generations') if key not in section]
        if missing:
            raise ConfigurationError(f"evolution 配置缺少必要欄位: {missing}")

        return cls(
            population_size=section['population_size'],
            max_generations=section['generations'],
            elitism=section.get('elitism', 0),
            direction=section.get('direction', 'min'),
            seed=section.get('seed'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """轉換為字典格式"""
        return asdict(self)
