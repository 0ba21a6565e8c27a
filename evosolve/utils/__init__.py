"""
Utility Functions
"""
from .random_source import RandomSource

__all__ = [
    'RandomSource',
]
