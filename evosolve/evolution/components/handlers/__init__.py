"""
事件處理器模組
"""

from .base import EventHandler
from .logging_handler import LoggingHandler
from .progress_handler import ProgressBarHandler

__all__ = [
    'EventHandler',
    'LoggingHandler',
    'ProgressBarHandler',
]
