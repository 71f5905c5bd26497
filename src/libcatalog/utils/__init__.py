"""
Utility helpers shared across LibCatalog packages.
"""

from .concurrency import gather
from .logging import configure_logging, correlated, get_logger, time_call

__all__ = ["configure_logging", "correlated", "gather", "get_logger", "time_call"]
