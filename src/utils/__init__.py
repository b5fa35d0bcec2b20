"""
Utilities package - Helper functions and classes.

Contains implementations for:
- Metrics calculation
- Logging utilities
"""

from .metrics import MetricsCollector
from .logger import SimulationLogger

__all__ = [
    'MetricsCollector',
    'SimulationLogger'
]
