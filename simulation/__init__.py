"""
Simulation package - End-to-end runs and sweeps.

Contains:
- Simulator wiring sender, receiver and emulator
- Batch runner for parameter sweeps
"""

from .simulator import Simulator, SimulatorConfig
from .runner import BatchRunner

__all__ = [
    'Simulator',
    'SimulatorConfig',
    'BatchRunner'
]
