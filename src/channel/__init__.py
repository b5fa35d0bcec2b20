"""
Channel package - The network the entities run over.

Contains implementations for:
- Discrete-event network emulator
- Gilbert-Elliott burst loss model
"""

from .gilbert_elliot import GilbertElliottChannel, ChannelState
from .emulator import NetworkEmulator, EmulatorConfig

__all__ = [
    'GilbertElliottChannel',
    'ChannelState',
    'NetworkEmulator',
    'EmulatorConfig'
]
