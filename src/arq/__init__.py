"""
ARQ package - Selective Repeat protocol components.

Contains implementations for:
- Packet structure and integrity codec
- Circular sequence number arithmetic
- Sender with window management
- Receiver with out-of-order buffering
- Per-entity countdown timer
"""

from .entity import Entity, NetworkInterface
from .packet import Message, Packet, compute_checksum, is_corrupted
from .sender import SRSender
from .receiver import SRReceiver
from .timer import CountdownTimer, TimerState

__all__ = [
    'Entity',
    'NetworkInterface',
    'Message',
    'Packet',
    'compute_checksum',
    'is_corrupted',
    'SRSender',
    'SRReceiver',
    'CountdownTimer',
    'TimerState'
]
