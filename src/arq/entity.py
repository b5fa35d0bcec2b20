"""
Entity identifiers and the network interface the entities talk to.

The protocol entities never touch the channel, the application or a
clock directly. Everything goes through an object with the four methods
of NetworkInterface, which the emulator (or a test double) provides.
"""

from enum import IntEnum


class Entity(IntEnum):
    """Entity identifiers."""
    A = 0  # sender
    B = 1  # receiver


class NetworkInterface:
    """
    Capabilities the environment provides to an entity.

    Subclasses implement all four methods; none of them return a value
    and none of them call back into the entity synchronously.
    """

    def to_layer3(self, entity: Entity, packet):
        """Hand a packet to the channel for eventual delivery to the peer."""
        raise NotImplementedError

    def to_layer5(self, entity: Entity, payload: bytes):
        """Deliver an in-order payload to the application above entity."""
        raise NotImplementedError

    def start_timer(self, entity: Entity, increment: float):
        """Start (or replace) the entity's single countdown timer."""
        raise NotImplementedError

    def stop_timer(self, entity: Entity):
        """Cancel the entity's countdown timer."""
        raise NotImplementedError
