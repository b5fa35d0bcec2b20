"""
Packet Structure and Integrity Codec

This module defines the application message and the packet exchanged
between the two entities, together with the checksum used by both of
them to detect corruption on the channel.
"""

from dataclasses import dataclass, replace

from config import NOTINUSE, PAYLOAD_SIZE


@dataclass(frozen=True)
class Message:
    """
    Fixed-size application data unit.

    Attributes:
        data: Exactly PAYLOAD_SIZE bytes
    """
    data: bytes

    def __post_init__(self):
        """Validate message size."""
        if len(self.data) != PAYLOAD_SIZE:
            raise ValueError(
                f"Message must be {PAYLOAD_SIZE} bytes, got {len(self.data)}"
            )

    @classmethod
    def from_data(cls, data: bytes) -> 'Message':
        """
        Create a message from application bytes, zero-padding short data.

        Args:
            data: Application bytes (at most PAYLOAD_SIZE)

        Returns:
            Message
        """
        if len(data) > PAYLOAD_SIZE:
            raise ValueError(
                f"Message data too large ({len(data)} > {PAYLOAD_SIZE} bytes)"
            )
        return cls(data=bytes(data).ljust(PAYLOAD_SIZE, b'\x00'))

    @classmethod
    def filled(cls, char: str) -> 'Message':
        """Create a message made of one repeated character ('aaaa...')."""
        return cls(data=char.encode('ascii') * PAYLOAD_SIZE)


@dataclass
class Packet:
    """
    Packet exchanged over the channel.

    Attributes:
        seqnum: Sequence number, NOTINUSE for pure ACKs
        acknum: Acknowledged sequence number, NOTINUSE for data packets
        payload: PAYLOAD_SIZE bytes
        checksum: Integrity value stamped at send time
    """

    seqnum: int
    acknum: int
    payload: bytes = bytes(PAYLOAD_SIZE)
    checksum: int = 0

    @property
    def is_ack(self) -> bool:
        """Check if this is a pure ACK."""
        return self.seqnum == NOTINUSE

    def stamp(self) -> 'Packet':
        """Recompute and store the checksum. Returns self."""
        self.checksum = compute_checksum(self)
        return self

    def copy(self) -> 'Packet':
        """Independent copy (the channel corrupts copies, never originals)."""
        return replace(self)

    @classmethod
    def create_data_packet(cls, seqnum: int, message: Message) -> 'Packet':
        """
        Create a DATA packet carrying a message.

        Args:
            seqnum: Sequence number
            message: Application message

        Returns:
            Data packet with a valid checksum
        """
        return cls(
            seqnum=seqnum,
            acknum=NOTINUSE,
            payload=bytes(message.data)
        ).stamp()

    @classmethod
    def create_ack_packet(cls, acknum: int) -> 'Packet':
        """
        Create an ACK packet with a zeroed payload.

        Args:
            acknum: Acknowledged sequence number

        Returns:
            ACK packet with a valid checksum
        """
        return cls(
            seqnum=NOTINUSE,
            acknum=acknum,
            payload=bytes(PAYLOAD_SIZE)
        ).stamp()

    def __repr__(self) -> str:
        kind = "ACK" if self.is_ack else "DATA"
        return (f"Packet(type={kind}, seq={self.seqnum}, "
                f"ack={self.acknum}, checksum={self.checksum})")


def compute_checksum(packet: Packet) -> int:
    """
    Compute the checksum of a packet.

    The channel overwrites fields of a packet but never its stored
    checksum, so an arithmetic sum over seqnum, acknum and every payload
    byte changes whenever one of them is altered.

    Args:
        packet: Packet to checksum

    Returns:
        seqnum + acknum + sum of payload bytes
    """
    return packet.seqnum + packet.acknum + sum(packet.payload)


def is_corrupted(packet: Packet) -> bool:
    """Check if the stored checksum disagrees with the packet's fields."""
    return packet.checksum != compute_checksum(packet)
