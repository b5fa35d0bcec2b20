"""
Selective Repeat Sender

This module implements the sending entity (A) of the Selective Repeat
protocol: sliding window management, per-packet acknowledgment tracking
and timeout-driven retransmission of the oldest unacknowledged packet.
"""

from typing import Optional, List
from dataclasses import dataclass

from config import WINDOWSIZE, SEQSPACE, TIMEOUT
from .entity import Entity, NetworkInterface
from .packet import Message, Packet, is_corrupted
from .seqspace import in_window, seq_add, seq_distance, validate_seqspace
from src.utils.logger import SimulationLogger, get_logger


@dataclass
class SendWindow:
    """
    Sliding window for the sender.

    Attributes:
        base: Oldest unacknowledged sequence number
        nextseqnum: Next sequence number to assign (right edge, exclusive)
        size: Window size
        seqspace: Size of the sequence space
    """
    base: int = 0
    nextseqnum: int = 0
    size: int = WINDOWSIZE
    seqspace: int = SEQSPACE

    @property
    def outstanding(self) -> int:
        """Number of sent, unacknowledged sequence numbers."""
        return seq_distance(self.base, self.nextseqnum, self.seqspace)

    @property
    def available_slots(self) -> int:
        """Number of available slots in the window."""
        return self.size - self.outstanding

    @property
    def is_full(self) -> bool:
        """Check if window is full."""
        return self.outstanding >= self.size

    @property
    def is_empty(self) -> bool:
        """Check if nothing is outstanding."""
        return self.base == self.nextseqnum

    def in_window(self, seq_num: int) -> bool:
        """Check if seq_num is in the circular range [base, nextseqnum)."""
        return in_window(seq_num, self.base, self.outstanding, self.seqspace)


class SRSender:
    """
    Selective Repeat Sender (entity A).

    Driven entirely by the network through submit(), on_packet_arrived()
    and on_timer_fired(). The single timer always tracks the packet at
    the window base.

    Attributes:
        network: Channel, application and timer capabilities
        window: Cursor state
        packets: Last packet sent for each sequence number
        acked: Per-slot acknowledged flag
    """

    def __init__(
        self,
        network: NetworkInterface,
        window_size: int = WINDOWSIZE,
        seqspace: int = SEQSPACE,
        timeout: float = TIMEOUT,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize SR sender.

        Args:
            network: Object providing to_layer3/start_timer/stop_timer
            window_size: Send window size
            seqspace: Sequence number space size
            timeout: Retransmission timeout
            logger: Logger (shared instance if None)
        """
        validate_seqspace(window_size, seqspace)
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")

        self.network = network
        self.window_size = window_size
        self.seqspace = seqspace
        self.timeout = timeout
        self.logger = logger or get_logger()
        self.entity = Entity.A

        self.init()

    def init(self):
        """Reset the sender to its initial state. No timer is running."""
        self.window = SendWindow(size=self.window_size, seqspace=self.seqspace)
        self.packets: List[Optional[Packet]] = [None] * self.seqspace
        self.acked: List[bool] = [False] * self.seqspace

        # Statistics
        self.packets_sent = 0
        self.packets_resent = 0
        self.window_full = 0
        self.acks_received = 0
        self.new_acks = 0
        self.corrupted_acks = 0
        self.duplicate_acks = 0
        self.stale_acks = 0

    reset = init

    @property
    def base(self) -> int:
        return self.window.base

    @property
    def nextseqnum(self) -> int:
        return self.window.nextseqnum

    def submit(self, message: Message) -> bool:
        """
        Send a new application message if the window has room.

        Args:
            message: Message from the application layer

        Returns:
            True if the message was sent, False if the window is full
            (the message is dropped)
        """
        if self.window.is_full:
            self.window_full += 1
            self.logger.window_full(self.entity.name)
            return False

        seqnum = self.window.nextseqnum
        packet = Packet.create_data_packet(seqnum, message)

        self.packets[seqnum] = packet
        self.acked[seqnum] = False

        self.logger.packet_sent(self.entity.name, seqnum)
        self.network.to_layer3(self.entity, packet)
        self.packets_sent += 1

        if self.window.is_empty:
            self.network.start_timer(self.entity, self.timeout)

        self.window.nextseqnum = seq_add(seqnum, 1, self.seqspace)
        return True

    def on_packet_arrived(self, packet: Packet):
        """
        Process an ACK from the channel.

        Corrupted, stale and duplicate ACKs change nothing, including
        the timer.

        Args:
            packet: Packet from layer 3
        """
        if is_corrupted(packet):
            self.corrupted_acks += 1
            self.logger.corrupted(self.entity.name, "ACK")
            return

        self.acks_received += 1
        acknum = packet.acknum

        if not self.window.in_window(acknum):
            self.stale_acks += 1
            self.logger.debug(f"ACK {acknum} is outside of current window, ignoring",
                              self.entity.name)
            return

        if self.acked[acknum]:
            self.duplicate_acks += 1
            self.logger.debug(f"Duplicate ACK {acknum} received, do nothing",
                              self.entity.name)
            return

        self.acked[acknum] = True
        self.new_acks += 1
        self.logger.ack_received(self.entity.name, acknum)

        self._slide_window()

        self.network.stop_timer(self.entity)
        if not self.window.is_empty:
            self.network.start_timer(self.entity, self.timeout)

    def on_timer_fired(self):
        """Restart the timer and resend the packet at the window base."""
        if self.window.is_empty:
            self.logger.warning("Timer fired with nothing outstanding", self.entity.name)
            return

        base = self.window.base
        self.logger.timeout(self.entity.name, base)
        self.network.start_timer(self.entity, self.timeout)

        self.network.to_layer3(self.entity, self.packets[base])
        self.packets_resent += 1

    def _slide_window(self):
        """Slide the base past the contiguous acknowledged prefix."""
        while not self.window.is_empty and self.acked[self.window.base]:
            base = self.window.base
            # The slot gets reused one sequence space later
            self.acked[base] = False
            self.packets[base] = None
            self.window.base = seq_add(base, 1, self.seqspace)

        self.logger.window_update(self.entity.name, self.window.base,
                                  self.window.nextseqnum)

    def get_window_state(self) -> dict:
        """Get current window state."""
        outstanding = [
            seq_add(self.window.base, i, self.seqspace)
            for i in range(self.window.outstanding)
        ]
        return {
            'base': self.window.base,
            'nextseqnum': self.window.nextseqnum,
            'size': self.window.size,
            'available': self.window.available_slots,
            'outstanding': outstanding,
            'acked': [seq for seq in outstanding if self.acked[seq]]
        }

    def get_statistics(self) -> dict:
        """Get sender statistics."""
        return {
            'packets_sent': self.packets_sent,
            'packets_resent': self.packets_resent,
            'window_full': self.window_full,
            'acks_received': self.acks_received,
            'new_acks': self.new_acks,
            'corrupted_acks': self.corrupted_acks,
            'duplicate_acks': self.duplicate_acks,
            'stale_acks': self.stale_acks
        }
