"""
Selective Repeat Receiver

This module implements the receiving entity (B) of the Selective Repeat
protocol: individual acknowledgment, out-of-order buffering and in-order
delivery to the application layer.
"""

from typing import Optional, List

from config import WINDOWSIZE, SEQSPACE
from .entity import Entity, NetworkInterface
from .packet import Message, Packet, is_corrupted
from .seqspace import in_window, is_valid_seq, seq_add, validate_seqspace
from src.utils.logger import SimulationLogger, get_logger


class SRReceiver:
    """
    Selective Repeat Receiver (entity B).

    Buffers every in-window packet, acknowledges each one individually
    and delivers only the contiguous run starting at expected_seqnum.

    Attributes:
        network: Channel and application capabilities
        recv_buffer: Received-but-undelivered packet per sequence number
        received: Per-slot received flag
        expected_seqnum: Next sequence number the application is owed
    """

    def __init__(
        self,
        network: NetworkInterface,
        window_size: int = WINDOWSIZE,
        seqspace: int = SEQSPACE,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize SR receiver.

        Args:
            network: Object providing to_layer3/to_layer5
            window_size: Receive window size
            seqspace: Sequence number space size
            logger: Logger (shared instance if None)
        """
        validate_seqspace(window_size, seqspace)

        self.network = network
        self.window_size = window_size
        self.seqspace = seqspace
        self.logger = logger or get_logger()
        self.entity = Entity.B

        self.init()

    def init(self):
        """Reset the receiver to its initial state."""
        self.recv_buffer: List[Optional[Packet]] = [None] * self.seqspace
        self.received: List[bool] = [False] * self.seqspace
        self.expected_seqnum = 0

        # Statistics
        self.packets_received = 0
        self.duplicates = 0
        self.out_of_order = 0
        self.corrupted = 0
        self.invalid = 0
        self.acks_sent = 0
        self.delivered = 0

    reset = init

    def on_packet_arrived(self, packet: Packet):
        """
        Process a data packet from the channel.

        Args:
            packet: Packet from layer 3
        """
        if is_corrupted(packet):
            self.corrupted += 1
            self.logger.corrupted(self.entity.name, "packet, resend ACK")
            # Re-ACK the last in-order packet; the buffer is left alone
            self._send_ack(seq_add(self.expected_seqnum, -1, self.seqspace))
            return

        seqnum = packet.seqnum
        if not is_valid_seq(seqnum, self.seqspace):
            self.invalid += 1
            self.logger.warning(f"Packet with invalid sequence number {seqnum} dropped",
                                self.entity.name)
            return

        self.packets_received += 1

        if self._in_receive_window(seqnum) and not self.received[seqnum]:
            self.recv_buffer[seqnum] = packet
            self.received[seqnum] = True
            if seqnum != self.expected_seqnum:
                self.out_of_order += 1
            self.logger.info(f"Packet {seqnum} is correctly received, send ACK",
                             self.entity.name)
        else:
            # Buffered already, or delivered already and its ACK was lost
            self.duplicates += 1
            self.logger.info(f"Duplicate packet {seqnum} received, resend ACK",
                             self.entity.name)

        self._send_ack(seqnum)
        self._deliver_in_order()

    def on_timer_fired(self):
        """No timer is ever started for B in simplex transfer."""
        self.logger.debug("Timer interrupt ignored", self.entity.name)

    def output(self, message: Message):
        """B never sends data in simplex transfer."""
        self.logger.debug("Output ignored, simplex transfer", self.entity.name)

    def _in_receive_window(self, seqnum: int) -> bool:
        return in_window(seqnum, self.expected_seqnum, self.window_size, self.seqspace)

    def _send_ack(self, acknum: int):
        ack = Packet.create_ack_packet(acknum)
        self.logger.ack_sent(self.entity.name, acknum)
        self.network.to_layer3(self.entity, ack)
        self.acks_sent += 1

    def _deliver_in_order(self):
        """Deliver the longest buffered run starting at expected_seqnum."""
        while self.received[self.expected_seqnum]:
            seqnum = self.expected_seqnum
            packet = self.recv_buffer[seqnum]

            self.logger.delivered(self.entity.name, seqnum)
            self.network.to_layer5(self.entity, packet.payload)
            self.delivered += 1

            self.received[seqnum] = False
            self.recv_buffer[seqnum] = None
            self.expected_seqnum = seq_add(seqnum, 1, self.seqspace)

    def get_window_state(self) -> dict:
        """Get current window state."""
        buffered = [
            seq_add(self.expected_seqnum, i, self.seqspace)
            for i in range(self.seqspace)
            if self.received[seq_add(self.expected_seqnum, i, self.seqspace)]
        ]
        return {
            'expected_seqnum': self.expected_seqnum,
            'size': self.window_size,
            'buffered': buffered
        }

    def get_statistics(self) -> dict:
        """Get receiver statistics."""
        return {
            'packets_received': self.packets_received,
            'duplicates': self.duplicates,
            'out_of_order': self.out_of_order,
            'corrupted': self.corrupted,
            'invalid': self.invalid,
            'acks_sent': self.acks_sent,
            'delivered': self.delivered
        }
