"""
Unit tests for the Selective Repeat receiver.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import SEQSPACE, WINDOWSIZE
from src.arq.entity import Entity
from src.arq.packet import Message, Packet
from src.arq.receiver import SRReceiver


def data(seqnum, char='a'):
    return Packet.create_data_packet(seqnum, Message.filled(char))


def acknums(network):
    return [p.acknum for p in network.packets(Entity.B)]


@pytest.fixture
def receiver(network, quiet_logger):
    return SRReceiver(network, logger=quiet_logger)


class TestInOrder:
    """Tests for in-order arrivals."""

    def test_deliver_and_ack(self, receiver, network):
        receiver.on_packet_arrived(data(0, 'a'))

        assert network.delivered == [b'a' * 20]
        assert acknums(network) == [0]
        assert receiver.expected_seqnum == 1

    def test_sequence(self, receiver, network):
        for i, char in enumerate('abcde'):
            receiver.on_packet_arrived(data(i, char))

        assert network.delivered == [c.encode() * 20 for c in 'abcde']
        assert acknums(network) == [0, 1, 2, 3, 4]

    def test_ack_packets_are_well_formed(self, receiver, network):
        receiver.on_packet_arrived(data(0))

        ack = network.packets(Entity.B)[0]
        assert ack.is_ack
        assert ack.payload == bytes(20)


class TestOutOfOrder:
    """Tests for buffering."""

    def test_buffer_without_delivery(self, receiver, network):
        receiver.on_packet_arrived(data(2, 'c'))

        assert network.delivered == []
        assert acknums(network) == [2]
        assert receiver.get_window_state()['buffered'] == [2]
        assert receiver.out_of_order == 1

    def test_gap_fill_delivers_run(self, receiver, network):
        receiver.on_packet_arrived(data(1, 'b'))
        receiver.on_packet_arrived(data(2, 'c'))
        receiver.on_packet_arrived(data(0, 'a'))

        assert network.delivered == [b'a' * 20, b'b' * 20, b'c' * 20]
        assert receiver.expected_seqnum == 3
        assert receiver.get_window_state()['buffered'] == []

    def test_window_edge(self, receiver, network):
        """Last in-window slot is buffered, the next one is not."""
        receiver.on_packet_arrived(data(WINDOWSIZE - 1))
        receiver.on_packet_arrived(data(WINDOWSIZE))

        assert receiver.get_window_state()['buffered'] == [WINDOWSIZE - 1]
        assert receiver.duplicates == 1
        assert acknums(network) == [WINDOWSIZE - 1, WINDOWSIZE]


class TestDuplicates:
    """Tests for repeated arrivals."""

    def test_buffered_duplicate(self, receiver, network):
        receiver.on_packet_arrived(data(3, 'd'))
        receiver.on_packet_arrived(data(3, 'x'))

        assert acknums(network) == [3, 3]
        assert receiver.duplicates == 1
        assert receiver.recv_buffer[3].payload == b'd' * 20

    def test_delivered_duplicate_reacked(self, receiver, network):
        """Lost ACK: the retransmission is re-ACKed and not delivered again."""
        receiver.on_packet_arrived(data(0, 'a'))
        receiver.on_packet_arrived(data(0, 'a'))

        assert network.delivered == [b'a' * 20]
        assert acknums(network) == [0, 0]
        assert receiver.duplicates == 1
        assert receiver.expected_seqnum == 1

    def test_stale_duplicate_not_redelivered_after_wrap(self, receiver, network):
        """An old copy arriving once its number is reused is not buffered."""
        for i in range(8):
            receiver.on_packet_arrived(data(i))

        # 2 is outside [8, 8 + WINDOWSIZE) and was delivered long ago
        receiver.on_packet_arrived(data(2, 'z'))
        for i in range(8, 14):
            receiver.on_packet_arrived(data(i % SEQSPACE))

        assert b'z' * 20 not in network.delivered
        assert len(network.delivered) == 14


class TestCorruption:
    """Tests for corrupted and invalid packets."""

    def test_corrupted_at_start_acks_last_seq(self, receiver, network):
        """Scenario: nothing delivered yet, ACK carries S-1."""
        packet = data(0)
        packet.payload = b'Z' + packet.payload[1:]

        receiver.on_packet_arrived(packet)

        acks = network.packets(Entity.B)
        assert len(acks) == 1
        assert acks[0].acknum == SEQSPACE - 1
        assert acks[0].seqnum == -1
        assert network.delivered == []
        assert receiver.expected_seqnum == 0
        assert receiver.corrupted == 1

    def test_corrupted_acks_last_in_order(self, receiver, network):
        receiver.on_packet_arrived(data(0))
        receiver.on_packet_arrived(data(1))
        receiver.on_packet_arrived(data(3))

        packet = data(2)
        packet.seqnum = 999999
        receiver.on_packet_arrived(packet)

        assert acknums(network)[-1] == 1
        assert receiver.get_window_state()['buffered'] == [3]

    def test_invalid_seqnum_dropped(self, receiver, network):
        """A well-formed packet with an out-of-range number gets no ACK."""
        receiver.on_packet_arrived(data(SEQSPACE))

        assert network.sent == []
        assert receiver.invalid == 1


class TestWraparound:
    """Tests for sequence number reuse."""

    def test_delivers_across_zero(self, receiver, network):
        for i in range(30):
            receiver.on_packet_arrived(data(i % SEQSPACE, chr(ord('a') + i % 26)))

        assert len(network.delivered) == 30
        assert acknums(network) == [i % SEQSPACE for i in range(30)]

    def test_out_of_order_across_zero(self, receiver, network):
        for i in range(10):
            receiver.on_packet_arrived(data(i))

        receiver.on_packet_arrived(data(1, 'd'))
        receiver.on_packet_arrived(data(11, 'b'))
        receiver.on_packet_arrived(data(0, 'c'))
        assert len(network.delivered) == 10

        receiver.on_packet_arrived(data(10, 'a'))

        assert network.delivered[10:] == [b'a' * 20, b'b' * 20, b'c' * 20, b'd' * 20]
        assert receiver.expected_seqnum == 2


class TestHooks:
    """Tests for handlers B never acts on."""

    def test_timer_is_noop(self, receiver, network):
        receiver.on_timer_fired()

        assert network.sent == []
        assert network.timer_calls == []

    def test_output_is_noop(self, receiver, network):
        receiver.output(Message.filled('a'))

        assert network.sent == []

    def test_reset(self, receiver, network):
        receiver.on_packet_arrived(data(0))
        receiver.reset()

        assert receiver.expected_seqnum == 0
        assert receiver.delivered == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
