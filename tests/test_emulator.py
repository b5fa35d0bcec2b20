"""
Tests for the network emulator driving a real sender and receiver.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.arq.entity import Entity
from src.arq.packet import Message, Packet, is_corrupted
from src.arq.receiver import SRReceiver
from src.arq.sender import SRSender
from src.channel.emulator import (
    NetworkEmulator, EmulatorConfig, EventType, CORRUPT_FIELD_VALUE
)


def build(logger, **kwargs):
    emulator = NetworkEmulator(EmulatorConfig(**kwargs), logger=logger)
    sender = SRSender(emulator, logger=logger)
    receiver = SRReceiver(emulator, logger=logger)
    emulator.attach(sender, receiver)
    return emulator, sender, receiver


def scheduled_packets(emulator):
    return [e.data['packet'] for e in sorted(emulator.event_queue)
            if e.event_type == EventType.FROM_LAYER3]


class TestEmulatorConfig:
    """Tests for EmulatorConfig validation."""

    def test_defaults(self):
        config = EmulatorConfig()

        assert config.loss_probability == 0.0
        assert not config.burst_loss

    @pytest.mark.parametrize("field", ['loss_probability', 'corruption_probability'])
    def test_probability_range(self, field):
        with pytest.raises(ValueError):
            EmulatorConfig(**{field: 1.5})

    def test_interarrival_positive(self):
        with pytest.raises(ValueError):
            EmulatorConfig(mean_interarrival=0)

    def test_negative_messages(self):
        with pytest.raises(ValueError):
            EmulatorConfig(num_messages=-1)


class TestChannel:
    """Tests for to_layer3 / to_layer5."""

    def test_total_loss_schedules_nothing(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(loss_probability=1.0),
                                   logger=quiet_logger)

        emulator.to_layer3(Entity.A, Packet.create_data_packet(0, Message.filled('a')))

        assert emulator.event_queue == []
        assert emulator.metrics.packets_lost == 1

    def test_corruption_touches_only_the_copy(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(corruption_probability=1.0, seed=3),
                                   logger=quiet_logger)

        originals = [Packet.create_data_packet(i, Message.filled('a')) for i in range(20)]
        for packet in originals:
            emulator.to_layer3(Entity.A, packet)

        assert not any(is_corrupted(p) for p in originals)
        in_flight = scheduled_packets(emulator)
        assert len(in_flight) == 20
        assert all(is_corrupted(p) for p in in_flight)
        assert emulator.metrics.packets_corrupted == 20

    def test_corruption_kinds(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(corruption_probability=1.0, seed=5),
                                   logger=quiet_logger)
        for i in range(400):
            emulator.to_layer3(Entity.A, Packet.create_data_packet(i % 12, Message.filled('a')))

        in_flight = scheduled_packets(emulator)
        payload_hits = sum(p.payload[0:1] == b'Z' for p in in_flight)
        seq_hits = sum(p.seqnum == CORRUPT_FIELD_VALUE for p in in_flight)
        ack_hits = sum(p.acknum == CORRUPT_FIELD_VALUE for p in in_flight)

        assert payload_hits + seq_hits + ack_hits == 400
        assert payload_hits > seq_hits
        assert payload_hits > ack_hits

    def test_fifo_arrivals(self, quiet_logger):
        """Packets on one direction arrive in the order they were sent."""
        emulator = NetworkEmulator(EmulatorConfig(seed=11), logger=quiet_logger)

        for i in range(12):
            emulator.to_layer3(Entity.A, Packet.create_data_packet(i, Message.filled('a')))

        assert [p.seqnum for p in scheduled_packets(emulator)] == list(range(12))

    def test_delay_bounds(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(seed=2), logger=quiet_logger)

        emulator.to_layer3(Entity.B, Packet.create_ack_packet(0))

        event = emulator.event_queue[0]
        assert event.entity == Entity.A
        assert 1.0 <= event.time <= 10.0

    def test_to_layer5_records_delivery(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(), logger=quiet_logger)

        emulator.to_layer5(Entity.B, b'a' * 20)

        assert emulator.delivered == [b'a' * 20]
        assert emulator.metrics.messages_delivered == 1


class TestRun:
    """Full runs through the event loop."""

    def test_requires_attach(self, quiet_logger):
        emulator = NetworkEmulator(EmulatorConfig(), logger=quiet_logger)

        with pytest.raises(RuntimeError):
            emulator.run()

    def test_perfect_channel(self, quiet_logger):
        emulator, sender, receiver = build(quiet_logger, num_messages=20, seed=1)

        summary = emulator.run()

        assert emulator.delivered == emulator.submitted
        assert summary['messages_generated'] == 20
        assert summary['packets_lost'] == 0
        assert summary['packets_corrupted'] == 0
        assert sender.window.is_empty
        assert not emulator.is_timer_running(Entity.A)

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_lossy_corrupting_channel(self, quiet_logger, seed):
        emulator, sender, receiver = build(
            quiet_logger, num_messages=60, loss_probability=0.2,
            corruption_probability=0.2, seed=seed
        )

        summary = emulator.run()

        assert emulator.delivered == emulator.submitted
        assert len(emulator.submitted) > 0
        assert summary['packets_lost'] > 0
        assert summary['packets_corrupted'] > 0
        assert sender.window.is_empty

    def test_fast_application_fills_window(self, quiet_logger):
        emulator, sender, receiver = build(
            quiet_logger, num_messages=100, mean_interarrival=0.5, seed=9
        )

        summary = emulator.run()

        assert sender.window_full > 0
        assert summary['messages_accepted'] < summary['messages_generated']
        assert emulator.delivered == emulator.submitted

    def test_burst_loss(self, quiet_logger):
        emulator, sender, receiver = build(
            quiet_logger, num_messages=60, burst_loss=True, seed=4
        )

        emulator.run()

        assert emulator.loss_model is not None
        assert emulator.loss_model.total_packets > 0
        assert emulator.delivered == emulator.submitted

    def test_same_seed_same_run(self, quiet_logger):
        first = build(quiet_logger, num_messages=30, loss_probability=0.3, seed=21)[0]
        second = build(quiet_logger, num_messages=30, loss_probability=0.3, seed=21)[0]

        assert first.run() == second.run()

    def test_time_limit(self, quiet_logger):
        emulator, sender, receiver = build(
            quiet_logger, num_messages=50, loss_probability=0.5, seed=6, max_time=50.0
        )

        emulator.run()

        assert emulator.time <= 50.0
        assert emulator.delivered == emulator.submitted[:len(emulator.delivered)]

    def test_no_messages(self, quiet_logger):
        emulator, sender, receiver = build(quiet_logger, num_messages=0)

        summary = emulator.run()

        assert summary['messages_generated'] == 0
        assert emulator.delivered == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
