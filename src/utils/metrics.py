"""
Metrics Collection and Calculation

This module tracks what the emulator observes during a run: messages
offered and delivered, packets handed to the channel, channel losses
and corruptions, timer activity and per-message delivery latency.
"""

from typing import List, Optional, Dict
from collections import deque
import statistics


class MetricsCollector:
    """
    Collects and calculates performance metrics for one emulator run.

    Primary metric: Throughput = Delivered Messages / Simulated Time

    Attributes:
        start_time: Simulation start time
        end_time: Simulation end time
    """

    def __init__(self):
        """Initialize metrics collector."""
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

        # Application layer
        self.messages_generated = 0
        self.messages_accepted = 0
        self.messages_delivered = 0

        # Channel
        self.packets_to_layer3 = {0: 0, 1: 0}
        self.packets_lost = 0
        self.packets_corrupted = 0

        # Timers
        self.timer_starts = 0
        self.timer_stops = 0
        self.timer_interrupts = 0

        # Latency: accepted messages waiting for delivery, oldest first
        self._accept_times: deque = deque()
        self.latency_samples: List[float] = []

    def start(self, time: float):
        """Mark simulation start."""
        self.start_time = time

    def finish(self, time: float):
        """Mark simulation end."""
        self.end_time = time

    def record_message_generated(self, accepted: bool, time: float):
        """
        Record a message offered by the application layer.

        Args:
            accepted: Whether the sender took it (window not full)
            time: Current simulation time
        """
        self.messages_generated += 1
        if accepted:
            self.messages_accepted += 1
            self._accept_times.append(time)

    def record_message_delivered(self, time: float):
        """
        Record an in-order delivery at the receiver.

        Deliveries happen in acceptance order, so the oldest pending
        acceptance time belongs to this message.
        """
        self.messages_delivered += 1
        if self._accept_times:
            self.latency_samples.append(time - self._accept_times.popleft())

    def record_packet_sent(self, entity: int):
        """Record a packet handed to the channel by entity."""
        self.packets_to_layer3[entity] = self.packets_to_layer3.get(entity, 0) + 1

    def record_packet_lost(self):
        """Record a packet dropped by the channel."""
        self.packets_lost += 1

    def record_packet_corrupted(self):
        """Record a packet corrupted by the channel."""
        self.packets_corrupted += 1

    def record_timer_start(self):
        self.timer_starts += 1

    def record_timer_stop(self):
        self.timer_stops += 1

    def record_timer_interrupt(self):
        self.timer_interrupts += 1

    def calculate_throughput(self) -> float:
        """
        Calculate throughput.

        Throughput = Delivered Messages / Total Simulated Time

        Returns:
            Messages per time unit
        """
        if self.start_time is None or self.end_time is None:
            return 0.0

        total_time = self.end_time - self.start_time
        if total_time <= 0:
            return 0.0

        return self.messages_delivered / total_time

    def calculate_loss_rate(self) -> float:
        """Fraction of packets handed to the channel that were dropped."""
        total = sum(self.packets_to_layer3.values())
        if total <= 0:
            return 0.0
        return self.packets_lost / total

    def calculate_corruption_rate(self) -> float:
        """Fraction of packets handed to the channel that were corrupted."""
        total = sum(self.packets_to_layer3.values())
        if total <= 0:
            return 0.0
        return self.packets_corrupted / total

    def get_latency_statistics(self) -> Dict[str, float]:
        """
        Get delivery latency statistics.

        Returns:
            Dictionary with min, max, mean, median, stdev latency
        """
        if not self.latency_samples:
            return {
                'min': 0, 'max': 0, 'mean': 0,
                'median': 0, 'stdev': 0, 'samples': 0
            }

        return {
            'min': min(self.latency_samples),
            'max': max(self.latency_samples),
            'mean': statistics.mean(self.latency_samples),
            'median': statistics.median(self.latency_samples),
            'stdev': statistics.stdev(self.latency_samples) if len(self.latency_samples) > 1 else 0,
            'samples': len(self.latency_samples)
        }

    def get_summary(self) -> Dict:
        """
        Get comprehensive metrics summary.

        Returns:
            Dictionary with all metrics
        """
        total_time = 0
        if self.start_time is not None and self.end_time is not None:
            total_time = self.end_time - self.start_time

        return {
            'total_time': total_time,
            'throughput': self.calculate_throughput(),

            'messages_generated': self.messages_generated,
            'messages_accepted': self.messages_accepted,
            'messages_delivered': self.messages_delivered,

            'packets_from_a': self.packets_to_layer3.get(0, 0),
            'packets_from_b': self.packets_to_layer3.get(1, 0),
            'packets_lost': self.packets_lost,
            'packets_corrupted': self.packets_corrupted,
            'loss_rate': self.calculate_loss_rate(),
            'corruption_rate': self.calculate_corruption_rate(),

            'timer_starts': self.timer_starts,
            'timer_stops': self.timer_stops,
            'timer_interrupts': self.timer_interrupts,

            'latency': self.get_latency_statistics()
        }

    def to_csv_row(self) -> Dict:
        """
        Get metrics as a flat dictionary suitable for CSV export.

        Returns:
            Dictionary with flattened metrics
        """
        summary = self.get_summary()
        latency = summary.pop('latency')

        flat = {**summary}
        for key, value in latency.items():
            flat[f'latency_{key}'] = value

        return flat

    def reset(self):
        """Reset all metrics."""
        self.__init__()
