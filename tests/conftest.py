"""
Shared fixtures for the protocol tests.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.arq.entity import NetworkInterface
from src.utils.logger import SimulationLogger, LogLevel


class FakeNetwork(NetworkInterface):
    """
    Records every call an entity makes.

    Timer calls are recorded as ('start', increment) / ('stop', None);
    timer_running mirrors what a real single-shot timer would show.
    """

    def __init__(self):
        self.sent = []
        self.delivered = []
        self.timer_calls = []
        self.timer_running = False

    def to_layer3(self, entity, packet):
        self.sent.append((entity, packet))

    def to_layer5(self, entity, payload):
        self.delivered.append(bytes(payload))

    def start_timer(self, entity, increment):
        self.timer_calls.append(('start', increment))
        self.timer_running = True

    def stop_timer(self, entity):
        self.timer_calls.append(('stop', None))
        self.timer_running = False

    def fire_timer(self, entity_obj):
        """Expire the timer and call the entity's handler."""
        assert self.timer_running, "timer fired while not running"
        self.timer_running = False
        entity_obj.on_timer_fired()

    def packets(self, entity=None):
        return [p for e, p in self.sent if entity is None or e == entity]


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def quiet_logger():
    return SimulationLogger(name="Test", level=LogLevel.ERROR, use_colors=False)


@pytest.fixture
def make_network():
    return FakeNetwork
