"""
Network Emulator - Event-Driven Channel and Timer Service

This module drives the two protocol entities the way the classic
alternating-bit / Go-Back-N emulator does: one event at a time from a
time-ordered queue, with an unreliable channel that may lose or corrupt
packets but never reorders them, and a single countdown timer per
entity.
"""

from typing import Optional, List, Dict
from dataclasses import dataclass, field
from enum import Enum
import heapq
import itertools

import numpy as np

from config import (
    NUM_MESSAGES, LOSS_PROBABILITY, CORRUPTION_PROBABILITY,
    MEAN_INTERARRIVAL, CHANNEL_MIN_DELAY, CHANNEL_DELAY_SPREAD,
    MAX_SIMULATION_TIME, RNG_SEED_BASE
)
from src.arq.entity import Entity, NetworkInterface
from src.arq.packet import Message, Packet
from src.arq.timer import CountdownTimer
from src.channel.gilbert_elliot import GilbertElliottChannel
from src.utils.logger import SimulationLogger, get_logger
from src.utils.metrics import MetricsCollector

# Value the channel writes into a header field it corrupts
CORRUPT_FIELD_VALUE = 999999


class EventType(Enum):
    """Types of emulator events."""
    FROM_LAYER5 = 0       # Application has a new message for A
    FROM_LAYER3 = 1       # Packet arrives at an entity
    TIMER_INTERRUPT = 2   # Entity's timer expires


@dataclass(order=True)
class SimEvent:
    """Emulator event, ordered by time then by scheduling order."""
    time: float
    order: int
    event_type: EventType = field(compare=False)
    entity: Entity = field(compare=False)
    data: dict = field(compare=False, default_factory=dict)


@dataclass
class EmulatorConfig:
    """Configuration for the emulator."""
    num_messages: int = NUM_MESSAGES
    loss_probability: float = LOSS_PROBABILITY
    corruption_probability: float = CORRUPTION_PROBABILITY
    mean_interarrival: float = MEAN_INTERARRIVAL

    # Replace independent losses with the Gilbert-Elliott model
    burst_loss: bool = False

    min_delay: float = CHANNEL_MIN_DELAY
    delay_spread: float = CHANNEL_DELAY_SPREAD

    seed: int = RNG_SEED_BASE
    max_time: float = MAX_SIMULATION_TIME

    def __post_init__(self):
        """Validate configuration."""
        for name in ('loss_probability', 'corruption_probability'):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {p}")
        if self.num_messages < 0:
            raise ValueError(f"num_messages must be non-negative, got {self.num_messages}")
        if self.mean_interarrival <= 0:
            raise ValueError(f"mean_interarrival must be positive, got {self.mean_interarrival}")


class NetworkEmulator(NetworkInterface):
    """
    Discrete-event network emulator.

    Implements the four capabilities the entities use and calls back
    into them through submit(), on_packet_arrived() and on_timer_fired().
    Exactly one entity handler runs at a time, to completion.

    Attributes:
        config: Emulator configuration
        sender: Entity A
        receiver: Entity B
        delivered: Payloads delivered to the application above B
        submitted: Messages accepted by A, in order
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize emulator.

        Args:
            config: Emulator configuration (defaults from config.py)
            logger: Logger (shared instance if None)
        """
        self.config = config or EmulatorConfig()
        self.logger = logger or get_logger()

        self.rng = np.random.default_rng(self.config.seed)
        self.loss_model = (
            GilbertElliottChannel(rng=self.rng) if self.config.burst_loss else None
        )

        self.sender = None
        self.receiver = None

        self.metrics = MetricsCollector()
        self.timers = {entity: CountdownTimer(entity=entity) for entity in Entity}

        self.current_time = 0.0
        self.event_queue: List[SimEvent] = []
        self._counter = itertools.count()

        # Latest scheduled arrival per destination, keeps the channel FIFO
        self.last_arrival = {entity: 0.0 for entity in Entity}

        self.messages_generated = 0
        self.submitted: List[bytes] = []
        self.delivered: List[bytes] = []

    @property
    def time(self) -> float:
        return self.current_time

    def attach(self, sender, receiver):
        """
        Attach the protocol entities.

        Args:
            sender: Entity A (submit / on_packet_arrived / on_timer_fired)
            receiver: Entity B (on_packet_arrived / on_timer_fired)
        """
        self.sender = sender
        self.receiver = receiver

    def _entity(self, entity: Entity):
        return self.sender if entity == Entity.A else self.receiver

    def _schedule_event(self, time: float, event_type: EventType,
                        entity: Entity, data: dict = None):
        """Schedule an event."""
        event = SimEvent(
            time=time,
            order=next(self._counter),
            event_type=event_type,
            entity=entity,
            data=data or {}
        )
        heapq.heappush(self.event_queue, event)

    def _generate_next_arrival(self):
        """Schedule the next message from the application layer."""
        if self.messages_generated >= self.config.num_messages:
            return
        gap = self.rng.exponential(self.config.mean_interarrival)
        self._schedule_event(self.current_time + gap, EventType.FROM_LAYER5, Entity.A)

    # ------------------------------------------------------------------
    # Capabilities used by the entities
    # ------------------------------------------------------------------

    def to_layer3(self, entity: Entity, packet: Packet):
        """
        Hand a packet to the channel.

        The packet is copied first; loss and corruption only ever touch
        the copy in flight.
        """
        self.metrics.record_packet_sent(entity)

        if self._packet_lost():
            self.metrics.record_packet_lost()
            self.logger.channel_event("Packet lost", packet)
            return

        in_flight = packet.copy()
        destination = Entity.B if entity == Entity.A else Entity.A

        # Never arrive before a packet already travelling the same way
        last = max(self.current_time, self.last_arrival[destination])
        arrival = last + self.config.min_delay + self.config.delay_spread * self.rng.random()
        self.last_arrival[destination] = arrival

        if self.rng.random() < self.config.corruption_probability:
            self._corrupt(in_flight)
            self.metrics.record_packet_corrupted()
            self.logger.channel_event("Packet corrupted", in_flight)

        self._schedule_event(arrival, EventType.FROM_LAYER3, destination,
                             {'packet': in_flight})

    def to_layer5(self, entity: Entity, payload: bytes):
        """Deliver a payload to the application above entity."""
        self.delivered.append(bytes(payload))
        self.metrics.record_message_delivered(self.current_time)
        self.logger.debug(f"Data delivered to layer 5: {bytes(payload)!r}", entity.name)

    def start_timer(self, entity: Entity, increment: float):
        """Start the entity's timer, replacing any pending deadline."""
        timer = self.timers[entity]
        if timer.is_running:
            self.logger.debug("Replacing running timer", "TIMER")
        generation = timer.start(self.current_time, increment)
        self.metrics.record_timer_start()
        self._schedule_event(self.current_time + increment, EventType.TIMER_INTERRUPT,
                             entity, {'generation': generation})

    def stop_timer(self, entity: Entity):
        """Cancel the entity's timer."""
        if self.timers[entity].stop():
            self.metrics.record_timer_stop()
        else:
            self.logger.warning(f"Unable to cancel timer of {entity.name}, not running",
                                "TIMER")

    def is_timer_running(self, entity: Entity) -> bool:
        return self.timers[entity].is_running

    def pending_timer_events(self, entity: Entity) -> int:
        """Number of timer events in the queue that would still fire."""
        timer = self.timers[entity]
        return sum(
            1 for e in self.event_queue
            if e.event_type == EventType.TIMER_INTERRUPT
            and e.entity == entity
            and timer.is_running
            and e.data['generation'] == timer.generation
        )

    # ------------------------------------------------------------------
    # Channel impairments
    # ------------------------------------------------------------------

    def _packet_lost(self) -> bool:
        if self.loss_model is not None:
            return self.loss_model.packet_lost()
        return bool(self.rng.random() < self.config.loss_probability)

    def _corrupt(self, packet: Packet):
        """Overwrite one field; the stored checksum is left as it was."""
        x = self.rng.random()
        if x < 0.75:
            packet.payload = b'Z' + packet.payload[1:]
        elif x < 0.875:
            packet.seqnum = CORRUPT_FIELD_VALUE
        else:
            packet.acknum = CORRUPT_FIELD_VALUE

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def _handle_from_layer5(self):
        letter = chr(ord('a') + self.messages_generated % 26)
        message = Message.filled(letter)
        self.messages_generated += 1

        accepted = self.sender.submit(message)
        if accepted:
            self.submitted.append(message.data)
        self.metrics.record_message_generated(accepted, self.current_time)

        self._generate_next_arrival()

    def _handle_from_layer3(self, event: SimEvent):
        self._entity(event.entity).on_packet_arrived(event.data['packet'])

    def _handle_timer_interrupt(self, event: SimEvent):
        if not self.timers[event.entity].expire(event.data['generation']):
            return
        self.metrics.record_timer_interrupt()
        self._entity(event.entity).on_timer_fired()

    def run(self) -> Dict:
        """
        Run until no events remain or the time limit is reached.

        Returns:
            Metrics summary
        """
        if self.sender is None or self.receiver is None:
            raise RuntimeError("attach() the sender and receiver before run()")

        self.sender.init()
        self.receiver.init()

        self.metrics.start(0.0)
        self.logger.simulation_start({
            'messages': self.config.num_messages,
            'loss': self.config.loss_probability,
            'corrupt': self.config.corruption_probability,
            'burst_loss': self.config.burst_loss,
            'seed': self.config.seed
        })

        self._generate_next_arrival()

        while self.event_queue:
            event = heapq.heappop(self.event_queue)
            if event.time > self.config.max_time:
                self.logger.warning("Simulation time limit reached", "SIM")
                break

            self.current_time = event.time
            self.logger.set_sim_time(self.current_time)

            if event.event_type == EventType.FROM_LAYER5:
                self._handle_from_layer5()
            elif event.event_type == EventType.FROM_LAYER3:
                self._handle_from_layer3(event)
            elif event.event_type == EventType.TIMER_INTERRUPT:
                self._handle_timer_interrupt(event)

        self.metrics.finish(self.current_time)
        summary = self.metrics.get_summary()
        self.logger.simulation_end(summary)
        return summary
