"""
Countdown Timer

Single-shot countdown timer owned by the emulator, one per entity.
Restarting a running timer replaces its deadline: every start bumps a
generation counter and expiry events from older generations are ignored.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TimerState(Enum):
    """Timer state enumeration."""
    STOPPED = 0
    RUNNING = 1
    EXPIRED = 2


@dataclass
class CountdownTimer:
    """
    Per-entity countdown timer.

    Attributes:
        entity: Owning entity id
        start_time: Time when the timer was last started
        increment: Duration of the current countdown
        state: Current timer state
        generation: Incremented on each start
        starts: Number of starts (restarts included)
    """
    entity: int
    start_time: float = 0.0
    increment: float = 0.0
    state: TimerState = TimerState.STOPPED
    generation: int = 0
    starts: int = 0

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    def start(self, current_time: float, increment: float) -> int:
        """
        Start the timer, replacing any pending deadline.

        Args:
            current_time: Current simulation time
            increment: Countdown duration

        Returns:
            Generation of the new deadline
        """
        if increment <= 0:
            raise ValueError(f"Timer increment must be positive, got {increment}")

        self.start_time = current_time
        self.increment = increment
        self.state = TimerState.RUNNING
        self.generation += 1
        self.starts += 1
        return self.generation

    def stop(self) -> bool:
        """
        Stop the timer.

        Returns:
            False if the timer was not running
        """
        if not self.is_running:
            return False
        self.state = TimerState.STOPPED
        # Invalidate the pending expiry event
        self.generation += 1
        return True

    def expire(self, generation: int) -> bool:
        """
        Consume an expiry event.

        Args:
            generation: Generation the event was scheduled with

        Returns:
            True if the event belongs to the current deadline
        """
        if not self.is_running or generation != self.generation:
            return False
        self.state = TimerState.EXPIRED
        return True

    def get_expiry_time(self) -> Optional[float]:
        """Absolute expiry time, None when not running."""
        if not self.is_running:
            return None
        return self.start_time + self.increment

    def get_remaining_time(self, current_time: float) -> float:
        """Remaining time until expiry (0 if expired or stopped)."""
        expiry = self.get_expiry_time()
        if expiry is None:
            return 0.0
        return max(0.0, expiry - current_time)
