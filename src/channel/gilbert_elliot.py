"""
Gilbert-Elliott Burst Loss Model

Two-state Markov chain deciding, packet by packet, whether the channel
drops a packet. The channel alternates between a "Good" state (rare
losses) and a "Bad" state (frequent losses), producing loss bursts
instead of independent drops.
"""

import numpy as np
from enum import Enum
from typing import Tuple, List, Optional

from config import (
    GOOD_STATE_LOSS, BAD_STATE_LOSS,
    P_GOOD_TO_BAD, P_BAD_TO_GOOD
)


class ChannelState(Enum):
    """Channel state enumeration."""
    GOOD = 0
    BAD = 1


class GilbertElliottChannel:
    """
    Gilbert-Elliott two-state packet loss model.

    Attributes:
        pg: Packet loss probability in Good state
        pb: Packet loss probability in Bad state
        p_gb: Transition probability from Good to Bad
        p_bg: Transition probability from Bad to Good
        state: Current channel state
        rng: Random number generator
    """

    def __init__(
        self,
        pg: float = GOOD_STATE_LOSS,
        pb: float = BAD_STATE_LOSS,
        p_gb: float = P_GOOD_TO_BAD,
        p_bg: float = P_BAD_TO_GOOD,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize the Gilbert-Elliott channel.

        Args:
            pg: Loss probability in Good state (default from config)
            pb: Loss probability in Bad state (default from config)
            p_gb: Probability of transitioning from Good to Bad
            p_bg: Probability of transitioning from Bad to Good
            seed: Random seed for reproducibility
            rng: Shared generator (overrides seed)
        """
        for name, p in (('pg', pg), ('pb', pb), ('p_gb', p_gb), ('p_bg', p_bg)):
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be a probability, got {p}")
        if p_gb + p_bg == 0:
            raise ValueError("p_gb and p_bg cannot both be zero")

        self.pg = pg
        self.pb = pb
        self.p_gb = p_gb
        self.p_bg = p_bg

        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self._initialize_state()

        # Statistics tracking
        self.total_packets = 0
        self.packets_lost = 0
        self.state_transitions = 0
        self.time_in_good = 0
        self.time_in_bad = 0

    def _initialize_state(self):
        """Initialize channel state based on steady-state probabilities."""
        pi_good, _ = self.get_steady_state_probabilities()
        if self.rng.random() < pi_good:
            self.state = ChannelState.GOOD
        else:
            self.state = ChannelState.BAD

    def get_steady_state_probabilities(self) -> Tuple[float, float]:
        """
        Calculate steady-state probabilities for Good and Bad states.

        Returns:
            Tuple of (π_Good, π_Bad)
        """
        sum_transitions = self.p_gb + self.p_bg
        return self.p_bg / sum_transitions, self.p_gb / sum_transitions

    def get_average_loss(self) -> float:
        """Long-run packet loss probability."""
        pi_good, pi_bad = self.get_steady_state_probabilities()
        return pi_good * self.pg + pi_bad * self.pb

    def get_current_loss(self) -> float:
        """Get the loss probability for the current channel state."""
        return self.pg if self.state == ChannelState.GOOD else self.pb

    def transition_state(self):
        """Perform one state transition (once per packet)."""
        if self.state == ChannelState.GOOD:
            self.time_in_good += 1
            if self.rng.random() < self.p_gb:
                self.state = ChannelState.BAD
                self.state_transitions += 1
        else:
            self.time_in_bad += 1
            if self.rng.random() < self.p_bg:
                self.state = ChannelState.GOOD
                self.state_transitions += 1

    def packet_lost(self) -> bool:
        """
        Decide the fate of one packet.

        Returns:
            True if the packet is dropped
        """
        lost = bool(self.rng.random() < self.get_current_loss())

        self.total_packets += 1
        if lost:
            self.packets_lost += 1

        self.transition_state()
        return lost

    def get_statistics(self) -> dict:
        """Get channel statistics."""
        total_time = self.time_in_good + self.time_in_bad

        return {
            'total_packets': self.total_packets,
            'packets_lost': self.packets_lost,
            'observed_loss': (self.packets_lost / self.total_packets
                              if self.total_packets > 0 else 0),
            'state_transitions': self.state_transitions,
            'time_in_good': self.time_in_good,
            'time_in_bad': self.time_in_bad,
            'fraction_in_good': (self.time_in_good / total_time
                                 if total_time > 0 else 0),
            'theoretical_avg_loss': self.get_average_loss()
        }

    def reset_statistics(self):
        """Reset all statistics counters."""
        self.total_packets = 0
        self.packets_lost = 0
        self.state_transitions = 0
        self.time_in_good = 0
        self.time_in_bad = 0

    def reset(self, seed: Optional[int] = None):
        """
        Reset the channel to initial state.

        Args:
            seed: New random seed (optional)
        """
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self._initialize_state()
        self.reset_statistics()


def simulate_loss_pattern(channel: GilbertElliottChannel, num_packets: int) -> List[bool]:
    """
    Run num_packets through the model.

    Returns:
        List of booleans (True = packet lost)
    """
    return [channel.packet_lost() for _ in range(num_packets)]


def analyze_burst_lengths(loss_pattern: List[bool]) -> dict:
    """
    Analyze burst lengths in a loss pattern.

    Args:
        loss_pattern: List of packet loss indicators

    Returns:
        Dictionary with burst statistics
    """
    bursts = []
    current_burst = 0

    for lost in loss_pattern:
        if lost:
            current_burst += 1
        elif current_burst > 0:
            bursts.append(current_burst)
            current_burst = 0

    if current_burst > 0:
        bursts.append(current_burst)

    if bursts:
        return {
            'avg_burst_length': float(np.mean(bursts)),
            'max_burst_length': max(bursts),
            'num_bursts': len(bursts),
            'burst_lengths': bursts
        }
    return {'avg_burst_length': 0, 'max_burst_length': 0, 'num_bursts': 0}
