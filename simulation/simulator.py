"""
Main Simulator - End-to-End Selective Repeat Run

This module wires the sender, the receiver and the network emulator
together, runs one transfer and checks that the application above B
received exactly what the application above A handed to the sender.
"""

from typing import Optional, Dict, List, Tuple
from dataclasses import dataclass
import time

from config import (
    WINDOWSIZE, SEQSPACE, TIMEOUT,
    NUM_MESSAGES, LOSS_PROBABILITY, CORRUPTION_PROBABILITY,
    MEAN_INTERARRIVAL, RNG_SEED_BASE, MAX_SIMULATION_TIME
)
from src.arq.sender import SRSender
from src.arq.receiver import SRReceiver
from src.arq.seqspace import validate_seqspace
from src.channel.emulator import NetworkEmulator, EmulatorConfig
from src.utils.logger import SimulationLogger, LogLevel


@dataclass
class SimulatorConfig:
    """Configuration for the simulator."""
    # Protocol parameters
    window_size: int = WINDOWSIZE
    seqspace: int = SEQSPACE
    timeout: float = TIMEOUT

    # Emulator parameters
    num_messages: int = NUM_MESSAGES
    loss_probability: float = LOSS_PROBABILITY
    corruption_probability: float = CORRUPTION_PROBABILITY
    mean_interarrival: float = MEAN_INTERARRIVAL
    burst_loss: bool = False

    # Simulation parameters
    seed: int = RNG_SEED_BASE
    max_time: float = MAX_SIMULATION_TIME
    log_level: int = LogLevel.WARNING

    def __post_init__(self):
        """Validate protocol parameters."""
        validate_seqspace(self.window_size, self.seqspace)

    def to_emulator_config(self) -> EmulatorConfig:
        return EmulatorConfig(
            num_messages=self.num_messages,
            loss_probability=self.loss_probability,
            corruption_probability=self.corruption_probability,
            mean_interarrival=self.mean_interarrival,
            burst_loss=self.burst_loss,
            seed=self.seed,
            max_time=self.max_time
        )


def verify_delivery(submitted: List[bytes], delivered: List[bytes]) -> Tuple[bool, Dict]:
    """
    Compare what A accepted with what B delivered.

    Delivery is correct when B's sequence is a prefix of A's: in order,
    nothing duplicated, nothing invented. It is complete when the two
    are equal.

    Returns:
        Tuple of (valid, details)
    """
    first_mismatch = None
    for i, (sent, got) in enumerate(zip(submitted, delivered)):
        if sent != got:
            first_mismatch = i
            break

    valid = first_mismatch is None and len(delivered) <= len(submitted)
    return valid, {
        'submitted': len(submitted),
        'delivered': len(delivered),
        'complete': valid and len(delivered) == len(submitted),
        'first_mismatch': first_mismatch
    }


class Simulator:
    """
    End-to-end simulator.

    One sender, one receiver, one emulator, fresh for every run.
    """

    def __init__(self, config: Optional[SimulatorConfig] = None,
                 logger: Optional[SimulationLogger] = None):
        """Initialize simulator."""
        self.config = config or SimulatorConfig()

        self.logger = logger or SimulationLogger(
            name="Sim",
            level=self.config.log_level
        )

        self.emulator = NetworkEmulator(self.config.to_emulator_config(), self.logger)

        self.sender = SRSender(
            self.emulator,
            window_size=self.config.window_size,
            seqspace=self.config.seqspace,
            timeout=self.config.timeout,
            logger=self.logger
        )
        self.receiver = SRReceiver(
            self.emulator,
            window_size=self.config.window_size,
            seqspace=self.config.seqspace,
            logger=self.logger
        )
        self.emulator.attach(self.sender, self.receiver)

    def run(self) -> Dict:
        """Run the simulation."""
        sim_start_real = time.time()
        metrics = self.emulator.run()
        sim_end_real = time.time()

        valid, details = verify_delivery(self.emulator.submitted,
                                         self.emulator.delivered)

        return {
            'config': {
                'window_size': self.config.window_size,
                'seqspace': self.config.seqspace,
                'timeout': self.config.timeout,
                'num_messages': self.config.num_messages,
                'loss_probability': self.config.loss_probability,
                'corruption_probability': self.config.corruption_probability,
                'burst_loss': self.config.burst_loss,
                'seed': self.config.seed
            },
            'metrics': metrics,
            'sender': self.sender.get_statistics(),
            'receiver': self.receiver.get_statistics(),
            'verification': {'valid': valid, **details},
            'real_time': sim_end_real - sim_start_real,
            'simulation_time': self.emulator.time,
            'complete': details['complete']
        }
