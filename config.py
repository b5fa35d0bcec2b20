"""
Configuration file for the Selective Repeat reliable-delivery simulator.
Contains the fixed protocol constants and the emulator defaults.
"""

import os

# =============================================================================
# PROTOCOL PARAMETERS
# =============================================================================

# Maximum number of buffered unacknowledged packets
WINDOWSIZE = 6

# Sequence number space, must be at least WINDOWSIZE + 1
SEQSPACE = 12

# Retransmission timeout (simulated time units)
TIMEOUT = 16.0

# Fills header fields that are not being used
NOTINUSE = -1

# Fixed application message / packet payload size (bytes)
PAYLOAD_SIZE = 20

# =============================================================================
# EMULATOR PARAMETERS
# =============================================================================

# Number of messages the application layer generates per run
NUM_MESSAGES = 20

# Channel impairments (per packet)
LOSS_PROBABILITY = 0.0
CORRUPTION_PROBABILITY = 0.0

# Mean time between messages from the application layer
MEAN_INTERARRIVAL = 10.0

# One way delay is CHANNEL_MIN_DELAY + CHANNEL_DELAY_SPREAD * U(0, 1),
# measured from the last packet already in flight in the same direction
CHANNEL_MIN_DELAY = 1.0
CHANNEL_DELAY_SPREAD = 9.0

# Simulation time limit - failsafe
MAX_SIMULATION_TIME = 1_000_000.0

# Default RNG seed base (actual seed = base + run_id)
RNG_SEED_BASE = 42

# =============================================================================
# GILBERT-ELLIOTT BURST LOSS PARAMETERS
# =============================================================================

# Packet loss probability in each state
GOOD_STATE_LOSS = 0.01
BAD_STATE_LOSS = 0.5

# State transition probabilities (evaluated once per packet)
P_GOOD_TO_BAD = 0.05
P_BAD_TO_GOOD = 0.3

# =============================================================================
# PARAMETER SWEEP CONFIGURATION
# =============================================================================

LOSS_PROBABILITIES = [0.0, 0.1, 0.2, 0.3, 0.4]
CORRUPTION_PROBABILITIES = [0.0, 0.1, 0.2, 0.3, 0.4]

# Number of simulation runs per (loss, corruption) pair
RUNS_PER_CONFIGURATION = 5

# Messages per run during a sweep
SWEEP_NUM_MESSAGES = 200

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

DEFAULT_LOG_LEVEL = LOG_LEVEL_INFO

# =============================================================================
# OUTPUT PATHS
# =============================================================================

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
OUTPUT_DIR = os.path.join(DATA_DIR, "output")
PLOTS_DIR = os.path.join(OUTPUT_DIR, "plots")

RESULTS_CSV = os.path.join(OUTPUT_DIR, "results.csv")

# =============================================================================
# DERIVED PARAMETERS
# =============================================================================

def calculate_min_seqspace(window_size):
    """Smallest sequence space accepted for a given window size."""
    return window_size + 1


def calculate_expected_delay():
    """Mean one way channel delay for an otherwise idle channel."""
    return CHANNEL_MIN_DELAY + CHANNEL_DELAY_SPREAD / 2


def calculate_expected_rtt():
    """
    Mean round trip on an idle channel.
    RTT = delay(data) + delay(ack)
    """
    return 2 * calculate_expected_delay()


# Print configuration summary
if __name__ == "__main__":
    print("=" * 60)
    print("SELECTIVE REPEAT SIMULATOR - CONFIGURATION")
    print("=" * 60)
    print(f"\nProtocol:")
    print(f"  Window size: {WINDOWSIZE}")
    print(f"  Sequence space: {SEQSPACE}")
    print(f"  Timeout: {TIMEOUT}")
    print(f"  Payload size: {PAYLOAD_SIZE} bytes")

    print(f"\nEmulator:")
    print(f"  Messages: {NUM_MESSAGES}")
    print(f"  Loss probability: {LOSS_PROBABILITY}")
    print(f"  Corruption probability: {CORRUPTION_PROBABILITY}")
    print(f"  Mean inter-arrival: {MEAN_INTERARRIVAL}")
    print(f"  Expected idle RTT: {calculate_expected_rtt():.1f}")
