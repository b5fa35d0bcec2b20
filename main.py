#!/usr/bin/env python3
"""
Selective Repeat Protocol Simulator - Main Entry Point

This is the main CLI interface for the protocol simulator.
It provides options for:
- Single emulator runs with a full event trace
- Parameter sweep over loss and corruption probabilities
- Visualization of sweep results

Usage:
    python main.py --single --messages 20 --loss 0.2 --corrupt 0.2 -v
    python main.py --sweep --runs 5
    python main.py --visualize --csv results.csv
"""

import argparse
import os
import sys
import time

# Ensure project root is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import (
    WINDOWSIZE, SEQSPACE, TIMEOUT, NUM_MESSAGES, MEAN_INTERARRIVAL,
    RUNS_PER_CONFIGURATION, SWEEP_NUM_MESSAGES, RESULTS_CSV, PLOTS_DIR
)


def run_single_simulation(args):
    """Run a single simulation with specified parameters."""
    from simulation.simulator import Simulator, SimulatorConfig
    from src.utils.logger import LogLevel

    if args.debug:
        log_level = LogLevel.DEBUG
    elif args.verbose:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING

    config = SimulatorConfig(
        window_size=args.window,
        seqspace=args.seqspace,
        timeout=args.timeout,
        num_messages=args.messages,
        loss_probability=args.loss,
        corruption_probability=args.corrupt,
        mean_interarrival=args.interarrival,
        burst_loss=args.burst_loss,
        seed=args.seed,
        log_level=log_level
    )

    print("=" * 60)
    print("SELECTIVE REPEAT SIMULATOR")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Window size: {config.window_size}")
    print(f"  Sequence space: {config.seqspace}")
    print(f"  Timeout: {config.timeout}")
    print(f"  Messages: {config.num_messages}")
    print(f"  Loss probability: {config.loss_probability}")
    print(f"  Corruption probability: {config.corruption_probability}")
    print(f"  Burst loss: {config.burst_loss}")
    print(f"  Seed: {config.seed}")

    print("\nRunning simulation...")

    sim = Simulator(config)
    start_time = time.time()
    results = sim.run()
    elapsed = time.time() - start_time

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    verification = results['verification']
    print(f"\nTransfer Status:")
    print(f"  Complete: {results['complete']}")
    print(f"  Data Valid: {verification['valid']}")
    print(f"  Simulation Time: {results['simulation_time']:.2f}")
    print(f"  Real Time: {elapsed:.2f} s")

    metrics = results['metrics']
    sender = results['sender']
    receiver = results['receiver']
    print(f"\nProtocol Statistics:")
    print(f"  Messages generated: {metrics['messages_generated']}")
    print(f"  Refused (window full): {sender['window_full']}")
    print(f"  Messages delivered: {metrics['messages_delivered']}")
    print(f"  Packets resent: {sender['packets_resent']}")
    print(f"  New ACKs: {sender['new_acks']}")
    print(f"  Duplicate packets at B: {receiver['duplicates']}")
    print(f"  Packets lost: {metrics['packets_lost']}")
    print(f"  Packets corrupted: {metrics['packets_corrupted']}")
    print(f"  Throughput: {metrics['throughput']:.4f} messages / time unit")

    if metrics['latency']['samples'] > 0:
        print(f"\nDelivery Latency:")
        print(f"  Mean: {metrics['latency']['mean']:.2f}")
        print(f"  Min: {metrics['latency']['min']:.2f}")
        print(f"  Max: {metrics['latency']['max']:.2f}")

    return results


def run_parameter_sweep(args):
    """Run parameter sweep over loss and corruption probabilities."""
    from simulation.runner import BatchRunner

    print("=" * 60)
    print("PARAMETER SWEEP")
    print("=" * 60)

    if args.quick:
        runner = BatchRunner(
            loss_probabilities=[0.0, 0.2],
            corruption_probabilities=[0.0, 0.2],
            runs_per_config=2,
            num_messages=50,
            burst_loss=args.burst_loss,
            output_file=args.output or RESULTS_CSV
        )
    else:
        runner = BatchRunner(
            runs_per_config=args.runs,
            num_messages=args.sweep_messages,
            burst_loss=args.burst_loss,
            output_file=args.output or RESULTS_CSV
        )

    print(f"\nConfiguration:")
    print(f"  Loss probabilities: {runner.loss_probabilities}")
    print(f"  Corruption probabilities: {runner.corruption_probabilities}")
    print(f"  Runs per config: {runner.runs_per_config}")
    print(f"  Total simulations: {runner.total_runs}")
    print(f"  Output: {runner.output_file}")

    if args.parallel:
        runner.run_parallel(max_workers=args.workers)
    else:
        runner.run_sequential()

    runner.save_results()

    print("\n" + "=" * 60)
    print("AGGREGATED RESULTS")
    print("=" * 60)
    print(runner.get_aggregated_results().to_string(index=False))

    return runner.results


def generate_visualizations(args):
    """Generate heatmaps from a sweep CSV."""
    from visualization.heatmap import SweepHeatmap

    csv_file = args.csv or RESULTS_CSV

    if not os.path.exists(csv_file):
        print(f"Error: Results file not found: {csv_file}")
        print("Run a parameter sweep first: python main.py --sweep")
        return

    heatmap = SweepHeatmap(csv_file=csv_file)
    os.makedirs(PLOTS_DIR, exist_ok=True)

    for metric in ('throughput', 'packets_resent', 'latency_mean'):
        heatmap.plot(
            metric=metric,
            output_file=os.path.join(PLOTS_DIR, f'{metric}_heatmap.png')
        )


def show_config(args):
    """Display current configuration."""
    import config as cfg

    print("=" * 60)
    print("SIMULATOR CONFIGURATION")
    print("=" * 60)

    print(f"\nProtocol:")
    print(f"  Window size: {cfg.WINDOWSIZE}")
    print(f"  Sequence space: {cfg.SEQSPACE} (minimum {cfg.calculate_min_seqspace(cfg.WINDOWSIZE)})")
    print(f"  Timeout: {cfg.TIMEOUT}")
    print(f"  Payload size: {cfg.PAYLOAD_SIZE} bytes")

    print(f"\nChannel:")
    print(f"  Delay: {cfg.CHANNEL_MIN_DELAY} + {cfg.CHANNEL_DELAY_SPREAD} * U(0,1)")
    print(f"  Expected idle RTT: {cfg.calculate_expected_rtt():.1f}")
    print(f"  Burst model loss (good/bad): {cfg.GOOD_STATE_LOSS} / {cfg.BAD_STATE_LOSS}")
    print(f"  P(Good→Bad): {cfg.P_GOOD_TO_BAD}")
    print(f"  P(Bad→Good): {cfg.P_BAD_TO_GOOD}")

    print(f"\nParameter Sweep:")
    print(f"  Loss probabilities: {cfg.LOSS_PROBABILITIES}")
    print(f"  Corruption probabilities: {cfg.CORRUPTION_PROBABILITIES}")
    print(f"  Runs per config: {cfg.RUNS_PER_CONFIGURATION}")


def main():
    parser = argparse.ArgumentParser(
        description="Selective Repeat Protocol Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single run with a trace:
    python main.py --single --messages 20 --loss 0.2 --corrupt 0.2 -v

  Quick parameter sweep:
    python main.py --sweep --quick

  Parallel parameter sweep:
    python main.py --sweep --parallel --workers 4

  Generate visualizations:
    python main.py --visualize
        """
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--single', action='store_true',
                      help='Run single simulation')
    mode.add_argument('--sweep', action='store_true',
                      help='Run parameter sweep')
    mode.add_argument('--visualize', action='store_true',
                      help='Generate visualizations')
    mode.add_argument('--config', action='store_true',
                      help='Show configuration')

    # Protocol options
    parser.add_argument('--window', '-w', type=int, default=WINDOWSIZE,
                        help=f'Window size (default: {WINDOWSIZE})')
    parser.add_argument('--seqspace', type=int, default=SEQSPACE,
                        help=f'Sequence space size (default: {SEQSPACE})')
    parser.add_argument('--timeout', type=float, default=TIMEOUT,
                        help=f'Retransmission timeout (default: {TIMEOUT})')

    # Channel options
    parser.add_argument('--messages', '-n', type=int, default=NUM_MESSAGES,
                        help=f'Messages to simulate (default: {NUM_MESSAGES})')
    parser.add_argument('--loss', type=float, default=0.0,
                        help='Packet loss probability (default: 0.0)')
    parser.add_argument('--corrupt', type=float, default=0.0,
                        help='Packet corruption probability (default: 0.0)')
    parser.add_argument('--interarrival', type=float, default=MEAN_INTERARRIVAL,
                        help=f'Mean time between messages (default: {MEAN_INTERARRIVAL})')
    parser.add_argument('--burst-loss', action='store_true',
                        help='Use the Gilbert-Elliott burst loss model')
    parser.add_argument('--seed', '-s', type=int, default=42,
                        help='Random seed (default: 42)')

    # Parameter sweep options
    parser.add_argument('--runs', '-r', type=int,
                        default=RUNS_PER_CONFIGURATION,
                        help=f'Runs per configuration (default: {RUNS_PER_CONFIGURATION})')
    parser.add_argument('--sweep-messages', type=int, default=SWEEP_NUM_MESSAGES,
                        help=f'Messages per sweep run (default: {SWEEP_NUM_MESSAGES})')
    parser.add_argument('--parallel', action='store_true',
                        help='Run simulations in parallel')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of parallel workers')
    parser.add_argument('--quick', action='store_true',
                        help='Quick test with reduced parameters')

    # Output options
    parser.add_argument('--output', '-o', type=str,
                        help='Output file path')
    parser.add_argument('--csv', type=str,
                        help='CSV file for visualization')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print the protocol trace')
    parser.add_argument('--debug', action='store_true',
                        help='Print the full event trace')

    args = parser.parse_args()

    if args.single:
        run_single_simulation(args)
    elif args.sweep:
        run_parameter_sweep(args)
    elif args.visualize:
        generate_visualizations(args)
    elif args.config:
        show_config(args)


if __name__ == "__main__":
    main()
