"""
Batch Runner for Parameter Sweep Simulations

This module runs the simulator over every (loss probability,
corruption probability) pair, several seeds each, and collects one
result row per run.
"""

import os
import time
from typing import Optional, Callable, List, Dict
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed
import multiprocessing

import pandas as pd
from tqdm import tqdm

from config import (
    WINDOWSIZE, SEQSPACE, LOSS_PROBABILITIES, CORRUPTION_PROBABILITIES,
    RUNS_PER_CONFIGURATION, RNG_SEED_BASE, RESULTS_CSV, SWEEP_NUM_MESSAGES
)
from simulation.simulator import Simulator, SimulatorConfig
from src.utils.logger import LogLevel


@dataclass
class RunConfig:
    """Configuration for a single simulation run."""
    loss_probability: float
    corruption_probability: float
    run_id: int
    seed: int
    num_messages: int
    window_size: int = WINDOWSIZE
    seqspace: int = SEQSPACE
    burst_loss: bool = False


def run_single_simulation(run_config: RunConfig) -> Dict:
    """
    Run a single simulation with given configuration.

    This function is designed to be called in a separate process.

    Args:
        run_config: Configuration for this run

    Returns:
        Dictionary with results
    """
    try:
        config = SimulatorConfig(
            window_size=run_config.window_size,
            seqspace=run_config.seqspace,
            num_messages=run_config.num_messages,
            loss_probability=run_config.loss_probability,
            corruption_probability=run_config.corruption_probability,
            burst_loss=run_config.burst_loss,
            seed=run_config.seed,
            log_level=LogLevel.ERROR  # Minimal logging for batch runs
        )

        results = Simulator(config).run()
        metrics = results['metrics']
        sender = results['sender']

        return {
            'loss_probability': run_config.loss_probability,
            'corruption_probability': run_config.corruption_probability,
            'run_id': run_config.run_id,
            'seed': run_config.seed,
            'throughput': metrics['throughput'],
            'messages_accepted': metrics['messages_accepted'],
            'messages_delivered': metrics['messages_delivered'],
            'window_full': sender['window_full'],
            'packets_resent': sender['packets_resent'],
            'packets_lost': metrics['packets_lost'],
            'packets_corrupted': metrics['packets_corrupted'],
            'latency_mean': metrics['latency']['mean'],
            'total_time': results['simulation_time'],
            'data_valid': results['verification']['valid'],
            'complete': results['complete'],
            'error': None
        }

    except Exception as e:
        return {
            'loss_probability': run_config.loss_probability,
            'corruption_probability': run_config.corruption_probability,
            'run_id': run_config.run_id,
            'seed': run_config.seed,
            'throughput': 0,
            'error': str(e)
        }


class BatchRunner:
    """
    Batch Runner for parameter sweep simulations.

    Executes all (loss, corruption) combinations with multiple runs each.
    """

    def __init__(
        self,
        loss_probabilities: Optional[List[float]] = None,
        corruption_probabilities: Optional[List[float]] = None,
        runs_per_config: int = RUNS_PER_CONFIGURATION,
        num_messages: int = SWEEP_NUM_MESSAGES,
        burst_loss: bool = False,
        output_file: str = RESULTS_CSV,
        on_progress: Optional[Callable[[int, int, dict], None]] = None
    ):
        """
        Initialize batch runner.

        Args:
            loss_probabilities: Loss probabilities (default from config)
            corruption_probabilities: Corruption probabilities (default from config)
            runs_per_config: Number of runs per pair
            num_messages: Messages generated per run
            burst_loss: Use the Gilbert-Elliott loss model
            output_file: Path to output CSV file
            on_progress: Callback for progress updates
        """
        self.loss_probabilities = loss_probabilities or LOSS_PROBABILITIES
        self.corruption_probabilities = corruption_probabilities or CORRUPTION_PROBABILITIES
        self.runs_per_config = runs_per_config
        self.num_messages = num_messages
        self.burst_loss = burst_loss
        self.output_file = output_file
        self.on_progress = on_progress

        self.results: List[Dict] = []

        self.total_runs = (len(self.loss_probabilities) *
                           len(self.corruption_probabilities) *
                           self.runs_per_config)
        self.completed_runs = 0
        self.start_time = 0.0

    def _generate_run_configs(self) -> List[RunConfig]:
        """Generate all run configurations."""
        configs = []

        for i, loss in enumerate(self.loss_probabilities):
            for j, corrupt in enumerate(self.corruption_probabilities):
                for run_id in range(self.runs_per_config):
                    # Unique seed for each run
                    seed = RNG_SEED_BASE + i * 1000 + j * 100 + run_id

                    configs.append(RunConfig(
                        loss_probability=loss,
                        corruption_probability=corrupt,
                        run_id=run_id,
                        seed=seed,
                        num_messages=self.num_messages,
                        burst_loss=self.burst_loss
                    ))

        return configs

    def _record(self, result: Dict):
        self.results.append(result)
        self.completed_runs += 1
        if self.on_progress:
            self.on_progress(self.completed_runs, self.total_runs, result)

    def run_sequential(self) -> List[Dict]:
        """
        Run all simulations sequentially.

        Returns:
            List of result dictionaries
        """
        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()

        for config in tqdm(configs, desc="Simulations"):
            self._record(run_single_simulation(config))

        total_time = time.time() - self.start_time
        print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")

        return self.results

    def run_parallel(self, max_workers: Optional[int] = None) -> List[Dict]:
        """
        Run simulations in parallel using multiprocessing.

        Args:
            max_workers: Number of parallel workers (default: CPU count)

        Returns:
            List of result dictionaries
        """
        if max_workers is None:
            max_workers = multiprocessing.cpu_count()

        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(run_single_simulation, config)
                       for config in configs]

            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Simulations"):
                self._record(future.result())

        total_time = time.time() - self.start_time
        print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")

        return self.results

    def to_dataframe(self) -> pd.DataFrame:
        """Results as a DataFrame, one row per run."""
        return pd.DataFrame(self.results)

    def save_results(self, filepath: Optional[str] = None) -> Optional[str]:
        """
        Save results to CSV file.

        Args:
            filepath: Output file path (default: self.output_file)

        Returns:
            Path written, or None when there is nothing to save
        """
        filepath = filepath or self.output_file

        if not self.results:
            print("No results to save!")
            return None

        out_dir = os.path.dirname(filepath)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)

        self.to_dataframe().to_csv(filepath, index=False)
        print(f"Results saved to: {filepath}")
        return filepath

    def get_aggregated_results(self) -> pd.DataFrame:
        """
        Mean and spread of the main metrics per (loss, corruption) pair.

        Failed runs are left out.
        """
        df = self.to_dataframe()
        if 'error' in df.columns:
            df = df[df['error'].isna()]

        return (
            df.groupby(['loss_probability', 'corruption_probability'])
            .agg(
                throughput_mean=('throughput', 'mean'),
                throughput_std=('throughput', 'std'),
                packets_resent_mean=('packets_resent', 'mean'),
                latency_mean=('latency_mean', 'mean'),
                all_valid=('data_valid', 'all'),
                runs=('run_id', 'count')
            )
            .reset_index()
        )
