"""
Tests for the end-to-end simulator, the sweep runner and the heatmaps.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from simulation.simulator import Simulator, SimulatorConfig, verify_delivery
from simulation.runner import BatchRunner, RunConfig, run_single_simulation
from src.utils.logger import LogLevel
from visualization.heatmap import SweepHeatmap


class TestVerifyDelivery:
    """Tests for delivery verification."""

    def test_complete(self):
        valid, details = verify_delivery([b'a', b'b'], [b'a', b'b'])

        assert valid
        assert details['complete']

    def test_prefix_is_valid_but_incomplete(self):
        valid, details = verify_delivery([b'a', b'b'], [b'a'])

        assert valid
        assert not details['complete']

    def test_reordered(self):
        valid, details = verify_delivery([b'a', b'b'], [b'b', b'a'])

        assert not valid
        assert details['first_mismatch'] == 0

    def test_duplicate_delivery(self):
        valid, _ = verify_delivery([b'a'], [b'a', b'a'])

        assert not valid


class TestSimulator:
    """Tests for Simulator class."""

    def test_config_validation(self):
        with pytest.raises(ValueError):
            SimulatorConfig(window_size=8, seqspace=8)

    def test_run(self):
        config = SimulatorConfig(num_messages=40, loss_probability=0.1,
                                 corruption_probability=0.1, seed=3,
                                 log_level=LogLevel.ERROR)

        results = Simulator(config).run()

        assert results['verification']['valid']
        assert results['complete']
        assert results['metrics']['messages_delivered'] == \
            results['metrics']['messages_accepted']
        assert results['receiver']['delivered'] == results['metrics']['messages_delivered']
        assert results['simulation_time'] > 0

    def test_other_window_sizes(self):
        config = SimulatorConfig(window_size=3, seqspace=6, num_messages=40,
                                 loss_probability=0.2, seed=8,
                                 log_level=LogLevel.ERROR)

        results = Simulator(config).run()

        assert results['complete']


class TestBatchRunner:
    """Tests for the parameter sweep."""

    @pytest.fixture
    def runner(self, tmp_path):
        runner = BatchRunner(
            loss_probabilities=[0.0, 0.2],
            corruption_probabilities=[0.0, 0.2],
            runs_per_config=2,
            num_messages=20,
            output_file=str(tmp_path / 'results.csv')
        )
        runner.run_sequential()
        return runner

    def test_seeds_are_unique(self):
        runner = BatchRunner(loss_probabilities=[0.0, 0.1],
                             corruption_probabilities=[0.0, 0.1],
                             runs_per_config=3)
        seeds = [c.seed for c in runner._generate_run_configs()]

        assert len(seeds) == runner.total_runs == 12
        assert len(set(seeds)) == len(seeds)

    def test_single_run_row(self):
        row = run_single_simulation(RunConfig(
            loss_probability=0.1, corruption_probability=0.0,
            run_id=0, seed=1, num_messages=20
        ))

        assert row['error'] is None
        assert row['data_valid']
        assert row['throughput'] > 0

    def test_bad_run_reports_error(self):
        row = run_single_simulation(RunConfig(
            loss_probability=0.1, corruption_probability=0.0,
            run_id=0, seed=1, num_messages=20, window_size=6, seqspace=6
        ))

        assert row['error'] is not None

    def test_sweep_results(self, runner):
        assert len(runner.results) == 8
        assert all(r['error'] is None for r in runner.results)
        assert all(r['data_valid'] for r in runner.results)

    def test_save_results(self, runner, tmp_path):
        path = runner.save_results()

        df = pd.read_csv(path)
        assert len(df) == 8
        assert {'loss_probability', 'corruption_probability', 'throughput'} <= set(df.columns)

    def test_aggregated(self, runner):
        aggregated = runner.get_aggregated_results()

        assert len(aggregated) == 4
        assert (aggregated['runs'] == 2).all()
        assert aggregated['all_valid'].all()

    def test_progress_callback(self, tmp_path):
        calls = []
        runner = BatchRunner(loss_probabilities=[0.0],
                             corruption_probabilities=[0.0],
                             runs_per_config=2, num_messages=5,
                             output_file=str(tmp_path / 'r.csv'),
                             on_progress=lambda done, total, _: calls.append((done, total)))
        runner.run_sequential()

        assert calls == [(1, 2), (2, 2)]

    def test_nothing_to_save(self, tmp_path):
        runner = BatchRunner(output_file=str(tmp_path / 'empty.csv'))

        assert runner.save_results() is None


class TestSweepHeatmap:
    """Tests for heatmap generation."""

    @pytest.fixture
    def results(self):
        return [
            {'loss_probability': loss, 'corruption_probability': corrupt,
             'throughput': 0.1 - loss * 0.1 - corrupt * 0.05 + run * 0.001,
             'error': None}
            for loss in (0.0, 0.2) for corrupt in (0.0, 0.2) for run in range(2)
        ]

    def test_matrix(self, results):
        matrix = SweepHeatmap(results=results).create_matrix('throughput')

        assert matrix.shape == (2, 2)
        assert list(matrix.index) == [0.2, 0.0]
        assert matrix.loc[0.0, 0.0] == pytest.approx(0.1005)

    def test_unknown_metric(self, results):
        with pytest.raises(ValueError):
            SweepHeatmap(results=results).create_matrix('nope')

    def test_empty(self):
        with pytest.raises(ValueError):
            SweepHeatmap().create_matrix()

    def test_plot(self, results, tmp_path):
        output = str(tmp_path / 'plots' / 'throughput.png')

        path = SweepHeatmap(results=results).plot('throughput', output_file=output)

        assert path == output
        assert os.path.exists(output)

    def test_from_csv(self, results, tmp_path):
        csv_file = tmp_path / 'results.csv'
        pd.DataFrame(results).to_csv(csv_file, index=False)

        matrix = SweepHeatmap(csv_file=str(csv_file)).create_matrix()

        assert matrix.shape == (2, 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
