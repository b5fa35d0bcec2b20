"""
Sweep Heatmap Visualization

This module generates 2D heatmaps of a sweep metric as a function of
(loss probability, corruption probability).
"""

import os
from typing import Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from config import PLOTS_DIR


METRIC_LABELS = {
    'throughput': 'Throughput (messages / time unit)',
    'packets_resent': 'Retransmissions per run',
    'latency_mean': 'Mean delivery latency',
    'messages_delivered': 'Messages delivered',
}


class SweepHeatmap:
    """
    Generates heatmaps of sweep results.

    Rows are loss probabilities (highest at the top), columns are
    corruption probabilities; each cell is the mean over runs.
    """

    def __init__(
        self,
        results: Optional[List[Dict]] = None,
        csv_file: Optional[str] = None
    ):
        """
        Initialize heatmap generator.

        Args:
            results: List of result dictionaries
            csv_file: Path to CSV file with results
        """
        if results:
            self.df = pd.DataFrame(results)
        elif csv_file:
            self.df = pd.read_csv(csv_file)
        else:
            self.df = pd.DataFrame()

        if 'error' in self.df.columns:
            self.df = self.df[self.df['error'].isna()]

    def create_matrix(self, metric: str = 'throughput') -> pd.DataFrame:
        """
        Mean of metric per (loss, corruption) cell.

        Returns:
            Pivot table indexed by loss probability, descending
        """
        if self.df.empty:
            raise ValueError("No results to plot")
        if metric not in self.df.columns:
            raise ValueError(f"Unknown metric: {metric}")

        matrix = self.df.pivot_table(
            index='loss_probability',
            columns='corruption_probability',
            values=metric,
            aggfunc='mean'
        )
        return matrix.sort_index(ascending=False)

    def plot(
        self,
        metric: str = 'throughput',
        output_file: Optional[str] = None,
        title: Optional[str] = None,
        figsize: Tuple[int, int] = (10, 7),
        cmap: str = "viridis",
        show_values: bool = True
    ) -> str:
        """
        Generate and save heatmap.

        Args:
            metric: Result column to plot
            output_file: Output file path (auto-generated if None)
            title: Plot title
            figsize: Figure size (width, height)
            cmap: Colormap name
            show_values: Show values in cells

        Returns:
            Path to saved figure
        """
        matrix = self.create_matrix(metric)

        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            matrix,
            annot=show_values,
            fmt='.3f',
            cmap=cmap,
            ax=ax,
            cbar_kws={'label': METRIC_LABELS.get(metric, metric)}
        )

        ax.set_xlabel('Corruption probability', fontsize=12)
        ax.set_ylabel('Loss probability', fontsize=12)
        ax.set_title(title or f"{METRIC_LABELS.get(metric, metric)} vs channel impairments",
                     fontsize=14, fontweight='bold')

        plt.tight_layout()

        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, f'{metric}_heatmap.png')
        else:
            out_dir = os.path.dirname(output_file)
            if out_dir:
                os.makedirs(out_dir, exist_ok=True)

        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        print(f"Heatmap saved to: {output_file}")
        return output_file
