"""
Visualization module for run charts.
Generates matplotlib timelines of the market and nations, and a snapshot of
the current regions coloured by owning nation.
"""

from typing import List
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
from pathlib import Path

from config import EconomyConfig

# Background shading per cycle phase on timeline charts
PHASE_COLORS = {
    "EXPANSION": '#d8f3dc',
    "PEAK": '#fff3bf',
    "CONTRACTION": '#ffe3e3',
    "TROUGH": '#e7e7e7',
}

INDEPENDENT_COLOR = (0.7, 0.7, 0.7)


class Visualizer:
    """Handles all visualization and plotting."""

    def __init__(self, config: EconomyConfig = None):
        self.config = config or EconomyConfig()

    def _shade_phases(self, ax, turns: List[int], phases: List[str]):
        """Shade contiguous runs of the same cycle phase."""
        if not turns:
            return
        start = 0
        for i in range(1, len(turns) + 1):
            if i == len(turns) or phases[i] != phases[start]:
                ax.axvspan(turns[start] - 0.5, turns[i - 1] + 0.5,
                           color=PHASE_COLORS.get(phases[start], '#ffffff'), alpha=0.5, lw=0)
                start = i

    def plot_timeline_analysis(self, history: List[dict], output_path: Path):
        """Generate timeline analysis plots."""
        turns = [h['turn'] for h in history]
        phases = [h['phase'] for h in history]

        fig, axes = plt.subplots(2, 2, figsize=(16, 12))
        fig.suptitle('Economic Timeline Analysis', fontsize=16, fontweight='bold')

        # Wealth and production
        ax = axes[0, 0]
        self._shade_phases(ax, turns, phases)
        ax.plot(turns, [h['total_wealth'] for h in history], linewidth=2, color='green', label='Wealth')
        ax.plot(turns, [h['total_production'] for h in history], linewidth=2, color='blue', label='Production')
        ax.set_title('Total Wealth & Production')
        ax.set_xlabel('Turn')
        ax.grid(True, alpha=0.3)
        ax.legend()

        # Prices
        ax = axes[0, 1]
        self._shade_phases(ax, turns, phases)
        resources = list(history[0]['prices'].keys()) if history else []
        for resource in resources:
            ax.plot(turns, [h['prices'].get(resource, np.nan) for h in history], linewidth=2, label=resource)
        ax.axhline(y=self.config.base_price, color='k', linestyle='--', alpha=0.4, label='Base Price')
        ax.set_title('Market Prices')
        ax.set_xlabel('Turn')
        ax.set_ylabel('Price')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)

        # Nation GDP and stability
        nation_ids = [n['id'] for n in history[-1]['nations']] if history else []
        names = {n['id']: n['name'] for n in history[-1]['nations']} if history else {}
        for ax, key, title in ((axes[1, 0], 'gdp', 'Nation GDP'),
                               (axes[1, 1], 'stability', 'Nation Stability')):
            self._shade_phases(ax, turns, phases)
            for nation_id in nation_ids:
                series = []
                for h in history:
                    row = next((n for n in h['nations'] if n['id'] == nation_id), None)
                    series.append(row[key] if row else np.nan)
                ax.plot(turns, series, linewidth=2, label=names[nation_id])
            ax.set_title(title)
            ax.set_xlabel('Turn')
            ax.grid(True, alpha=0.3)
            if nation_ids:
                ax.legend(fontsize=8)
        axes[1, 1].set_ylim(0, 1)
        axes[1, 1].axhline(y=0.2, color='r', linestyle='--', alpha=0.5)

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()

    def plot_region_snapshot(self, context, output_path: Path):
        """Bar charts of current region wealth and infrastructure, coloured by nation."""
        regions = context.economic_system.get_all_regions()
        manager = context.nation_manager

        fig, axes = plt.subplots(1, 2, figsize=(16, 7))
        fig.suptitle(f'Regions - Turn {context.turn}', fontsize=16, fontweight='bold')

        if not regions:
            for ax in axes:
                ax.text(0.5, 0.5, 'No regions', ha='center', va='center')
            plt.savefig(output_path, dpi=150, bbox_inches='tight')
            plt.close()
            return

        regions = sorted(regions, key=lambda r: r.wealth, reverse=True)
        colors = []
        for region in regions:
            nation = manager.get_region_nation(region.id)
            colors.append(nation.color if nation else INDEPENDENT_COLOR)
        labels = [r.name[:15] for r in regions]

        axes[0].barh(labels, [r.wealth for r in regions], color=colors)
        axes[0].set_xlabel('Wealth')
        axes[0].set_title('Region Wealth', fontweight='bold')
        axes[0].invert_yaxis()

        axes[1].barh(labels, [r.infrastructure.level for r in regions], color=colors)
        axes[1].set_xlabel('Infrastructure Level')
        axes[1].set_title('Region Infrastructure', fontweight='bold')
        axes[1].invert_yaxis()

        legend_elements = [mpatches.Patch(facecolor=n.color, label=n.name) for n in manager.get_all_nations()]
        if legend_elements:
            axes[0].legend(handles=legend_elements, loc='lower right', fontsize=8)

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
