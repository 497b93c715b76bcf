"""
Regional Economic Simulation
Main entry point for running turn-based economic simulations of regions
aggregated into nations, with business cycles, markets and nation policy.
"""

import argparse
import json
from pathlib import Path
import numpy as np

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.layout import Layout
from rich.panel import Panel

from config import EconomyConfig, load_config
from logger import setup_logger
from reporting import ReportGenerator
from viz import Visualizer
from world import TurnClock, build_sample_world

logger = None
console = Console()

class NumpyEncoder(json.JSONEncoder):
    """Custom encoder for NumPy data types."""
    def default(self, obj):
        if isinstance(obj, (np.integer, np.floating, np.bool_)):
            return obj.item()
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        return super(NumpyEncoder, self).default(obj)

def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments for simulation configuration."""
    parser = argparse.ArgumentParser(
        description="Turn-based regional economic simulation"
    )
    parser.add_argument(
        "--regions", type=int, default=12,
        help="Number of regions to generate (default: 12)"
    )
    parser.add_argument(
        "--turns", type=int, default=48,
        help="Number of turns to simulate (default: 48)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="JSON file with economy settings"
    )
    parser.add_argument(
        "--output-dir", type=str, default="output",
        help="Directory for output files (default: output)"
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO",
        help="Logging verbosity level (default: INFO)"
    )
    parser.add_argument(
        "--no-viz", action="store_true",
        help="Skip chart generation"
    )
    parser.add_argument(
        "--no-report", action="store_true",
        help="Skip the HTML report"
    )
    return parser.parse_args(argv)


def create_dashboard(turn, total_turns, snapshot, events):
    """Create a rich layout dashboard."""
    layout = Layout()
    layout.split_column(
        Layout(name="header", size=3),
        Layout(name="main", ratio=1),
        Layout(name="footer", size=3)
    )

    layout["header"].update(Panel(f"EconSim - Turn {turn}/{total_turns}", style="bold blue"))

    # Market table
    market = Table(title="Market")
    market.add_column("Resource", style="cyan")
    market.add_column("Price", style="green")
    market.add_column("Supply", justify="right")
    market.add_column("Demand", justify="right")
    for resource, price in snapshot.get("prices", {}).items():
        market.add_row(
            resource,
            f"{price:.2f}",
            f"{snapshot['supply'].get(resource, 0):.1f}",
            f"{snapshot['demand'].get(resource, 0):.1f}",
        )

    # Nations table
    nations = Table(title="Nations")
    nations.add_column("Nation", style="cyan")
    nations.add_column("Regions", justify="right")
    nations.add_column("GDP", justify="right", style="green")
    nations.add_column("Treasury", justify="right")
    nations.add_column("Stability", justify="right")
    for n in snapshot.get("nations", []):
        stability_style = "red" if n["stability"] < 0.2 else "white"
        nations.add_row(
            n["name"],
            str(n["regions"]),
            f"{n['gdp']:.0f}",
            f"{n['treasury']:.0f}",
            f"[{stability_style}]{n['stability']:.0%}[/{stability_style}]",
        )

    event_text = "\n".join([f"• {e}" for e in events[-8:]]) if events else "No events yet."

    layout["main"].split_row(
        Layout(Panel(market, title="Market"), ratio=1),
        Layout(Panel(nations, title="Nations"), ratio=1),
        Layout(Panel(event_text, title="Recent Events", style="yellow"), ratio=1)
    )

    layout["footer"].update(Panel(
        f"Phase: {snapshot.get('phase', '-').title()}  |  "
        f"Total wealth: {snapshot.get('total_wealth', 0):,}", style="italic"))

    return layout

def main(argv=None):
    """Main simulation loop with a live dashboard and end-of-run outputs."""
    global logger
    args = parse_args(argv)

    logger = setup_logger(level_name=args.log_level)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    config = load_config(Path(args.config)) if args.config else EconomyConfig()

    console.print(f"[bold green]Initializing world with {args.regions} regions...[/bold green]")
    context = build_sample_world(config, args.regions, seed=args.seed)
    clock = TurnClock(context)

    recent_events = []

    with Live(console=console, refresh_per_second=4) as live:
        for turn in range(args.turns):
            snapshot = clock.step()

            if snapshot.get("events"):
                recent_events.extend(str(e) for e in snapshot["events"])
                recent_events = recent_events[-20:]

            live.update(create_dashboard(turn + 1, args.turns, snapshot, recent_events))

    history = context.history
    history_file = output_dir / "simulation.json"
    with open(history_file, 'w') as f:
        json.dump(history, f, indent=2, cls=NumpyEncoder)
    console.print(f"[bold green]Simulation history saved to {history_file}[/bold green]")

    if not args.no_viz:
        visualizer = Visualizer(config)
        visualizer.plot_timeline_analysis(history, output_dir / "timeline_analysis.png")
        visualizer.plot_region_snapshot(context, output_dir / "region_snapshot.png")

    if not args.no_report:
        console.print("[bold yellow]Generating final report...[/bold yellow]")
        reporter = ReportGenerator(config)
        report_path = reporter.generate_report(history, output_dir)
        console.print(f"[bold green]Report generated at: {report_path}[/bold green]")

    console.print("[bold blue]Simulation complete![/bold blue]")
    return context


if __name__ == "__main__":
    main()
