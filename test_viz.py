import pytest
import matplotlib
matplotlib.use('Agg') # Non-interactive backend
from pathlib import Path
import tempfile
from config import EconomyConfig
from viz import Visualizer
from world import SimulationContext, TurnClock, build_sample_world

@pytest.fixture
def output_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)

@pytest.fixture
def context():
    context = build_sample_world(EconomyConfig(), num_regions=8, seed=4)
    TurnClock(context).run(14)
    return context

def test_plot_timeline_analysis(context, output_dir):
    """Timeline chart covers a full cycle of history."""
    viz = Visualizer(context.config)
    output_file = output_dir / "timeline_analysis.png"
    viz.plot_timeline_analysis(context.history, output_file)
    assert output_file.exists()
    assert output_file.stat().st_size > 0

def test_plot_region_snapshot(context, output_dir):
    viz = Visualizer(context.config)
    output_file = output_dir / "region_snapshot.png"
    viz.plot_region_snapshot(context, output_file)
    assert output_file.exists()
    assert output_file.stat().st_size > 0

def test_plot_region_snapshot_empty_world(output_dir):
    viz = Visualizer()
    output_file = output_dir / "empty.png"
    viz.plot_region_snapshot(SimulationContext(), output_file)
    assert output_file.exists()

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
