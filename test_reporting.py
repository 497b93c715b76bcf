import pytest
from pathlib import Path
import tempfile
from reporting import ReportGenerator
from config import EconomyConfig
from world import TurnClock, build_sample_world

@pytest.fixture
def config():
    return EconomyConfig()

@pytest.fixture
def history(config):
    context = build_sample_world(config, num_regions=6, seed=1)
    TurnClock(context).run(3)
    return context.history

def test_generate_report(config, history):
    """Test HTML report generation from a short run."""
    with tempfile.TemporaryDirectory() as tmpdir:
        output_dir = Path(tmpdir)
        generator = ReportGenerator(config)

        report_path = generator.generate_report(history, output_dir)

        assert report_path.exists()
        content = report_path.read_text()

        assert "EconSim Run" in content
        assert "Northern Empire" in content
        assert "economic tick processed 6 regions" in content
        assert "Turn 3" in content
        assert "No charts found" in content, "Charts are only linked when present"

def test_report_links_existing_charts(config, history):
    with tempfile.TemporaryDirectory() as tmpdir:
        output_dir = Path(tmpdir)
        (output_dir / "timeline_analysis.png").write_bytes(b"png")
        content = ReportGenerator(config).generate_report(history, output_dir).read_text()
        assert 'src="timeline_analysis.png"' in content
        assert "region_snapshot.png" not in content

def test_empty_history(config):
    with tempfile.TemporaryDirectory() as tmpdir:
        report_path = ReportGenerator(config).generate_report([], Path(tmpdir))
        assert "EconSim Run" in report_path.read_text()
