from pathlib import Path
from typing import List, Dict, Any
from jinja2 import Template
from datetime import datetime

class ReportGenerator:
    """Generates HTML reports for simulation runs."""

    def __init__(self, config):
        self.config = config
        self.template = self._get_template()

    def generate_report(self, history: List[Dict[str, Any]], output_dir: Path):
        """Render the run history into output_dir/index.html."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        events = []
        for h in history:
            for event in h.get('events', []):
                events.append({"turn": h['turn'], "message": event})

        final = history[-1] if history else {}
        first = history[0] if history else {}

        # Price movement over the whole run
        prices = []
        for resource, price in final.get('prices', {}).items():
            start = first.get('prices', {}).get(resource, price)
            change = (price - start) / start if start else 0.0
            prices.append({"resource": resource, "price": price, "change": change})

        nations = sorted(final.get('nations', []), key=lambda n: n['gdp'], reverse=True)

        # Only link charts that were actually written
        charts = [name for name in ("timeline_analysis.png", "region_snapshot.png")
                  if (output_dir / name).exists()]

        html_content = self.template.render(
            simulation_name="EconSim Run",
            timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            turns=len(history),
            final=final,
            region_count=len(final.get('regions', [])),
            prices=prices,
            nations=nations,
            events=events,
            charts=charts,
            config=self.config
        )

        report_path = output_dir / "index.html"
        with open(report_path, "w") as f:
            f.write(html_content)

        return report_path

    def _get_template(self) -> Template:
        """Return Jinja2 template for the report."""
        return Template("""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ simulation_name }} - Report</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    <style>
        body { background-color: #f8f9fa; }
        .card { margin-bottom: 20px; box-shadow: 0 4px 6px rgba(0,0,0,0.1); }
        .event-log { max-height: 500px; overflow-y: auto; font-family: monospace; font-size: 0.9em; }
        .stat-card { text-align: center; padding: 20px; }
        .stat-value { font-size: 2em; font-weight: bold; color: #0d6efd; }
        .stat-label { color: #6c757d; text-transform: uppercase; font-size: 0.8em; }
        .chart-container { text-align: center; }
        img { max-width: 100%; height: auto; border-radius: 5px; }
    </style>
</head>
<body>
    <nav class="navbar navbar-dark bg-dark">
        <div class="container-fluid">
            <span class="navbar-brand mb-0 h1">{{ simulation_name }}</span>
            <span class="navbar-text">{{ timestamp }}</span>
        </div>
    </nav>

    <div class="container mt-4">
        <!-- Key Metrics -->
        <div class="row mb-4">
            <div class="col-md-3">
                <div class="card stat-card">
                    <div class="stat-value">{{ turns }}</div>
                    <div class="stat-label">Turns</div>
                </div>
            </div>
            <div class="col-md-3">
                <div class="card stat-card">
                    <div class="stat-value">{{ region_count }}</div>
                    <div class="stat-label">Regions</div>
                </div>
            </div>
            <div class="col-md-3">
                <div class="card stat-card">
                    <div class="stat-value">{{ "{:,}".format(final.total_wealth or 0) }}</div>
                    <div class="stat-label">Total Wealth</div>
                </div>
            </div>
            <div class="col-md-3">
                <div class="card stat-card">
                    <div class="stat-value">{{ (final.phase or "n/a")|title }}</div>
                    <div class="stat-label">Cycle Phase</div>
                </div>
            </div>
        </div>

        <div class="row">
            <div class="col-md-8">
                {% for chart in charts %}
                <div class="card">
                    <div class="card-header fw-bold">{{ chart | replace('_', ' ') | replace('.png', '') | title }}</div>
                    <div class="card-body chart-container">
                        <img src="{{ chart }}" alt="{{ chart }}">
                    </div>
                </div>
                {% else %}
                <div class="alert alert-warning">No charts found. Run with visualization enabled.</div>
                {% endfor %}

                <div class="card">
                    <div class="card-header fw-bold">Nations</div>
                    <div class="card-body">
                        <table class="table table-sm">
                            <thead><tr><th>Nation</th><th>Regions</th><th>GDP</th><th>Growth</th><th>Treasury</th><th>Stability</th></tr></thead>
                            <tbody>
                            {% for n in nations %}
                            <tr>
                                <td>{{ n.name }}</td>
                                <td>{{ n.regions }}</td>
                                <td>{{ "%.0f"|format(n.gdp) }}</td>
                                <td>{{ "%.1f"|format(n.growth * 100) }}%</td>
                                <td>{{ "%.0f"|format(n.treasury) }}</td>
                                <td>{{ "%.0f"|format(n.stability * 100) }}%</td>
                            </tr>
                            {% endfor %}
                            </tbody>
                        </table>
                    </div>
                </div>

                <div class="card">
                    <div class="card-header fw-bold">Market Prices</div>
                    <div class="card-body">
                        <table class="table table-sm">
                            <thead><tr><th>Resource</th><th>Price</th><th>Change</th></tr></thead>
                            <tbody>
                            {% for p in prices %}
                            <tr>
                                <td>{{ p.resource }}</td>
                                <td>{{ "%.2f"|format(p.price) }}</td>
                                <td>{{ "%+.1f"|format(p.change * 100) }}%</td>
                            </tr>
                            {% endfor %}
                            </tbody>
                        </table>
                    </div>
                </div>
            </div>

            <!-- Event Log -->
            <div class="col-md-4">
                <div class="card">
                    <div class="card-header fw-bold">Event Log</div>
                    <div class="card-body event-log">
                        <input type="text" id="eventSearch" class="form-control mb-2" placeholder="Search events...">
                        <div id="eventList">
                            {% for event in events|reverse %}
                            <div class="event-item border-bottom py-1">
                                <span class="badge bg-secondary">Turn {{ event.turn }}</span>
                                {{ event.message }}
                            </div>
                            {% endfor %}
                        </div>
                    </div>
                </div>
            </div>
        </div>
    </div>

    <script>
        // Simple search filter
        document.getElementById('eventSearch').addEventListener('keyup', function() {
            let filter = this.value.toLowerCase();
            let items = document.querySelectorAll('.event-item');
            items.forEach(function(item) {
                let text = item.textContent.toLowerCase();
                item.style.display = text.includes(filter) ? '' : 'none';
            });
        });
    </script>
</body>
</html>
        """)
