"""Dashboard renderer -- one plotly line chart per tracked asset on one HTML page."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

import plotly.graph_objects as go
from jinja2 import Environment, FileSystemLoader, select_autoescape

from borrowwatch.exceptions import StorageError
from borrowwatch.logging import get_logger
from borrowwatch.models import AssetSeries
from borrowwatch.storage.series_store import SeriesStore

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
TIME_FORMAT = "%d-%m-%Y %H:%M:%S"


def format_timestamp(value: int) -> str:
    """Format Unix seconds as local DD-MM-YYYY HH:MM:SS."""
    return datetime.fromtimestamp(value).strftime(TIME_FORMAT)


def _line(name: str, labels: list[str], values: list[float]) -> go.Scatter:
    return go.Scatter(
        x=labels,
        y=values,
        name=name,
        mode="lines+markers+text",
        line={"shape": "spline"},
        marker={"symbol": "circle", "size": 10},
        texttemplate="%{y:,.0f}",
        textposition="top center",
    )


class DashboardRenderer:
    """Builds the dashboard page from stored series.

    Every render reads each asset's record from disk; nothing is cached.

    Args:
        store: Series persistence to read from.
        title_template: Chart title, ``{asset}`` is substituted.
    """

    def __init__(self, store: SeriesStore, title_template: str = "Chart {asset}") -> None:
        self._store = store
        self._title_template = title_template
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    def build_chart(self, asset: str, series: AssetSeries) -> go.Figure:
        """Two aligned line series (borrowed, repaid) over formatted ingestion times."""
        labels = [format_timestamp(ts) for ts in series.time]

        fig = go.Figure()
        fig.add_trace(_line("Borrowed", labels, series.borrow))
        fig.add_trace(_line("Repaid", labels, series.repay))
        fig.update_layout(
            title={"text": self._title_template.format(asset=asset)},
            height=450,
            legend={"orientation": "h", "y": 1.1},
            margin={"l": 60, "r": 30, "t": 70, "b": 40},
        )
        # Range slider starts at the full range
        fig.update_xaxes(type="category", rangeslider={"visible": True})
        fig.update_yaxes(autorange=True, rangemode="normal")
        return fig

    def render(self, assets: Iterable[str]) -> str:
        """Render every asset's chart into one HTML document.

        Assets whose record cannot be loaded are logged and left out.
        """
        charts: list[dict[str, str]] = []
        for asset in assets:
            try:
                series = self._store.load(asset)
            except StorageError as e:
                logger.warning("asset_render_failed", asset=asset, error=str(e))
                continue

            fig = self.build_chart(asset, series)
            charts.append({
                "asset": asset,
                # plotly.js is embedded once, with the first chart
                "html": fig.to_html(
                    full_html=False,
                    include_plotlyjs="cdn" if not charts else False,
                    div_id=f"chart-{asset}",
                ),
            })

        logger.debug("dashboard_rendered", charts=len(charts))
        template = self._env.get_template("dashboard.html")
        return template.render(charts=charts)
