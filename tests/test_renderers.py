"""
test_renderers.py — plotly and matplotlib renderers.
"""

from datetime import timedelta

import pytest

from conftest import T0, hour, square
from regionwatch.config import DEFAULT_MAP_CENTER
from regionwatch.models import Point, RangeSelection, Region, SingleSelection
from regionwatch.renderers.plotly_map import (
    FigureSurface,
    render_region_figure,
    render_timeline_figure,
)
from regionwatch.renderers.static import render_static_map, save_static_map
from regionwatch.rules import DEFAULT_COLOR, default_color_rules
from regionwatch.temporal import build_grid


@pytest.fixture()
def regions():
    return (
        Region(
            id="1",
            name="Region 1",
            boundary=square(40.70, -74.00),
            data_source="Open-Meteo",
            rules=default_color_rules(),
            current_value=21.3,
            current_color="#f59e0b",
        ),
        Region(id="2", name="Region 2", boundary=square(40.72, -74.02), data_source="Open-Meteo"),
    )


class TestRegionFigure:

    def test_one_closed_ring_per_region(self, regions):
        fig = render_region_figure(regions)
        assert len(fig.data) == 2
        ring = fig.data[0]
        assert ring.x[0] == ring.x[-1] and ring.y[0] == ring.y[-1]
        assert len(ring.x) == 5

    def test_colors_and_fallback(self, regions):
        fig = render_region_figure(regions)
        assert fig.data[0].fillcolor == "#f59e0b"
        assert fig.data[1].fillcolor == DEFAULT_COLOR

    def test_hover_shows_temperature(self, regions):
        fig = render_region_figure(regions)
        assert "21.3°C" in fig.data[0].hovertemplate
        assert "°C" not in fig.data[1].hovertemplate

    def test_draft_markers_and_guide_line(self):
        one = render_region_figure((), (Point(40.0, -74.0),))
        assert one.data[-1].mode == "markers"
        two = render_region_figure((), (Point(40.0, -74.0), Point(40.0, -73.99)))
        assert two.data[-1].mode == "markers+lines"

    def test_named_color_passes_through(self, regions):
        named = Region(
            id="3", name="Named", boundary=square(40.0, -74.0), data_source="Open-Meteo",
            current_value=1.0, current_color="teal",
        )
        fig = render_region_figure((named,))
        assert "teal" in fig.data[0].hovertemplate

    def test_empty_map_centers_on_default(self):
        fig = render_region_figure(())
        lat, lng = DEFAULT_MAP_CENTER
        assert tuple(fig.layout.xaxis.range) == pytest.approx((lng - 0.02, lng + 0.02))
        assert tuple(fig.layout.yaxis.range) == pytest.approx((lat - 0.02, lat + 0.02))

    def test_figure_surface_keeps_latest(self, regions):
        surface = FigureSurface()
        surface.render((), regions)
        surface.render((Point(1, 1),), regions)
        assert surface.render_count == 2
        assert len(surface.figure.data) == 3


class TestTimelineFigure:

    def test_single_thumb_position(self):
        grid = build_grid(T0, timedelta(hours=10), timedelta(hours=10))
        fig = render_timeline_figure(grid, SingleSelection(T0))
        thumbs = [s for s in fig.layout.shapes if s.type == "circle"]
        assert len(thumbs) == 1
        assert (thumbs[0].x0 + thumbs[0].x1) / 2 == pytest.approx(50.0)

    def test_range_thumbs_and_highlight(self):
        grid = build_grid(T0, timedelta(hours=10), timedelta(hours=10))
        fig = render_timeline_figure(grid, RangeSelection(hour(-10), hour(10)))
        thumbs = [s for s in fig.layout.shapes if s.type == "circle"]
        assert [(t.x0 + t.x1) / 2 for t in thumbs] == pytest.approx([0.0, 100.0])
        highlight = fig.layout.shapes[1]
        assert (highlight.x0, highlight.x1) == (0.0, 100.0)
        assert fig.layout.title.text.startswith("Range:")


class TestStaticMap:

    def test_render(self, regions):
        fig = render_static_map(regions, title="2024-07-15 14:00")
        ax = fig.axes[0]
        assert len(ax.patches) == 2
        assert ax.get_title() == "2024-07-15 14:00"

    def test_save(self, regions, tmp_path):
        path = save_static_map(regions, tmp_path / "out" / "map.png")
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
