"""Plotly interactive renderer — region map and timeline track.

Coordinates are plotted as plain lon/lat on x/y with a locked aspect ratio; no
map projection is applied.
"""

import plotly.graph_objects as go

from regionwatch.config import DEFAULT_MAP_CENTER
from regionwatch.models import Point, RangeSelection, Region, SingleSelection, TimelineSelection
from regionwatch.rules import DEFAULT_COLOR, hex_to_hsl
from regionwatch.temporal import TimelineGrid, timestamp_to_position

_BG = "#f8fafc"
_DRAFT_COLOR = "#3b82f6"
_TRACK_COLOR = "#cbd5e1"
_THUMB_COLOR = "#6366f1"


def _color_label(color: str) -> str:
    try:
        return hex_to_hsl(color)
    except ValueError:
        return color  # named CSS colors pass through


def _region_trace(region: Region) -> go.Scatter:
    color = region.current_color or DEFAULT_COLOR
    ring = list(region.boundary) + [region.boundary[0]]
    if region.current_value is not None:
        label = f"{region.name}<br>Temperature: {region.current_value:.1f}°C"
    else:
        label = region.name
    return go.Scatter(
        x=[p.longitude for p in ring],
        y=[p.latitude for p in ring],
        mode="lines",
        fill="toself",
        fillcolor=color,
        opacity=0.6,
        line=dict(color=color, width=2),
        hovertemplate=f"{label}<br>{_color_label(color)}<extra></extra>",
        name=region.name,
    )


def render_region_figure(
    regions: tuple[Region, ...], draft_points: tuple[Point, ...] = ()
) -> go.Figure:
    """Render finished regions and the in-progress draft.

    Each region is a filled ring in its current color (slate when
    unclassified). Draft points are drawn as markers, joined by a dashed
    guide line once there are two of them.

    Args:
        regions: Regions to draw, in store order.
        draft_points: Points of the open draft, if any.

    Returns:
        Plotly Figure object.
    """
    traces: list[go.Scatter] = [_region_trace(r) for r in regions]

    if draft_points:
        traces.append(
            go.Scatter(
                x=[p.longitude for p in draft_points],
                y=[p.latitude for p in draft_points],
                mode="markers+lines" if len(draft_points) >= 2 else "markers",
                marker=dict(size=10, color=_DRAFT_COLOR, line=dict(color="#ffffff", width=2)),
                line=dict(color=_DRAFT_COLOR, width=2, dash="dash"),
                hoverinfo="skip",
                name="draft",
            )
        )

    fig = go.Figure(data=traces)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        dragmode="pan",
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, scaleanchor="x", scaleratio=1),
    )
    if not traces:
        lat, lng = DEFAULT_MAP_CENTER
        fig.update_xaxes(range=[lng - 0.02, lng + 0.02])
        fig.update_yaxes(range=[lat - 0.02, lat + 0.02])
    fig._config = {"scrollZoom": True, "displayModeBar": False}  # type: ignore[attr-defined]
    return fig


def _thumb(position: float) -> dict:
    return dict(
        type="circle",
        xref="x",
        yref="y",
        x0=position - 1,
        x1=position + 1,
        y0=-0.5,
        y1=0.5,
        fillcolor=_THUMB_COLOR,
        line=dict(color="#ffffff", width=2),
    )


def render_timeline_figure(grid: TimelineGrid, selection: TimelineSelection) -> go.Figure:
    """Render the slider track with thumbs placed by timestamp_to_position."""
    shapes: list[dict] = [
        dict(
            type="rect",
            xref="x",
            yref="y",
            x0=0,
            x1=100,
            y0=-0.15,
            y1=0.15,
            fillcolor=_TRACK_COLOR,
            line=dict(width=0),
        )
    ]

    if isinstance(selection, SingleSelection):
        shapes.append(_thumb(timestamp_to_position(grid, selection.instant)))
        caption = f"Selected: {selection.instant.strftime('%b %d, %Y %H:%M')}"
    else:
        assert isinstance(selection, RangeSelection)
        lo = timestamp_to_position(grid, selection.start)
        hi = timestamp_to_position(grid, selection.end)
        shapes.append(
            dict(
                type="rect",
                xref="x",
                yref="y",
                x0=min(lo, hi),
                x1=max(lo, hi),
                y0=-0.15,
                y1=0.15,
                fillcolor=_THUMB_COLOR,
                opacity=0.3,
                line=dict(width=0),
            )
        )
        shapes += [_thumb(lo), _thumb(hi)]
        caption = (
            f"Range: {selection.start.strftime('%b %d %H:%M')}"
            f" - {selection.end.strftime('%b %d %H:%M')}"
        )

    fig = go.Figure()
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        height=120,
        margin=dict(l=20, r=20, t=30, b=30),
        title=dict(text=caption, font=dict(size=12)),
        shapes=shapes,
        xaxis=dict(
            range=[-2, 102],
            fixedrange=True,
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=[0, 50, 100],
            ticktext=[
                grid[0].strftime("%b %d"),
                grid[len(grid) // 2].strftime("%b %d"),
                grid.last.strftime("%b %d"),
            ],
        ),
        yaxis=dict(visible=False, range=[-1, 1], fixedrange=True),
    )
    return fig


class FigureSurface:
    """Surface that keeps the latest region figure for a front end to display."""

    def __init__(self) -> None:
        self.figure: go.Figure = render_region_figure(())
        self.render_count = 0

    def render(self, draft_points: tuple[Point, ...], regions: tuple[Region, ...]) -> None:
        self.figure = render_region_figure(regions, draft_points)
        self.render_count += 1
