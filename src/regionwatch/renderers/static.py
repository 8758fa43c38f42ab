"""Matplotlib static PNG renderer."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Polygon

from regionwatch.models import Region
from regionwatch.rules import DEFAULT_COLOR

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_map(regions: tuple[Region, ...], title: str = "", chart_size: int = 8) -> Figure:
    """Render regions as filled polygons on plain lon/lat axes.

    Args:
        regions: Regions to draw.
        title: Optional caption (e.g. the selected hour).
        chart_size: Output image size in inches.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(chart_size, chart_size))
    fig.patch.set_facecolor("white")

    for region in regions:
        color = region.current_color or DEFAULT_COLOR
        xy = np.array([(p.longitude, p.latitude) for p in region.boundary])
        ax.add_patch(
            Polygon(xy, closed=True, facecolor=color, edgecolor=color, alpha=0.6, linewidth=2)
        )
        cx, cy = xy.mean(axis=0)
        label = region.name
        if region.current_value is not None:
            label += f"\n{region.current_value:.1f}°C"
        ax.text(cx, cy, label, ha="center", va="center", fontsize=9)

    if regions:
        all_xy = np.array([(p.longitude, p.latitude) for r in regions for p in r.boundary])
        (x0, y0), (x1, y1) = all_xy.min(axis=0), all_xy.max(axis=0)
        pad = max(x1 - x0, y1 - y0, 0.001) * 0.1
        ax.set_xlim(x0 - pad, x1 + pad)
        ax.set_ylim(y0 - pad, y1 + pad)

    ax.set_aspect("equal")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    if title:
        ax.set_title(title)

    return fig


def save_static_map(
    regions: tuple[Region, ...], output_path: Path | None = None, title: str = ""
) -> Path:
    """Save regions as a PNG file.

    Args:
        regions: Regions to draw.
        output_path: Destination path. Auto-generated under results/ if None.
        title: Optional caption; also used for the generated filename.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        stem = title or "regions"
        filename = f"{stem}.png".replace(" ", "_").replace(":", "-")
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_map(regions, title=title)
    fig.savefig(output_path, facecolor="white")
    plt.close(fig)
    return output_path
