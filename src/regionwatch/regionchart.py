"""CLI entry point for a region temperature chart.

Edit the clicks/days_ago variables at the top, then run:
    uv run regionchart
"""

import asyncio
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from pytz import timezone  # noqa: E402

from regionwatch.config import DATA_SOURCES, load_settings  # noqa: E402
from regionwatch.log import setup_logging  # noqa: E402
from regionwatch.models import Point, SingleSelection  # noqa: E402
from regionwatch.provider import OpenMeteoProvider  # noqa: E402
from regionwatch.renderers.plotly_map import FigureSurface, render_timeline_figure  # noqa: E402
from regionwatch.renderers.static import save_static_map  # noqa: E402
from regionwatch.session import MapSession  # noqa: E402
from regionwatch.store import RegionStore  # noqa: E402
from regionwatch.temporal import (  # noqa: E402
    build_grid,
    current_hour,
    start_of_day,
    timestamp_to_position,
)

_ROOT = Path(__file__).parent.parent.parent

# A block around Washington Square Park; the last click lands on the first point.
clicks = [
    Point(40.7323, -73.9990),
    Point(40.7323, -73.9955),
    Point(40.7295, -73.9955),
    Point(40.7295, -73.9990),
    Point(40.7323, -73.9990),
]
# The archive lags a few days behind real time.
days_ago = 7


async def _run() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    tz = timezone(settings.timezone)
    grid = build_grid(
        start_of_day(settings.timezone),
        before=timedelta(days=settings.timeline_days_before),
        after=timedelta(days=settings.timeline_days_after),
        tz_name=settings.timezone,
    )
    instant = tz.normalize(current_hour(settings.timezone) - timedelta(days=days_ago))
    selection = SingleSelection(instant)

    async with OpenMeteoProvider(
        base_url=settings.api_base_url,
        tz_name=settings.timezone,
        timeout=settings.request_timeout,
    ) as provider:
        store = RegionStore(
            {DATA_SOURCES[0]: provider},
            selection=selection,
            tz_name=settings.timezone,
            max_points=settings.max_polygon_points,
        )
        surface = FigureSurface()
        session = MapSession(store, surface, settings)
        session.start_drawing()
        for point in clicks:
            session.on_click(point)
        await store.settle()
        session.close()

    stamp = instant.strftime("%Y-%m-%d %H:%M")
    print(f"Selected {stamp} (slider at {timestamp_to_position(grid, instant):.1f}%)")
    for region in store.regions:
        value = "n/a" if region.current_value is None else f"{region.current_value:.1f}°C"
        print(f"{region.name}: {value} {region.current_color or ''}")

    results = _ROOT / "results"
    results.mkdir(parents=True, exist_ok=True)
    surface.figure.write_html(results / "regions.html")
    render_timeline_figure(grid, selection).write_html(results / "timeline.html")
    path = save_static_map(store.regions, title=f"regions {stamp}")
    print(f"Saved: {path}")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
