"""Runtime settings read from the environment (after load_dotenv in the entry point)."""

import os
from dataclasses import dataclass

MIN_POLYGON_POINTS = 3
DEFAULT_MAP_CENTER: tuple[float, float] = (40.7128, -74.0060)  # NYC
DATA_SOURCES: tuple[str, ...] = ("Open-Meteo",)

_PREFIX = "REGIONWATCH_"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration shared by the store, provider and drawing tools."""

    api_base_url: str = "https://archive-api.open-meteo.com/v1/archive"
    timezone: str = "UTC"  # pytz zone name; also sent to Open-Meteo
    request_timeout: float = 10.0  # seconds
    max_polygon_points: int = 12
    closure_threshold: float = 0.001  # degrees, planar
    timeline_days_before: int = 15
    timeline_days_after: int = 15
    log_level: str = "INFO"


def _env(name: str) -> str | None:
    value = os.environ.get(_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_number(name: str, cast: type[int] | type[float], default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{_PREFIX}{name} must be a number, got {raw!r}") from e


def load_settings() -> Settings:
    """Build Settings from REGIONWATCH_* environment variables.

    Unset or blank variables fall back to the dataclass defaults.

    Raises:
        ValueError: When a numeric variable cannot be parsed or is out of range.
    """
    defaults = Settings()
    settings = Settings(
        api_base_url=_env("API_BASE_URL") or defaults.api_base_url,
        timezone=_env("TIMEZONE") or defaults.timezone,
        request_timeout=float(
            _env_number("REQUEST_TIMEOUT", float, defaults.request_timeout)
        ),
        max_polygon_points=int(
            _env_number("MAX_POLYGON_POINTS", int, defaults.max_polygon_points)
        ),
        closure_threshold=float(
            _env_number("CLOSURE_THRESHOLD", float, defaults.closure_threshold)
        ),
        timeline_days_before=int(
            _env_number("TIMELINE_DAYS_BEFORE", int, defaults.timeline_days_before)
        ),
        timeline_days_after=int(
            _env_number("TIMELINE_DAYS_AFTER", int, defaults.timeline_days_after)
        ),
        log_level=(_env("LOG_LEVEL") or defaults.log_level).upper(),
    )
    if settings.max_polygon_points < MIN_POLYGON_POINTS:
        raise ValueError(
            f"{_PREFIX}MAX_POLYGON_POINTS must be >= {MIN_POLYGON_POINTS},"
            f" got {settings.max_polygon_points}"
        )
    if settings.timeline_days_before < 0 or settings.timeline_days_after < 0:
        raise ValueError("Timeline window must not be negative")
    return settings
