"""Temperature data providers — Open-Meteo archive over httpx."""

import logging
from datetime import date, datetime
from typing import Protocol

import httpx
from pytz import UnknownTimeZoneError, timezone

from regionwatch.geometry import location_key
from regionwatch.models import Point, Sample, TimeSeries

logger = logging.getLogger(__name__)

OPEN_METEO_ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"


class DataFetchError(Exception):
    """Data provider call failure."""


class DataProvider(Protocol):
    async def fetch_series(
        self, lat: float, lon: float, start_date: date, end_date: date
    ) -> TimeSeries:
        """Hourly series for a location, covering whole days start_date..end_date.

        Raises:
            DataFetchError: On any transport, status or payload failure.
        """
        ...


class OpenMeteoProvider:
    """Hourly 2 m temperature from the Open-Meteo historical archive.

    The archive is queried by calendar day but answers with hourly samples in
    local wall-clock time of the requested timezone. Samples are localized to
    aware datetimes in that zone, so they compare by instant against grid
    slots in any zone. Hours with a null temperature are skipped.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = OPEN_METEO_ARCHIVE_URL,
        tz_name: str = "UTC",
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self.base_url = base_url
        self.tz_name = tz_name
        self.timeout = timeout

    async def __aenter__(self) -> "OpenMeteoProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def fetch_series(
        self, lat: float, lon: float, start_date: date, end_date: date
    ) -> TimeSeries:
        params = {
            "latitude": str(lat),
            "longitude": str(lon),
            "start_date": start_date.strftime("%Y-%m-%d"),
            "end_date": end_date.strftime("%Y-%m-%d"),
            "hourly": "temperature_2m",
            "timezone": self.tz_name,
        }
        try:
            resp = await self._get_client().get(self.base_url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise DataFetchError(
                f"Weather API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise DataFetchError(f"Weather API request failed: {e}") from e
        except ValueError as e:
            raise DataFetchError("Weather API returned invalid JSON") from e

        logger.debug(
            "Fetched %s..%s for %.4f,%.4f", params["start_date"], params["end_date"], lat, lon
        )
        return parse_hourly_payload(payload, Point(latitude=lat, longitude=lon))


def parse_hourly_payload(payload: dict, location: Point) -> TimeSeries:
    """Convert an Open-Meteo hourly response body into a TimeSeries.

    Raises:
        DataFetchError: If the payload is missing fields, has mismatched arrays
            or holds a time or value of the wrong type.
    """
    try:
        hourly = payload["hourly"]
        times: list[str] = hourly["time"]
        temps: list[float | None] = hourly["temperature_2m"]
        tz = timezone(str(payload.get("timezone") or "UTC"))
        mismatched = len(times) != len(temps)
    except UnknownTimeZoneError as e:
        raise DataFetchError(f"Unknown timezone in weather payload: {e}") from e
    except (KeyError, TypeError) as e:
        raise DataFetchError(f"Unexpected weather payload: {e!r}") from e
    if mismatched:
        raise DataFetchError(
            f"Mismatched hourly arrays: {len(times)} times, {len(temps)} values"
        )

    samples: list[Sample] = []
    for raw_time, temp in zip(times, temps):
        if temp is None:
            continue
        try:
            naive = datetime.strptime(raw_time, "%Y-%m-%dT%H:%M")
            value = float(temp)
        except (ValueError, TypeError) as e:
            raise DataFetchError(f"Unparseable hourly sample: {raw_time!r}={temp!r}") from e
        ts = tz.localize(naive, is_dst=False)
        if samples and ts <= samples[-1].timestamp:
            # repeated wall-clock hour at a DST fall-back
            continue
        samples.append(Sample(timestamp=ts, value=value))

    return TimeSeries(location_key=location_key(location), samples=tuple(samples))
