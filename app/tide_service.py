"""
NOAA Tide Service - Station Tide Predictions

This module retrieves tide predictions for a NOAA CO-OPS station and turns
them into a classified tide series.

Key features:
- Hourly predictions relative to MLLW, in feet
- Malformed points are dropped instead of failing the whole request
- High/low labels supplied by NOAA are kept; the rest are derived from the
  shape of the curve (see tide_processing.classify_tide_types)

Reference:
- CO-OPS Data API: https://api.tidesandcurrents.noaa.gov/api/prod/
"""
import json
import logging
import math
import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .config import (
    API_TIMEOUT_SECONDS,
    FETCH_WINDOW_HOURS,
    MAX_RESPONSE_SIZE,
    NOAA_API_URL,
    NOAA_APPLICATION,
)
from .exceptions import InvalidResponse, ServiceUnavailable
from .models import Sample, Series, TideType
from .tide_processing import classify_tide_types

logger = logging.getLogger(__name__)

# NOAA expects begin/end dates as "yyyyMMdd HH:mm" in GMT
NOAA_DATE_FORMAT = '%Y%m%d %H:%M'


def safe_read_response(response, max_size: int = MAX_RESPONSE_SIZE) -> bytes:
    """
    Safely read HTTP response with size limit to prevent memory exhaustion.

    Args:
        response: urllib response object
        max_size: Maximum allowed response size in bytes

    Returns:
        Response body as bytes

    Raises:
        InvalidResponse: If response exceeds size limit
    """
    # Check Content-Length header if available
    content_length = response.headers.get('Content-Length')
    if content_length and int(content_length) > max_size:
        raise InvalidResponse(f"Response too large: {content_length} bytes (max: {max_size})")

    # Read with size limit (read one extra byte to detect overflow)
    data = response.read(max_size + 1)
    if len(data) > max_size:
        raise InvalidResponse(f"Response exceeded size limit of {max_size} bytes")

    return data


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_time(value: Any) -> Optional[datetime]:
    """Parse NOAA's 'YYYY-MM-DD HH:MM' (or ISO 8601) timestamp as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return _to_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def _parse_height(value: Any) -> Optional[float]:
    """Parse a height value; NOAA sends decimals as strings."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        height = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(height):
        return None
    return height


def parse_predictions(payload: Dict) -> Series:
    """
    Convert a decoded NOAA predictions payload into a tide series.

    Args:
        payload: Decoded JSON object from the datagetter endpoint

    Returns:
        Unclassified series; points with an unparseable time or height are dropped

    Raises:
        InvalidResponse: If the payload is not an object holding a list of points
    """
    if not isinstance(payload, dict):
        raise InvalidResponse("Expected a JSON object from NOAA")

    if 'error' in payload:
        error = payload['error']
        message = error.get('message') if isinstance(error, dict) else error
        raise InvalidResponse(f"NOAA error: {message}")

    points = payload.get('predictions', payload.get('data'))
    if not isinstance(points, list):
        raise InvalidResponse("NOAA response has no list of predictions")

    series: List[Sample] = []
    dropped = 0
    for entry in points:
        if not isinstance(entry, dict):
            dropped += 1
            continue

        time = _parse_time(entry.get('t'))
        height = _parse_height(entry.get('v'))
        if time is None or height is None:
            dropped += 1
            continue

        series.append(Sample(
            time=time,
            height=height,
            type=TideType.from_noaa_code(entry.get('type')),
        ))

    if dropped:
        logger.debug(f"Dropped {dropped} malformed prediction point(s)")

    return series


class NOAATideService:
    """
    Client for NOAA CO-OPS tide predictions.

    Each fetch is a single blocking HTTP GET; callers that need to stay
    responsive run it in a worker thread (see session.TideSession).
    """

    def __init__(
        self,
        base_url: str = NOAA_API_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        max_response_size: int = MAX_RESPONSE_SIZE,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_response_size = max_response_size

    def build_url(self, station_id: str, start_time: datetime, end_time: datetime) -> str:
        """
        Build the datagetter URL for a station and time window.

        Args:
            station_id: NOAA station ID (e.g., '8724580' for Key West)
            start_time: Window start (naive means UTC)
            end_time: Window end (naive means UTC)

        Returns:
            Fully encoded request URL
        """
        params = {
            'product': 'predictions',
            'application': NOAA_APPLICATION,
            'begin_date': _to_utc(start_time).strftime(NOAA_DATE_FORMAT),
            'end_date': _to_utc(end_time).strftime(NOAA_DATE_FORMAT),
            'datum': 'MLLW',
            'station': station_id,
            'time_zone': 'gmt',
            'units': 'english',
            'interval': 'h',
            'format': 'json',
        }
        return f"{self.base_url}?{urllib.parse.urlencode(params)}"

    def fetch_series(self, station_id: str, start_time: datetime, end_time: datetime) -> Series:
        """
        Fetch raw hourly predictions for a station.

        Args:
            station_id: NOAA station ID
            start_time: Window start
            end_time: Window end, must be after start_time

        Returns:
            Unclassified series in NOAA's (chronological) order

        Raises:
            ValueError: If the station id is empty or the window is empty
            ServiceUnavailable: On transport failure or non-success status
            InvalidResponse: If the body cannot be parsed into predictions
        """
        if not station_id:
            raise ValueError("station_id is required")
        if _to_utc(start_time) >= _to_utc(end_time):
            raise ValueError("start_time must be before end_time")

        url = self.build_url(station_id, start_time, end_time)

        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                status = getattr(response, 'status', 200)
                if status != 200:
                    raise ServiceUnavailable(f"NOAA returned HTTP {status} for station {station_id}")
                body = safe_read_response(response, self.max_response_size)
        except urllib.error.HTTPError as e:
            logger.warning(f"NOAA fetch failed for station {station_id}: HTTP {e.code}")
            raise ServiceUnavailable(f"NOAA returned HTTP {e.code} for station {station_id}") from e
        except (urllib.error.URLError, OSError) as e:
            logger.warning(f"NOAA fetch failed for station {station_id}: {e}")
            raise ServiceUnavailable(f"Could not reach NOAA: {e}") from e

        try:
            payload = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidResponse(f"NOAA response is not valid JSON: {e}") from e

        return parse_predictions(payload)

    def fetch_tide_data(
        self,
        station_id: str,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Series:
        """
        Fetch and classify predictions for a station.

        Args:
            station_id: NOAA station ID
            start_time: Window start. If not provided, the current time is used.
            end_time: Window end. Defaults to FETCH_WINDOW_HOURS after start_time.

        Returns:
            Series with high/low labels applied
        """
        if start_time is None:
            start_time = datetime.now(timezone.utc)
        if end_time is None:
            end_time = start_time + timedelta(hours=FETCH_WINDOW_HOURS)

        return classify_tide_types(self.fetch_series(station_id, start_time, end_time))
