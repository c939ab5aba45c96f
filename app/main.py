import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Query, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from timezonefinder import TimezoneFinder

from .config import FETCH_WINDOW_HOURS, LOCATION_STORE_PATH, LOG_LEVEL
from .exceptions import EmptySeries, InvalidResponse, ServiceUnavailable
from .location_search import LocationSearch
from .location_store import LocationStore
from .models import Location, Sample, Series, Station
from .session import TideSession, TideSnapshot
from .stations import FLORIDA_STATIONS, get_station, rank_stations
from .tide_processing import event_samples, interpolate_height, window_for
from .tide_service import NOAATideService

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

FEET_TO_METERS = 0.3048


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response


app = FastAPI(
    title="Florida Tides API",
    description="Tide predictions for Florida coastal locations from NOAA CO-OPS",
    version="1.0.0",
)

# Set up rate limiter
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Initialize services
tide_service = NOAATideService()
location_search = LocationSearch()
session = TideSession(tide_service, LocationStore(LOCATION_STORE_PATH))
session.load_saved_location()

_tz_finder = TimezoneFinder()


def _get_timezone(lat: float, lon: float) -> ZoneInfo:
    """Get the local timezone for coordinates, falling back to UTC."""
    timezone_str = _tz_finder.timezone_at(lat=lat, lng=lon) or 'UTC'
    try:
        return ZoneInfo(timezone_str)
    except (ValueError, KeyError):
        return ZoneInfo('UTC')


def _format_sample(sample: Sample, tz: ZoneInfo) -> Dict:
    """Serialize a sample; only high/low points carry a `type` key."""
    point = {
        "datetime": sample.time.astimezone(tz).replace(microsecond=0).isoformat(),
        "height_ft": round(sample.height, 3),
        "height_m": round(sample.height * FEET_TO_METERS, 3),
    }
    if sample.is_event:
        point["type"] = sample.type.value
    return point


def _format_series(series: Series, tz: ZoneInfo) -> List[Dict]:
    return [_format_sample(s, tz) for s in series]


def _round_height(height: Optional[float]) -> Optional[float]:
    return None if height is None else round(height, 3)


def _internal_error(context: str) -> HTTPException:
    error_id = uuid.uuid4().hex[:8]
    logger.exception(f"Error {error_id} in {context}")
    return HTTPException(500, detail=f"Internal error (ref: {error_id})")


def _snapshot_response(snapshot: TideSnapshot) -> Dict:
    """
    Serialize a session snapshot for the display layer.

    The current height and chart window are evaluated at request time, so a
    snapshot read hours after its fetch still points at "now".
    """
    location = snapshot.location
    tz = _get_timezone(location.latitude, location.longitude) if location else ZoneInfo('UTC')
    now = datetime.now(timezone.utc)

    try:
        current_height = interpolate_height(snapshot.series, now)
    except EmptySeries:
        current_height = None

    return {
        "location": location.model_dump(mode="json") if location else None,
        "station_id": snapshot.station_id,
        "current_height_ft": _round_height(current_height),
        "fetched_at": snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
        "is_loading": snapshot.is_loading,
        "error": snapshot.error,
        "tides": _format_series(snapshot.series, tz),
        "window": _format_series(window_for(snapshot.series, now), tz),
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "provider": "NOAA CO-OPS", "stations": len(FLORIDA_STATIONS)}


@app.get("/api/v1/stations")
async def get_stations():
    """List the tide stations covered by the service."""
    return [station.model_dump() for station in FLORIDA_STATIONS]


@app.get("/api/v1/stations/nearest")
async def get_nearest_station(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in degrees"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude in degrees"),
):
    """Find the catalog station closest to a coordinate."""
    try:
        station, distance_km = rank_stations(lat, lon)[0]
    except Exception:
        raise _internal_error("get_nearest_station")
    return {"station": station.model_dump(), "distance_km": round(distance_km, 3)}


@app.get("/api/v1/tides")
@limiter.limit("60/minute")
def get_tides(
    request: Request,
    station: Optional[str] = Query(None, description="NOAA station ID (e.g. 8724580 for Key West)"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Latitude in degrees"),
    lon: Optional[float] = Query(None, ge=-180, le=180, description="Longitude in degrees"),
    hours: int = Query(FETCH_WINDOW_HOURS, ge=1, le=744, description="Length of the prediction window"),
    date: Optional[str] = Query(
        None,
        description="Optional start time (ISO 8601). If not provided, the current time is used.",
    ),
):
    """
    Get hourly tide predictions for a station.

    Identify the station either by `station` id or by `lat`/`lon`, in which
    case the nearest catalog station is used.

    The response contains:
    - `tides`: hourly heights (feet and meters above MLLW); points that are
      high or low tides have a `type` field set to "high" or "low"
    - `events`: only the high/low points
    - `window`: the points needed for a chart focused on the current time
    - `current_height_ft`: height interpolated at the current time

    All times are returned in ISO 8601 format with the station's local timezone.
    """
    try:
        if station is not None:
            resolved: Optional[Station] = get_station(station)
            if resolved is None:
                raise HTTPException(404, f"Unknown station: {station}")
        elif lat is not None and lon is not None:
            resolved = rank_stations(lat, lon)[0][0]
        else:
            raise HTTPException(400, "Provide either station or both lat and lon")

        start_time = None
        if date:
            try:
                start_time = datetime.fromisoformat(date)
                if start_time.tzinfo is None:
                    start_time = start_time.replace(tzinfo=timezone.utc)
            except ValueError:
                raise HTTPException(
                    400, "Invalid date format. Please use ISO 8601 format (YYYY-MM-DD)"
                )

        now = datetime.now(timezone.utc)
        if start_time is None:
            start_time = now
        end_time = start_time + timedelta(hours=hours)

        series = tide_service.fetch_tide_data(resolved.id, start_time, end_time)
        tz = _get_timezone(resolved.latitude, resolved.longitude)

        try:
            current_height = interpolate_height(series, now)
        except EmptySeries:
            raise HTTPException(404, f"No tide data available for station {resolved.id}")

        return {
            "station": resolved.model_dump(),
            "datum": "mllw",
            "units": "english",
            "current_height_ft": _round_height(current_height),
            "tides": _format_series(series, tz),
            "events": _format_series(event_samples(series), tz),
            "window": _format_series(window_for(series, now), tz),
        }
    except HTTPException:
        raise
    except ServiceUnavailable as e:
        raise HTTPException(503, detail=f"Tide service unavailable: {e}")
    except InvalidResponse as e:
        raise HTTPException(502, detail=f"Invalid response from tide service: {e}")
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    except Exception:
        raise _internal_error("get_tides")


@app.get("/api/v1/locations/search")
async def search_locations(
    q: str = Query(..., min_length=1, description="Place name to search for"),
):
    """Autocomplete candidate locations for a search string."""
    return [location.model_dump(mode="json") for location in location_search.search(q)]


@app.get("/api/v1/location")
async def get_location():
    """
    Get the selected location with its last fetched tides.

    If the last fetch failed, `error` carries a message and the previously
    fetched tides are still returned.
    """
    return _snapshot_response(session.snapshot)


@app.put("/api/v1/location")
@limiter.limit("30/minute")
async def put_location(request: Request, location: Location):
    """
    Select a location, persist it and fetch its tides.

    Locations without a `station_id` are anchored to the nearest station.
    """
    try:
        snapshot = await session.select_location(location)
    except Exception:
        raise _internal_error("put_location")
    return _snapshot_response(snapshot)


@app.post("/api/v1/location/refresh")
@limiter.limit("30/minute")
async def refresh_location(request: Request):
    """Fetch a fresh prediction window for the selected location."""
    try:
        snapshot = await session.refresh()
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    except Exception:
        raise _internal_error("refresh_location")
    return _snapshot_response(snapshot)


@app.post("/api/v1/location/retry")
@limiter.limit("30/minute")
async def retry_location(request: Request):
    """Re-run the last fetch with the same parameters."""
    try:
        snapshot = await session.retry()
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    except Exception:
        raise _internal_error("retry_location")
    return _snapshot_response(snapshot)
