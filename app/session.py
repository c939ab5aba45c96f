"""
Tide session: the fetch -> classify -> interpolate/window flow for one user.

A session holds the selected location and the most recent successful result.
Every user action (selecting a location, refreshing, retrying) starts a new
fetch and supersedes any fetch still in flight; a superseded fetch is
discarded when it completes and never overwrites newer data. A failed fetch
records an error message but keeps the last good series on display.
"""
import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from .config import FETCH_WINDOW_HOURS
from .exceptions import EmptySeries, TideServiceError
from .location_store import LocationStore
from .models import Location, Series, Station
from .stations import FLORIDA_STATIONS, resolve_nearest_station
from .tide_processing import interpolate_height, window_for
from .tide_service import NOAATideService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchRequest:
    """Parameters of one fetch; retried verbatim after a failure."""
    station_id: str
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class TideSnapshot:
    """
    The session's current result, as handed to the display layer.

    `window` and `current_height` are evaluated at fetch time (`fetched_at`);
    callers showing the snapshot later should recompute them from `series`.
    """
    location: Optional[Location] = None
    station_id: Optional[str] = None
    series: Series = field(default_factory=list)
    window: Series = field(default_factory=list)
    current_height: Optional[float] = None
    fetched_at: Optional[datetime] = None
    is_loading: bool = False
    error: Optional[str] = None


class TideSession:
    """Tide state for a single user and device."""

    def __init__(
        self,
        service: Optional[NOAATideService] = None,
        store: Optional[LocationStore] = None,
        catalog: Sequence[Station] = FLORIDA_STATIONS,
        window_hours: int = FETCH_WINDOW_HOURS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.service = service or NOAATideService()
        self.store = store
        self.catalog = catalog
        self.window_hours = window_hours
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._generation = 0
        self._last_request: Optional[FetchRequest] = None
        self._snapshot = TideSnapshot()

    @property
    def snapshot(self) -> TideSnapshot:
        return self._snapshot

    @property
    def last_request(self) -> Optional[FetchRequest]:
        return self._last_request

    def load_saved_location(self) -> Optional[Location]:
        """Restore the persisted location without fetching."""
        if self.store is None:
            return None
        location = self.store.load()
        if location is not None:
            self._snapshot = replace(self._snapshot, location=location)
        return location

    async def select_location(self, location: Location) -> TideSnapshot:
        """
        Make `location` the current one, persist it and fetch its tides.

        A location without a station is anchored to the nearest catalog
        station first.
        """
        if not location.is_anchored:
            station = resolve_nearest_station(location.latitude, location.longitude, self.catalog)
            logger.info(f"Anchored {location.name!r} to station {station.id} ({station.name})")
            location = location.anchored_to(station)

        self._snapshot = replace(self._snapshot, location=location)
        if self.store is not None:
            self.store.save(location)

        return await self.refresh()

    async def refresh(self) -> TideSnapshot:
        """Fetch a fresh window starting now for the current location."""
        location = self._snapshot.location
        if location is None:
            raise ValueError("No location selected")
        if not location.is_anchored:
            return await self.select_location(location)

        start_time = self._clock()
        request = FetchRequest(
            station_id=location.station_id,
            start_time=start_time,
            end_time=start_time + timedelta(hours=self.window_hours),
        )
        return await self._run(request)

    async def retry(self) -> TideSnapshot:
        """Re-run the last fetch with exactly the same parameters."""
        if self._last_request is None:
            raise ValueError("No previous fetch to retry")
        return await self._run(self._last_request)

    async def _run(self, request: FetchRequest) -> TideSnapshot:
        self._generation += 1
        generation = self._generation
        self._last_request = request
        self._snapshot = replace(self._snapshot, is_loading=True, error=None)

        try:
            series = await asyncio.to_thread(
                self.service.fetch_tide_data,
                request.station_id,
                request.start_time,
                request.end_time,
            )
        except TideServiceError as e:
            if generation != self._generation:
                logger.debug(f"Ignoring failure of superseded fetch for station {request.station_id}")
                return self._snapshot
            self._snapshot = replace(
                self._snapshot,
                is_loading=False,
                error=f"Failed to fetch tide data: {e}",
            )
            return self._snapshot
        except Exception:
            if generation == self._generation:
                self._snapshot = replace(self._snapshot, is_loading=False)
            raise

        if generation != self._generation:
            logger.debug(f"Discarding superseded fetch for station {request.station_id}")
            return self._snapshot

        now = self._clock()
        try:
            current_height = interpolate_height(series, now)
        except EmptySeries:
            current_height = None

        self._snapshot = replace(
            self._snapshot,
            station_id=request.station_id,
            series=series,
            window=window_for(series, now),
            current_height=current_height,
            fetched_at=now,
            is_loading=False,
            error=None,
        )
        return self._snapshot
