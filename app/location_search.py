"""
Location autocomplete.

Free-text queries are resolved to candidate Locations by a geocoder. Typing
is debounced: a search is only issued once input has been quiet for
SEARCH_DEBOUNCE_SECONDS, and every new keystroke invalidates the search
still pending from the previous one.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .config import SEARCH_DEBOUNCE_SECONDS
from .debounce import Debouncer
from .models import Location, Station
from .stations import FLORIDA_STATIONS, station_distances_km

logger = logging.getLogger(__name__)

# Any callable mapping a query to candidate locations
Geocoder = Callable[[str], List[Location]]

# Results are biased towards South Florida
SEARCH_REGION_CENTER: Tuple[float, float] = (25.7617, -80.1918)


class CatalogGeocoder:
    """Geocoder that matches station names in the built-in catalog."""

    def __init__(
        self,
        catalog: Sequence[Station] = FLORIDA_STATIONS,
        region_center: Tuple[float, float] = SEARCH_REGION_CENTER,
    ):
        self.catalog = list(catalog)
        self.region_center = region_center

    def __call__(self, query: str) -> List[Location]:
        needle = query.strip().lower()
        if not needle:
            return []

        matches = [s for s in self.catalog if needle in s.name.lower()]
        if not matches:
            return []

        distances = station_distances_km(self.region_center[0], self.region_center[1], matches)
        order = np.argsort(distances, kind='stable')
        return [
            Location(
                name=matches[i].name,
                latitude=matches[i].latitude,
                longitude=matches[i].longitude,
                station_id=matches[i].id,
            )
            for i in order
        ]


class LocationSearch:
    """Debounced search state for the location picker."""

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self.geocoder = geocoder or CatalogGeocoder()
        self.query = ""
        self.results: List[Location] = []
        self.is_searching = False
        self.selected: Optional[Location] = None
        self._debouncer = Debouncer(debounce_seconds)

    def search(self, query: str) -> List[Location]:
        """Run the geocoder immediately, without debouncing."""
        return self.geocoder(query)

    def submit(self, query: str) -> Optional[asyncio.Task]:
        """
        Record a change of the search text and schedule a search.

        An empty query clears the results at once and schedules nothing.

        Returns:
            The scheduled task, or None for an empty query
        """
        self.query = query

        if not query.strip():
            self._debouncer.cancel()
            self.results = []
            self.is_searching = False
            return None

        task = self._debouncer.schedule(lambda: self._perform(query))
        task.add_done_callback(self._apply)
        return task

    def select(self, location: Location) -> Location:
        """Pick a search result; pending searches are abandoned."""
        self._debouncer.cancel()
        self.selected = location
        self.query = location.name
        self.results = []
        self.is_searching = False
        return location

    async def _perform(self, query: str) -> List[Location]:
        self.is_searching = True
        try:
            return await asyncio.to_thread(self.search, query)
        except Exception as e:
            logger.warning(f"Location search failed for {query!r}: {e}")
            return []

    def _apply(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        results = task.result()
        # None means a newer search superseded this one
        if results is None:
            return
        self.results = results
        self.is_searching = False
