"""
Florida tide station catalog and nearest-station resolution.

Locations picked by the user usually have no NOAA station attached. The
resolver ranks the fixed catalog below by great-circle distance and anchors
the location to the closest station.
"""
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import StationCatalogError
from .models import Station

# Mean Earth radius (IUGG), kilometers
EARTH_RADIUS_KM = 6371.0088

# NOAA CO-OPS tide prediction stations covered by the app.
# Coordinates are the city centres the stations serve.
FLORIDA_STATIONS: List[Station] = [
    Station(id='8724580', name='Key West, FL', latitude=24.5551, longitude=-81.8066),
    Station(id='8723214', name='Miami, FL', latitude=25.7617, longitude=-80.1918),        # Virginia Key
    Station(id='8726607', name='Tampa, FL', latitude=27.9506, longitude=-82.4572),        # Old Port Tampa
    Station(id='8720218', name='Jacksonville, FL', latitude=30.3322, longitude=-81.6557),  # Mayport
    Station(id='8729840', name='Pensacola, FL', latitude=30.4213, longitude=-87.2169),
    Station(id='8726520', name='St. Petersburg, FL', latitude=27.7676, longitude=-82.6403),
]


def station_distances_km(
    latitude: float,
    longitude: float,
    catalog: Sequence[Station] = FLORIDA_STATIONS,
) -> np.ndarray:
    """
    Great-circle (haversine) distance from a coordinate to every station.

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        catalog: Stations to measure against

    Returns:
        Array of distances in kilometers, in catalog order
    """
    lats = np.radians([s.latitude for s in catalog])
    lons = np.radians([s.longitude for s in catalog])
    lat0 = np.radians(latitude)
    lon0 = np.radians(longitude)

    dlat = lats - lat0
    dlon = lons - lon0
    a = np.sin(dlat / 2) ** 2 + np.cos(lat0) * np.cos(lats) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def rank_stations(
    latitude: float,
    longitude: float,
    catalog: Sequence[Station] = FLORIDA_STATIONS,
) -> List[Tuple[Station, float]]:
    """
    Order the catalog by distance from a coordinate, nearest first.

    Stations at equal distance keep their catalog order.

    Returns:
        List of (station, distance_km) tuples
    """
    if not catalog:
        raise StationCatalogError("Station catalog is empty")

    distances = station_distances_km(latitude, longitude, catalog)
    order = np.argsort(distances, kind='stable')
    return [(catalog[i], float(distances[i])) for i in order]


def resolve_nearest_station(
    latitude: float,
    longitude: float,
    catalog: Sequence[Station] = FLORIDA_STATIONS,
) -> Station:
    """
    Find the catalog station closest to a coordinate.

    Raises:
        StationCatalogError: If the catalog is empty
    """
    if not catalog:
        raise StationCatalogError("Station catalog is empty")

    distances = station_distances_km(latitude, longitude, catalog)
    # argmin returns the first occurrence of the minimum
    return catalog[int(np.argmin(distances))]


def get_station(station_id: str, catalog: Sequence[Station] = FLORIDA_STATIONS) -> Optional[Station]:
    """Look up a catalog station by its NOAA id."""
    for station in catalog:
        if station.id == station_id:
            return station
    return None
