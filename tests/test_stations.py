"""
Unit tests for the station catalog and nearest-station resolution
"""
import pytest

from app.exceptions import StationCatalogError
from app.models import Station
from app.stations import (
    FLORIDA_STATIONS,
    get_station,
    rank_stations,
    resolve_nearest_station,
    station_distances_km,
)


class TestCatalog:

    def test_station_ids_are_unique(self):
        ids = [s.id for s in FLORIDA_STATIONS]
        assert len(ids) == len(set(ids))

    def test_stations_are_in_florida(self):
        for station in FLORIDA_STATIONS:
            assert 24.0 < station.latitude < 31.1, station.name
            assert -87.7 < station.longitude < -79.8, station.name

    def test_get_station(self):
        assert get_station("8724580").name == "Key West, FL"
        assert get_station("0000000") is None


class TestDistances:

    def test_zero_at_station(self):
        key_west = FLORIDA_STATIONS[0]
        distances = station_distances_km(key_west.latitude, key_west.longitude)
        assert distances[0] == 0.0

    def test_known_distance(self):
        """Key West to Miami is roughly 211 km as the gull flies."""
        miami = get_station("8723214")
        distances = station_distances_km(24.5551, -81.8066, [miami])
        assert distances[0] == pytest.approx(211, abs=5)


class TestResolveNearest:

    @pytest.mark.parametrize("station", FLORIDA_STATIONS, ids=lambda s: s.name)
    def test_exact_station_coordinate(self, station):
        """A coordinate at a station resolves to that station at distance 0."""
        assert resolve_nearest_station(station.latitude, station.longitude) == station
        nearest, distance = rank_stations(station.latitude, station.longitude)[0]
        assert nearest == station
        assert distance == 0.0

    @pytest.mark.parametrize("name,lat,lon,expected", [
        ("Fernandina Beach", 30.6697, -81.4626, "8720218"),
        ("Destin", 30.3935, -86.4958, "8729840"),
        ("Clearwater", 27.9659, -82.8001, "8726520"),
        ("Islamorada", 24.9243, -80.6278, "8723214"),
        ("Marathon", 24.7136, -81.0904, "8724580"),
    ])
    def test_nearby_places(self, name, lat, lon, expected):
        assert resolve_nearest_station(lat, lon).id == expected, name

    def test_tie_goes_to_first_in_catalog(self):
        catalog = [
            Station(id="A", name="North", latitude=1.0, longitude=0.0),
            Station(id="B", name="South", latitude=-1.0, longitude=0.0),
        ]
        assert resolve_nearest_station(0.0, 0.0, catalog).id == "A"
        assert [s.id for s, _ in rank_stations(0.0, 0.0, catalog)] == ["A", "B"]

    def test_ranking_is_ascending(self):
        ranked = rank_stations(26.14, -81.79)
        distances = [d for _, d in ranked]
        assert distances == sorted(distances)
        assert len(ranked) == len(FLORIDA_STATIONS)

    def test_empty_catalog_is_configuration_error(self):
        with pytest.raises(StationCatalogError):
            resolve_nearest_station(25.0, -80.0, [])
        with pytest.raises(StationCatalogError):
            rank_stations(25.0, -80.0, [])
