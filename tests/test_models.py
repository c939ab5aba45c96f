"""
Unit tests for the tide data model
"""
import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.models import Location, Sample, Station, TideType


class TestTideType:

    @pytest.mark.parametrize("code,expected", [
        ("H", TideType.HIGH),
        ("L", TideType.LOW),
        ("h", TideType.HIGH),
        (" L ", TideType.LOW),
        ("", TideType.UNSET),
        ("X", TideType.UNSET),
        (None, TideType.UNSET),
    ])
    def test_from_noaa_code(self, code, expected):
        assert TideType.from_noaa_code(code) is expected


class TestSample:

    def test_naive_time_is_utc(self):
        sample = Sample(time=datetime(2025, 10, 8, 12, 0), height=1.0)
        assert sample.time == datetime(2025, 10, 8, 12, 0, tzinfo=timezone.utc)

    def test_aware_time_converted_to_utc(self):
        eastern = timezone(timedelta(hours=-4))
        sample = Sample(time=datetime(2025, 10, 8, 8, 0, tzinfo=eastern), height=1.0)
        assert sample.time.utcoffset() == timedelta(0)
        assert sample.time.hour == 12

    def test_default_type_is_unset(self):
        sample = Sample(time=datetime(2025, 10, 8, tzinfo=timezone.utc), height=1.0)
        assert sample.type is TideType.UNSET
        assert not sample.is_event

    def test_is_immutable(self):
        sample = Sample(time=datetime(2025, 10, 8, tzinfo=timezone.utc), height=1.0)
        with pytest.raises(ValidationError):
            sample.height = 2.0

    @pytest.mark.parametrize("tide_type", list(TideType))
    def test_json_round_trip(self, tide_type):
        sample = Sample(time=datetime(2025, 10, 8, 14, 0, tzinfo=timezone.utc), height=1.702, type=tide_type)
        encoded = json.dumps(sample.model_dump(mode="json"))
        assert Sample.model_validate(json.loads(encoded)) == sample

    def test_decode_without_type(self):
        sample = Sample.model_validate({"time": "2025-10-08T14:00:00Z", "height": 0.5})
        assert sample.type is TideType.UNSET


class TestLocation:

    def test_unanchored_by_default(self):
        location = Location(name="Islamorada, FL", latitude=24.92, longitude=-80.63)
        assert location.station_id is None
        assert not location.is_anchored

    @pytest.mark.parametrize("station_id", ["", "   "])
    def test_blank_station_id_is_unanchored(self, station_id):
        location = Location(name="Somewhere", latitude=25.0, longitude=-80.5, station_id=station_id)
        assert location.station_id is None
        assert not location.is_anchored

    def test_anchored_to_station(self):
        location = Location(name="Islamorada, FL", latitude=24.92, longitude=-80.63)
        station = Station(id="8724580", name="Key West, FL", latitude=24.5551, longitude=-81.8066)

        anchored = location.anchored_to(station)

        assert anchored.is_anchored
        assert anchored.station_id == "8724580"
        assert anchored.name == location.name
        assert location.station_id is None

    @pytest.mark.parametrize("station_id", [None, "8723214"])
    def test_json_round_trip(self, station_id):
        location = Location(name="Miami, FL", latitude=25.7617, longitude=-80.1918, station_id=station_id)
        encoded = json.dumps(location.model_dump(mode="json"))
        assert Location.model_validate(json.loads(encoded)) == location

    def test_decode_without_station_id(self):
        location = Location.model_validate({"name": "Naples, FL", "latitude": 26.14, "longitude": -81.79})
        assert location.station_id is None
