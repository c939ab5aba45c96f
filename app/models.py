"""
Data model for tide predictions.

Samples, stations and locations are immutable pydantic models, so a series
handed to the processing functions can be shared freely without copying.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class TideType(str, Enum):
    """
    Label attached to a tide sample.

    - HIGH: local maximum of the tide curve
    - LOW: local minimum of the tide curve
    - UNSET: no event marker (a point on a rising or falling run)
    """
    HIGH = "high"
    LOW = "low"
    UNSET = "unset"

    @classmethod
    def from_noaa_code(cls, code: Optional[str]) -> "TideType":
        """Map NOAA's per-point 'H'/'L' label to a TideType."""
        if code is None:
            return cls.UNSET
        code = code.strip().upper()
        if code == "H":
            return cls.HIGH
        if code == "L":
            return cls.LOW
        return cls.UNSET


class Sample(BaseModel):
    """One time/height prediction reading. Heights are in feet above MLLW."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    height: float
    type: TideType = TideType.UNSET

    @field_validator("time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # If no timezone provided, assume UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_event(self) -> bool:
        return self.type is not TideType.UNSET


Series = List[Sample]


class Station(BaseModel):
    """A NOAA tide prediction station."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    latitude: float
    longitude: float


class Location(BaseModel):
    """
    A user-chosen place.

    `station_id` stays None until the nearest station has been resolved;
    after that the location is "anchored" and fetches use the id directly.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    latitude: float
    longitude: float
    station_id: Optional[str] = None

    @field_validator("station_id")
    @classmethod
    def _blank_station_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def is_anchored(self) -> bool:
        return bool(self.station_id)

    def anchored_to(self, station: Station) -> "Location":
        """Return a copy of this location bound to the given station."""
        return self.model_copy(update={"station_id": station.id})
