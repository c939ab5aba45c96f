"""
Tide series processing.

Pure functions over an immutable snapshot of a tide series:

- classify_tide_types: label local maxima/minima as high/low tides
- interpolate_height: estimate the water height at an arbitrary time
- window_for: reduce a series to the points needed for a focused chart

None of these functions modify their input; they are safe to call from any
thread without synchronization.
"""
from datetime import datetime, timezone
from typing import List, Optional

from .exceptions import EmptySeries
from .models import Sample, Series, TideType

# Number of samples kept on each side of "now" in a chart window
CONTEXT_RADIUS = 2


def _as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def classify_tide_types(series: Series) -> Series:
    """
    Label interior local extrema as high or low tides.

    An interior sample strictly higher than both neighbours becomes HIGH,
    strictly lower than both becomes LOW. Anything else keeps the label it
    came in with. The first and last samples are never reclassified, and
    samples that already carry a HIGH/LOW label from the data source are
    left alone.

    This is a strict local-extremum test: on a flat top such as
    [1.0, 3.0, 3.0, 1.0] neither 3.0 is marked HIGH.

    Args:
        series: Samples ordered by time ascending

    Returns:
        A new list of the same length and order with labels applied
    """
    result = list(series)
    if len(series) < 3:
        return result

    for i in range(1, len(series) - 1):
        current = series[i]
        if current.type is not TideType.UNSET:
            continue

        prev_height = series[i - 1].height
        next_height = series[i + 1].height

        if current.height > prev_height and current.height > next_height:
            result[i] = current.model_copy(update={"type": TideType.HIGH})
        elif current.height < prev_height and current.height < next_height:
            result[i] = current.model_copy(update={"type": TideType.LOW})

    return result


def interpolate_height(series: Series, query_time: datetime) -> float:
    """
    Estimate the tide height at query_time by linear interpolation.

    The two samples closest in time to query_time are used, in order of
    closeness (not chronological order). When query_time lies outside the
    span of those two samples, the line through them is extrapolated.

    Args:
        series: Tide samples (need not be classified)
        query_time: Time to estimate the height for (naive means UTC)

    Returns:
        Estimated height in the series' units (feet)

    Raises:
        EmptySeries: If the series has no samples
    """
    if not series:
        raise EmptySeries("No tide data available")

    query_time = _as_utc(query_time)

    # sorted() is stable, so equally distant samples keep series order
    closest = sorted(series, key=lambda s: abs((s.time - query_time).total_seconds()))

    if len(closest) < 2:
        return closest[0].height

    p1, p2 = closest[0], closest[1]

    time_diff = (p2.time - p1.time).total_seconds()
    if time_diff == 0:
        return p1.height

    ratio = (query_time - p1.time).total_seconds() / time_diff
    return p1.height + ratio * (p2.height - p1.height)


def _closest_index(series: Series, now: datetime) -> int:
    """Index of the sample closest to now; the earliest index wins ties."""
    best_index = 0
    best_distance = abs((series[0].time - now).total_seconds())
    for i in range(1, len(series)):
        distance = abs((series[i].time - now).total_seconds())
        if distance < best_distance:
            best_index = i
            best_distance = distance
    return best_index


def window_for(series: Series, now: datetime, context_radius: int = CONTEXT_RADIUS) -> Series:
    """
    Select the samples needed for a chart focused on the current time.

    Keeps the most recent high and low at or before now, the next high and
    low after now, and `context_radius` samples on each side of the sample
    closest to now.

    Args:
        series: Classified samples ordered by time ascending
        now: Reference time (naive means UTC)
        context_radius: Samples kept on each side of the closest point

    Returns:
        Subsequence of the input in original order
    """
    if not series:
        return series

    now = _as_utc(now)
    closest = _closest_index(series, now)

    previous_high: Optional[int] = None
    previous_low: Optional[int] = None
    next_high: Optional[int] = None
    next_low: Optional[int] = None

    for i, sample in enumerate(series):
        if sample.type is TideType.HIGH:
            if sample.time <= now:
                previous_high = i
            elif next_high is None:
                next_high = i
        elif sample.type is TideType.LOW:
            if sample.time <= now:
                previous_low = i
            elif next_low is None:
                next_low = i

    indices = {i for i in (previous_high, previous_low, next_high, next_low) if i is not None}

    start = max(0, closest - context_radius)
    end = min(len(series) - 1, closest + context_radius)
    indices.update(range(start, end + 1))

    return [series[i] for i in sorted(indices)]


def event_samples(series: Series) -> List[Sample]:
    """Return only the samples labeled as high or low tides."""
    return [s for s in series if s.is_event]
