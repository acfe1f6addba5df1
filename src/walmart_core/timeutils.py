"""Date and time utilities for the transactions dataset.

This module provides:

- Parsing of the source's day/month/year dates and 24h clock times
- Hour-of-day bucket schemes used to classify transactions into shifts

Two bucket schemes exist and answer different questions, so they are kept
as separate named schemes:

- ``shift`` (3 buckets): Morning 0-11, Afternoon 12-17, Evening otherwise.
- ``day_part`` (4 buckets): Morning 6-11, Afternoon 12-16, Evening 17-20,
  Night otherwise.

Examples:
    >>> parse_day_month_year("05/01/19")
    datetime.date(2019, 1, 5)
    >>> SHIFT_SCHEME.classify(12)
    'Afternoon'
    >>> DAY_PART_SCHEME.classify(23)
    'Night'

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from walmart_core.exceptions import ParameterError

DATE_FORMATS = ("%d/%m/%y", "%d/%m/%Y")
TIME_FORMATS = ("%H:%M:%S", "%H:%M")

HOURS_PER_DAY = 24


def parse_day_month_year(text: str) -> date:
    """Parse a day/month/year date string.

    Two-digit years are read the way ``strptime`` reads ``%y``
    (``"19"`` -> 2019).

    Args:
        text: Date string such as ``"05/01/19"`` or ``"05/01/2019"``.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the text matches none of the accepted formats.

    """
    value = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid day/month/year date: {text!r}")


def parse_clock_time(text: str) -> time:
    """Parse a 24h ``HH:MM`` or ``HH:MM:SS`` time string.

    Raises:
        ValueError: If the text matches none of the accepted formats.

    """
    value = text.strip()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {text!r}")


@dataclass(frozen=True)
class HourRange:
    """An inclusive range of hours mapped to a bucket label."""

    label: str
    start: int
    end: int

    def __contains__(self, hour: int) -> bool:
        return self.start <= hour <= self.end


@dataclass(frozen=True)
class TimeBucketScheme:
    """A named partition of the 24 hours of the day.

    Attributes:
        name: Scheme identifier used by computations (e.g. "shift").
        ranges: Explicit inclusive hour ranges. They must lie within 0-23 and
            must not overlap.
        default: Label for every hour not covered by ``ranges``.

    """

    name: str
    ranges: tuple[HourRange, ...]
    default: str

    def __post_init__(self) -> None:
        seen: dict[int, str] = {}
        for hour_range in self.ranges:
            if not 0 <= hour_range.start <= hour_range.end < HOURS_PER_DAY:
                raise ValueError(
                    f"Scheme '{self.name}': invalid hour range "
                    f"{hour_range.start}-{hour_range.end} for '{hour_range.label}'"
                )
            for hour in range(hour_range.start, hour_range.end + 1):
                if hour in seen:
                    raise ValueError(
                        f"Scheme '{self.name}': hour {hour} is covered by both "
                        f"'{seen[hour]}' and '{hour_range.label}'"
                    )
                seen[hour] = hour_range.label

    @property
    def labels(self) -> list[str]:
        """Bucket labels in display order, default last."""
        labels = [r.label for r in self.ranges]
        if self.default not in labels:
            labels.append(self.default)
        return labels

    def classify(self, hour: int) -> str:
        """Return the bucket label for an hour of the day (0-23).

        Raises:
            ParameterError: If hour is outside 0-23.

        """
        if not 0 <= hour < HOURS_PER_DAY:
            raise ParameterError(f"Hour must be within 0-23, got {hour}")
        for hour_range in self.ranges:
            if hour in hour_range:
                return hour_range.label
        return self.default


SHIFT_SCHEME = TimeBucketScheme(
    name="shift",
    ranges=(
        HourRange("Morning", 0, 11),
        HourRange("Afternoon", 12, 17),
    ),
    default="Evening",
)

DAY_PART_SCHEME = TimeBucketScheme(
    name="day_part",
    ranges=(
        HourRange("Morning", 6, 11),
        HourRange("Afternoon", 12, 16),
        HourRange("Evening", 17, 20),
    ),
    default="Night",
)

BUCKET_SCHEMES: dict[str, TimeBucketScheme] = {
    SHIFT_SCHEME.name: SHIFT_SCHEME,
    DAY_PART_SCHEME.name: DAY_PART_SCHEME,
}


def get_scheme(name: str) -> TimeBucketScheme:
    """Look up a bucket scheme by name.

    Raises:
        ParameterError: If no scheme has that name.

    """
    try:
        return BUCKET_SCHEMES[name]
    except KeyError:
        raise ParameterError(
            f"Unknown time bucket scheme '{name}'. Must be one of {sorted(BUCKET_SCHEMES)}."
        ) from None
