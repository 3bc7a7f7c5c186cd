"""GPS time tags consumed by the correction models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

GPS_EPOCH = datetime(1980, 1, 6)
SECONDS_PER_WEEK = 604_800.0


@dataclass(frozen=True)
class GnssTime:
    """GPS week and time of week.

    The value is supplied by the caller's time source (live or replayed) and
    is never advanced by this package. Calendar conversions stay in the GPS
    time scale, without leap seconds.
    """

    week: int
    tow_s: float

    @classmethod
    def from_datetime(cls, gps_dt: datetime) -> "GnssTime":
        total_s = (gps_dt.replace(tzinfo=None) - GPS_EPOCH).total_seconds()
        week = int(total_s // SECONDS_PER_WEEK)
        return cls(week=week, tow_s=total_s - week * SECONDS_PER_WEEK)

    def to_datetime(self) -> datetime:
        return GPS_EPOCH + timedelta(seconds=self.week * SECONDS_PER_WEEK + self.tow_s)

    @property
    def day_of_year(self) -> float:
        """Fractional day of year (1.0 at Jan 1st 00:00)."""

        dt = self.to_datetime()
        start = datetime(dt.year, 1, 1)
        return 1.0 + (dt - start).total_seconds() / 86_400.0

    def __add__(self, dt_s: float) -> "GnssTime":
        total_s = self.week * SECONDS_PER_WEEK + self.tow_s + float(dt_s)
        week = int(total_s // SECONDS_PER_WEEK)
        return GnssTime(week=week, tow_s=total_s - week * SECONDS_PER_WEEK)
