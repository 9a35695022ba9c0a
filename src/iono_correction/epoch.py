"""
Epoch helpers.

Epochs are UTC modified Julian dates (days). The density model wants the
calendar split into year, month*100+day and decimal hour; the validity
windows compare yyyymmdd integers.
"""

from datetime import datetime, timedelta, timezone
from typing import Tuple

from .constants import SECONDS_PER_DAY

MJD_EPOCH = datetime(1858, 11, 17, tzinfo=timezone.utc)


def mjd_to_datetime(mjd: float) -> datetime:
    """Convert a modified Julian date to an aware UTC datetime."""
    return MJD_EPOCH + timedelta(days=mjd)


def datetime_to_mjd(dt: datetime) -> float:
    """Convert a datetime (naive values are taken as UTC) to MJD."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - MJD_EPOCH).total_seconds() / SECONDS_PER_DAY


def modified_julian_date(year: int, month: int, day: int,
                         hour: int = 0, minute: int = 0, second: float = 0.0) -> float:
    base = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    return datetime_to_mjd(base) + second / SECONDS_PER_DAY


def calendar_fields(mjd: float) -> Tuple[int, int, float]:
    """
    Split an epoch into the fields the density model takes.

    Returns:
        (year, month*100 + day, decimal hour of day in UT)
    """
    dt = mjd_to_datetime(mjd)
    hours = (dt.hour + dt.minute / 60.0 + dt.second / 3600.0
             + dt.microsecond / 3.6e9)
    return dt.year, dt.month * 100 + dt.day, hours


def yyyymmdd(mjd: float) -> int:
    dt = mjd_to_datetime(mjd)
    return dt.year * 10000 + dt.month * 100 + dt.day


def format_yyyymmdd(value: int) -> str:
    """Render 20240315 as 3/15/2024."""
    year, md = divmod(value, 10000)
    month, day = divmod(md, 100)
    return f"{month}/{day}/{year}"


def format_epoch(mjd: float) -> str:
    return mjd_to_datetime(mjd).strftime('%d %b %Y %H:%M:%S.%f')[:-3]
