"""Civil-time helpers for the school's fixed time zone."""

from __future__ import annotations

import os
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

from hijridate import Gregorian

SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "Asia/Riyadh")
SCHOOL_TZ = ZoneInfo(SCHOOL_TIMEZONE)

DAY_MS = 24 * 60 * 60 * 1000

# Sunday=0 .. Saturday=6 across the whole system.
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)
WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_instant(value: date | datetime) -> datetime:
    """Return an aware datetime. Naive datetimes are UTC, bare dates are
    the start of that civil day in the school zone."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.combine(value, time.min, tzinfo=SCHOOL_TZ)


def to_storage(value: datetime) -> datetime:
    """Naive UTC, the form DateTime columns hold."""
    return as_instant(value).astimezone(timezone.utc).replace(tzinfo=None)


def civil_date(value: date | datetime) -> date:
    return as_instant(value).astimezone(SCHOOL_TZ).date()


def civil_weekday(value: date | datetime) -> int:
    # date.weekday() is Monday=0; shift to Sunday=0.
    return (civil_date(value).weekday() + 1) % 7


def civil_days_between(start: date | datetime, end: date | datetime) -> int:
    return (civil_date(end) - civil_date(start)).days


def start_of_civil_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=SCHOOL_TZ)


def end_of_civil_day(day: date) -> datetime:
    return start_of_civil_day(day + timedelta(days=1)) - timedelta(milliseconds=1)


def parse_civil_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def get_date_info(now: Optional[datetime] = None) -> dict[str, Any]:
    today = civil_date(now or now_utc())
    weekday = civil_weekday(today)
    hijri = Gregorian(today.year, today.month, today.day).to_hijri()
    return {
        "date": today.isoformat(),
        "weekday": weekday,
        "weekday_name": WEEKDAY_NAMES[weekday],
        "month_name": MONTH_NAMES[today.month - 1],
        "month_number": today.month,
        "gregorian_date": f"{WEEKDAY_NAMES[weekday]} {today.day:02d} {MONTH_NAMES[today.month - 1]} ({today.month}) {today.year}",
        "hijri_month_number": hijri.month,
        "hijri_date": f"{WEEKDAY_NAMES[weekday]} {hijri.day:02d} {hijri.month_name()} ({hijri.month}) {hijri.year}",
    }
