from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Optional

from school_time import TUESDAY, as_instant, civil_date, civil_days_between, civil_weekday, now_utc
from terms import relevant_term_start

ON_SITE = "ON_SITE"
REMOTE = "REMOTE"
DAY_TYPES = (ON_SITE, REMOTE)
DAY_TYPE_LABELS = {
    ON_SITE: "On-site",
    REMOTE: "Remote",
}

TUESDAY_FIXED_ON_SITE = "FIXED_ON_SITE"
TUESDAY_FIXED_REMOTE = "FIXED_REMOTE"
TUESDAY_WEEKLY_ALTERNATE = "WEEKLY_ALTERNATE"
TUESDAY_TERM_WEEK_BASED = "TERM_WEEK_BASED"
TUESDAY_WEEK_NUMBER_BASED = "WEEK_NUMBER_BASED"
TUESDAY_MANUAL = "MANUAL"
TUESDAY_MODES = (
    TUESDAY_FIXED_ON_SITE,
    TUESDAY_FIXED_REMOTE,
    TUESDAY_WEEKLY_ALTERNATE,
    TUESDAY_TERM_WEEK_BASED,
    TUESDAY_WEEK_NUMBER_BASED,
    TUESDAY_MANUAL,
)

# First Monday on or after 1970-01-01.
ALTERNATION_EPOCH = date(1970, 1, 5)

logger = logging.getLogger(__name__)


NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d+)?|Infinity)$")


def _clamp_day(value: float) -> int:
    return int(min(6, max(0, value)))


def _unique_days(days: Iterable[float]) -> list[int]:
    seen: set[int] = set()
    result: list[int] = []
    for value in days:
        day = _clamp_day(value)
        if day not in seen:
            seen.add(day)
            result.append(day)
    return result


def _to_number(token: str) -> Optional[float]:
    # Decimal numbers or a signed "Infinity", which clamps to 0 or 6.
    if not NUMBER_PATTERN.match(token):
        return None
    return float(token)


def parse_days_field(value: Optional[str]) -> list[int]:
    if not value:
        return []
    numbers = []
    for token in value.split(","):
        number = _to_number(token.strip())
        if number is not None:
            numbers.append(number)
    return _unique_days(numbers)


def serialize_days_field(days: Iterable[int]) -> str:
    return ",".join(str(day) for day in _unique_days(days))


def normalize_day_list(value: Any) -> list[int]:
    if not isinstance(value, (list, tuple)):
        return []
    days = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, str):
            item = _to_number(item.strip()) if item.strip() else None
            if item is None:
                continue
        if isinstance(item, float):
            if not item.is_integer():
                continue
            item = int(item)
        if isinstance(item, int) and 0 <= item <= 6:
            days.append(item)
    return _unique_days(days)


def normalize_day_type(value: Any, fallback: str = ON_SITE) -> str:
    text = str(value or "").strip().upper()
    if text in DAY_TYPES:
        return text
    return fallback


def normalize_tuesday_mode(value: Any) -> str:
    text = str(value or "").strip().upper()
    if text in TUESDAY_MODES:
        return text
    if text:
        logger.debug("Unknown Tuesday mode %r, using %s", value, TUESDAY_FIXED_ON_SITE)
    return TUESDAY_FIXED_ON_SITE


def week_number_since(term_start: date | datetime, now: date | datetime) -> int:
    return civil_days_between(term_start, now) // 7 + 1


def resolve_tuesday_day_type(
    mode: Any,
    now: date | datetime,
    terms: Iterable[Any] | None,
    default_type: str,
    odd_week_type: Any = ON_SITE,
    even_week_type: Any = REMOTE,
) -> str:
    mode = normalize_tuesday_mode(mode)
    odd_week_type = normalize_day_type(odd_week_type, ON_SITE)
    even_week_type = normalize_day_type(even_week_type, REMOTE)
    now = as_instant(now)

    if mode == TUESDAY_MANUAL:
        return default_type
    if mode == TUESDAY_FIXED_REMOTE:
        return REMOTE
    if mode == TUESDAY_FIXED_ON_SITE:
        return ON_SITE
    if mode == TUESDAY_WEEKLY_ALTERNATE:
        weeks = (civil_date(now) - ALTERNATION_EPOCH).days // 7
        return ON_SITE if weeks % 2 == 0 else REMOTE

    term_start = relevant_term_start(terms or [], now)
    if term_start is None:
        return default_type
    week_number = week_number_since(term_start, now)
    is_odd = week_number % 2 == 1
    if mode == TUESDAY_WEEK_NUMBER_BASED:
        return odd_week_type if is_odd else even_week_type
    return ON_SITE if is_odd else REMOTE


def desired_day_type(
    settings: Any,
    now: date | datetime,
    terms: Iterable[Any] | None = None,
    store: Any = None,
) -> str:
    """Derive the day-type for ``now`` from the weekday and Tuesday rules.

    Terms are only fetched from ``store`` when the Tuesday rule needs them
    and none were supplied.
    """
    current = normalize_day_type(settings.current_day_type)
    today = civil_weekday(now)
    tuesday_mode = normalize_tuesday_mode(settings.tuesday_mode)

    if today == TUESDAY and tuesday_mode != TUESDAY_MANUAL:
        if terms is None and store is not None and tuesday_mode in (
            TUESDAY_TERM_WEEK_BASED,
            TUESDAY_WEEK_NUMBER_BASED,
        ):
            terms = store.list_terms()
        return resolve_tuesday_day_type(
            tuesday_mode,
            now,
            terms,
            current,
            settings.tuesday_odd_week_type,
            settings.tuesday_even_week_type,
        )

    on_site_days = parse_days_field(settings.on_site_days)
    remote_days = parse_days_field(settings.remote_days)
    if today in remote_days and today not in on_site_days:
        return REMOTE
    if today in on_site_days and today not in remote_days:
        return ON_SITE
    return current


def apply_auto_day_type(
    settings: Any,
    store: Any,
    now: date | datetime | None = None,
    terms: Iterable[Any] | None = None,
) -> Any:
    if settings is None:
        return None
    if not settings.auto_day_type_enabled:
        return settings

    moment = as_instant(now) if now is not None else now_utc()
    desired = desired_day_type(settings, moment, terms=terms, store=store)
    if desired == settings.current_day_type:
        return settings

    logger.info(
        "Switching day type from %s to %s for %s",
        settings.current_day_type,
        desired,
        civil_date(moment).isoformat(),
    )
    return store.update_settings(settings.id, current_day_type=desired)
