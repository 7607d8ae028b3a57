from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from day_type import (
    ON_SITE,
    REMOTE,
    TUESDAY_MODES,
    normalize_tuesday_mode,
    resolve_tuesday_day_type,
    week_number_since,
)
from school_time import SCHOOL_TZ


def make_term(start, end):
    return SimpleNamespace(
        id=1,
        name="Term",
        start_date=datetime(*start, tzinfo=SCHOOL_TZ),
        end_date=datetime(*end, 23, 59, 59, tzinfo=SCHOOL_TZ),
    )


TERM = make_term((2024, 1, 2), (2024, 3, 28))


def tuesday(year, month, day, hour=10):
    return datetime(year, month, day, hour, tzinfo=SCHOOL_TZ)


@pytest.mark.parametrize("now", [tuesday(2024, 1, 2), tuesday(2025, 6, 3), tuesday(1999, 12, 28)])
def test_fixed_modes_ignore_time_and_terms(now):
    assert resolve_tuesday_day_type("FIXED_REMOTE", now, [TERM], ON_SITE) == REMOTE
    assert resolve_tuesday_day_type("FIXED_ON_SITE", now, [], REMOTE) == ON_SITE


def test_manual_returns_default():
    assert resolve_tuesday_day_type("MANUAL", tuesday(2024, 1, 2), [TERM], REMOTE) == REMOTE
    assert resolve_tuesday_day_type("MANUAL", tuesday(2024, 1, 2), [TERM], ON_SITE) == ON_SITE


def test_unknown_mode_is_fixed_on_site():
    assert normalize_tuesday_mode("sometimes") == "FIXED_ON_SITE"
    assert normalize_tuesday_mode(None) == "FIXED_ON_SITE"
    assert normalize_tuesday_mode(" week_number_based ") == "WEEK_NUMBER_BASED"
    assert resolve_tuesday_day_type("sometimes", tuesday(2024, 1, 2), [TERM], REMOTE) == ON_SITE
    assert set(TUESDAY_MODES) >= {"MANUAL", "WEEKLY_ALTERNATE"}


def test_week_number_based_uses_configured_types():
    first = resolve_tuesday_day_type(
        "WEEK_NUMBER_BASED", tuesday(2024, 1, 2), [TERM], ON_SITE, REMOTE, ON_SITE
    )
    second = resolve_tuesday_day_type(
        "WEEK_NUMBER_BASED", tuesday(2024, 1, 9), [TERM], ON_SITE, REMOTE, ON_SITE
    )
    assert first == REMOTE
    assert second == ON_SITE


def test_week_number_based_invalid_types_fall_back():
    assert resolve_tuesday_day_type(
        "WEEK_NUMBER_BASED", tuesday(2024, 1, 2), [TERM], REMOTE, "bogus", None
    ) == ON_SITE
    assert resolve_tuesday_day_type(
        "WEEK_NUMBER_BASED", tuesday(2024, 1, 9), [TERM], ON_SITE, "bogus", None
    ) == REMOTE


def test_week_number_based_without_terms_returns_default():
    assert resolve_tuesday_day_type("WEEK_NUMBER_BASED", tuesday(2024, 1, 2), [], REMOTE) == REMOTE
    assert resolve_tuesday_day_type("TERM_WEEK_BASED", tuesday(2024, 1, 2), None, REMOTE) == REMOTE


def test_term_week_based_alternates():
    assert resolve_tuesday_day_type("TERM_WEEK_BASED", tuesday(2024, 1, 2), [TERM], REMOTE) == ON_SITE
    assert resolve_tuesday_day_type("TERM_WEEK_BASED", tuesday(2024, 1, 9), [TERM], ON_SITE) == REMOTE
    assert resolve_tuesday_day_type("TERM_WEEK_BASED", tuesday(2024, 1, 16), [TERM], REMOTE) == ON_SITE


def test_week_number_counts_civil_days():
    start = datetime(2024, 1, 2, tzinfo=SCHOOL_TZ)
    assert week_number_since(start, datetime(2024, 1, 8, 23, 59, tzinfo=SCHOOL_TZ)) == 1
    assert week_number_since(start, datetime(2024, 1, 9, 0, 1, tzinfo=SCHOOL_TZ)) == 2
    # 22:30 UTC on Jan 8 is already Jan 9 in the school zone.
    assert week_number_since(start, datetime(2024, 1, 8, 22, 30, tzinfo=timezone.utc)) == 2


def test_week_number_before_term_start_keeps_alternating():
    start = date(2024, 1, 2)
    assert week_number_since(start, date(2023, 12, 26)) == 0
    assert week_number_since(start, date(2023, 12, 19)) == -1


def test_upcoming_term_is_used_before_it_starts():
    # One week before the term, week number 0 counts as even.
    assert resolve_tuesday_day_type(
        "TERM_WEEK_BASED", tuesday(2023, 12, 26), [TERM], ON_SITE
    ) == REMOTE


def test_weekly_alternate_is_stable_and_alternates():
    first = resolve_tuesday_day_type("WEEKLY_ALTERNATE", tuesday(2024, 1, 2), [], ON_SITE)
    second = resolve_tuesday_day_type("WEEKLY_ALTERNATE", tuesday(2024, 1, 9), [], ON_SITE)
    assert first == REMOTE
    assert second == ON_SITE
    assert first != second
    later = tuesday(2024, 1, 2) + timedelta(weeks=52)
    assert resolve_tuesday_day_type("WEEKLY_ALTERNATE", later, [], ON_SITE) == first
