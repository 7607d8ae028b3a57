from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from school_time import DAY_MS, as_instant, now_utc

STATUS_ACTIVE = "active"
STATUS_UPCOMING = "upcoming"
STATUS_FINISHED = "finished"


@dataclass(frozen=True)
class TermRecord:
    id: Optional[int]
    name: str
    start_date: datetime
    end_date: datetime


@dataclass(frozen=True)
class TermStatus:
    id: Optional[int]
    name: str
    start_date: str
    end_date: str
    status: str
    total_days: int
    remaining_days: int
    remaining_percent: float
    days_until_start: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def to_term_record(term: Any) -> TermRecord:
    return TermRecord(
        id=getattr(term, "id", None),
        name=getattr(term, "name", "") or "",
        start_date=as_instant(term.start_date),
        end_date=as_instant(term.end_date),
    )


def sort_terms(terms: Iterable[Any]) -> list[TermRecord]:
    records = [to_term_record(term) for term in terms or []]
    return sorted(records, key=lambda term: term.start_date)


def select_term(terms: Sequence[TermRecord], now: datetime) -> Optional[TermRecord]:
    """Active term first, then the next upcoming one, then the last known."""
    if not terms:
        return None
    active = next((t for t in terms if t.start_date <= now <= t.end_date), None)
    if active:
        return active
    upcoming = next((t for t in terms if t.start_date > now), None)
    if upcoming:
        return upcoming
    return terms[-1]


def relevant_term_start(terms: Iterable[Any], now: date | datetime) -> Optional[datetime]:
    selected = select_term(sort_terms(terms), as_instant(now))
    return selected.start_date if selected else None


def _ms(delta) -> float:
    return delta.total_seconds() * 1000


def compute_term_status(
    terms: Iterable[Any],
    now: date | datetime | None = None,
) -> Optional[TermStatus]:
    current = as_instant(now) if now is not None else now_utc()
    selected = select_term(sort_terms(terms), current)
    if selected is None:
        return None

    status = STATUS_FINISHED
    if current < selected.start_date:
        status = STATUS_UPCOMING
    elif current <= selected.end_date:
        status = STATUS_ACTIVE

    total_ms = max(0.0, _ms(selected.end_date - selected.start_date))
    if status == STATUS_UPCOMING:
        remaining_ms = total_ms
    else:
        remaining_ms = max(0.0, _ms(selected.end_date - current))
    total_days = max(1, math.floor(total_ms / DAY_MS + 0.5))
    remaining_days = max(0, math.ceil(remaining_ms / DAY_MS))
    if total_ms == 0:
        remaining_percent = 0.0
    else:
        remaining_percent = max(0.0, min(100.0, remaining_ms / total_ms * 100))

    days_until_start = None
    if status == STATUS_UPCOMING:
        days_until_start = max(
            0, math.ceil(_ms(selected.start_date - current) / DAY_MS)
        )

    return TermStatus(
        id=selected.id,
        name=selected.name,
        start_date=selected.start_date.isoformat(),
        end_date=selected.end_date.isoformat(),
        status=status,
        total_days=total_days,
        remaining_days=remaining_days,
        remaining_percent=remaining_percent,
        days_until_start=days_until_start,
    )
