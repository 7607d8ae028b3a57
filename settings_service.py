from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from day_type import (
    DAY_TYPES,
    ON_SITE,
    REMOTE,
    normalize_day_type,
    normalize_tuesday_mode,
    parse_days_field,
)
from models import Period, Settings, Term, utcnow
from school_time import (
    civil_date,
    end_of_civil_day,
    parse_civil_date,
    start_of_civil_day,
    to_storage,
)

DEFAULT_SCHOOL_NAME = "Future School"
DEFAULT_MANAGER_NAME = "Mr. Mohammed Al-Otaibi"

DEFAULT_PERIODS: Dict[str, List[tuple[str, str]]] = {
    ON_SITE: [
        ("08:00", "08:45"),
        ("08:50", "09:35"),
        ("09:40", "10:25"),
        ("10:40", "11:25"),
        ("11:30", "12:15"),
        ("12:20", "13:05"),
    ],
    REMOTE: [
        ("09:00", "09:35"),
        ("09:40", "10:15"),
        ("10:20", "10:55"),
        ("11:10", "11:45"),
        ("11:50", "12:25"),
    ],
}

EDITABLE_FIELDS = {
    "current_day_type",
    "auto_day_type_enabled",
    "on_site_days",
    "remote_days",
    "tuesday_mode",
    "tuesday_odd_week_type",
    "tuesday_even_week_type",
    "school_name",
    "manager_name",
    "admin_password_hash",
}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    return None


def normalize_periods(periods: Any) -> List[dict[str, Any]]:
    """Validate an admin period list and renumber it 1..n by its order."""
    if not isinstance(periods, list):
        raise ValueError("periods must be a list")
    normalized = []
    for entry in periods:
        if not isinstance(entry, dict):
            raise ValueError("invalid period entry")
        order = _as_int(entry.get("order"))
        name = entry.get("name")
        start_time = entry.get("start_time")
        end_time = entry.get("end_time")
        if order is None or order <= 0:
            raise ValueError("period order must be a positive integer")
        if name is not None and not isinstance(name, str):
            raise ValueError("period name must be text")
        if not isinstance(start_time, str) or not isinstance(end_time, str):
            raise ValueError("period start and end times are required")
        start_time = start_time.strip()
        end_time = end_time.strip()
        if not TIME_PATTERN.match(start_time) or not TIME_PATTERN.match(end_time):
            raise ValueError("period times must use HH:MM")
        normalized.append(
            {
                "order": order,
                "name": (name or "").strip(),
                "start_time": start_time,
                "end_time": end_time,
            }
        )
    normalized.sort(key=lambda item: item["order"])
    for idx, item in enumerate(normalized, start=1):
        item["order"] = idx
    return normalized


def normalize_terms(terms: Any) -> List[dict[str, Any]]:
    """Validate an admin term list. Dates are ``YYYY-MM-DD`` civil dates;
    the end date is inclusive."""
    if not isinstance(terms, list):
        raise ValueError("terms must be a list")
    normalized = []
    for entry in terms:
        if not isinstance(entry, dict):
            raise ValueError("invalid term entry")
        name = str(entry.get("name") or "").strip()
        start_raw = entry.get("start_date")
        end_raw = entry.get("end_date")
        if not name or not start_raw or not end_raw:
            raise ValueError("term name, start date and end date are required")
        start_day = parse_civil_date(start_raw)
        end_day = parse_civil_date(end_raw)
        if not start_day or not end_day:
            raise ValueError("invalid term dates, expected YYYY-MM-DD")
        if end_day < start_day:
            raise ValueError("term end date must be on or after its start date")
        normalized.append(
            {
                "id": _as_int(entry.get("id")),
                "name": name,
                "start_date": to_storage(start_of_civil_day(start_day)),
                "end_date": to_storage(end_of_civil_day(end_day)),
            }
        )
    return normalized


class SchoolSettingsManager:
    def __init__(self, session_factory: Callable):
        self._session_factory = session_factory

    def find_settings(self) -> Optional[Settings]:
        with self._session_factory() as session:
            return session.query(Settings).order_by(Settings.id).first()

    def ensure_settings(self, default_password_hash: str) -> Settings:
        with self._session_factory() as session:
            record = session.query(Settings).order_by(Settings.id).first()
            if record:
                return record
            record = Settings(
                current_day_type=ON_SITE,
                tuesday_odd_week_type=ON_SITE,
                tuesday_even_week_type=REMOTE,
                admin_password_hash=default_password_hash,
                school_name=DEFAULT_SCHOOL_NAME,
                manager_name=DEFAULT_MANAGER_NAME,
            )
            session.add(record)
            session.commit()
            logger.info("Created default settings record")
            return record

    def update_settings(self, settings_id: int, **fields: Any) -> Settings:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown settings fields: {', '.join(sorted(unknown))}")
        with self._session_factory() as session:
            record = session.get(Settings, settings_id)
            if record is None:
                raise LookupError(f"settings {settings_id} not found")
            for key, value in fields.items():
                setattr(record, key, value)
            record.updated_at = utcnow()
            session.commit()
            return record

    def list_terms(self) -> List[Term]:
        with self._session_factory() as session:
            return session.query(Term).order_by(Term.start_date, Term.id).all()

    def replace_terms(self, terms: Iterable[dict[str, Any]]) -> List[Term]:
        """Upsert the given terms and delete every term not resubmitted."""
        terms = list(terms)
        keep_ids = [term["id"] for term in terms if term.get("id")]
        with self._session_factory() as session:
            query = session.query(Term)
            if keep_ids:
                query = query.filter(Term.id.notin_(keep_ids))
            query.delete(synchronize_session=False)
            saved: List[Term] = []
            for term in terms:
                record = session.get(Term, term["id"]) if term.get("id") else None
                if record is None:
                    record = Term()
                    session.add(record)
                record.name = term["name"]
                record.start_date = term["start_date"]
                record.end_date = term["end_date"]
                saved.append(record)
            session.commit()
        return sorted(saved, key=lambda term: term.start_date)

    def list_periods(self, day_type: str) -> List[Period]:
        with self._session_factory() as session:
            return (
                session.query(Period)
                .filter(Period.day_type == day_type)
                .order_by(Period.order)
                .all()
            )

    def replace_periods(self, day_type: str, periods: Iterable[dict[str, Any]]) -> List[Period]:
        if day_type not in DAY_TYPES:
            raise ValueError(f"invalid day type {day_type!r}")
        with self._session_factory() as session:
            session.query(Period).filter(Period.day_type == day_type).delete(
                synchronize_session=False
            )
            records = [
                Period(
                    day_type=day_type,
                    order=period["order"],
                    name=period["name"],
                    start_time=period["start_time"],
                    end_time=period["end_time"],
                )
                for period in periods
            ]
            session.add_all(records)
            settings = session.query(Settings).order_by(Settings.id).first()
            if settings:
                settings.updated_at = utcnow()
            session.commit()
        logger.info("Saved %d %s periods", len(records), day_type)
        return records


def period_to_dict(period: Period) -> dict[str, Any]:
    return {
        "id": period.id,
        "day_type": period.day_type,
        "order": period.order,
        "name": period.name,
        "start_time": period.start_time,
        "end_time": period.end_time,
    }


def term_to_dict(term: Term) -> dict[str, Any]:
    return {
        "id": term.id,
        "name": term.name,
        "start_date": civil_date(term.start_date).isoformat(),
        "end_date": civil_date(term.end_date).isoformat(),
    }


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    return {
        "id": settings.id,
        "current_day_type": normalize_day_type(settings.current_day_type),
        "auto_day_type_enabled": bool(settings.auto_day_type_enabled),
        "on_site_days": parse_days_field(settings.on_site_days),
        "remote_days": parse_days_field(settings.remote_days),
        "tuesday_mode": normalize_tuesday_mode(settings.tuesday_mode),
        "tuesday_odd_week_type": normalize_day_type(settings.tuesday_odd_week_type, ON_SITE),
        "tuesday_even_week_type": normalize_day_type(settings.tuesday_even_week_type, REMOTE),
        "school_name": settings.school_name,
        "manager_name": settings.manager_name,
        "updated_at": settings.updated_at.isoformat() if settings.updated_at else None,
    }
