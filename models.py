from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
)

from db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Settings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    current_day_type = Column(String, nullable=False, default="ON_SITE")
    auto_day_type_enabled = Column(Boolean, nullable=False, default=False)
    on_site_days = Column(String, nullable=False, default="")
    remote_days = Column(String, nullable=False, default="")
    tuesday_mode = Column(String, nullable=False, default="MANUAL")
    tuesday_odd_week_type = Column(String, nullable=False, default="ON_SITE")
    tuesday_even_week_type = Column(String, nullable=False, default="REMOTE")
    school_name = Column(String, nullable=False, default="")
    manager_name = Column(String, nullable=False, default="")
    admin_password_hash = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Period(Base):
    __tablename__ = "periods"

    id = Column(Integer, primary_key=True)
    day_type = Column(String, index=True, nullable=False)
    order = Column(Integer, nullable=False)
    name = Column(String, nullable=False, default="")
    start_time = Column(String, nullable=False)
    end_time = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("day_type", "order", name="uq_period_order"),
    )


class Term(Base):
    __tablename__ = "terms"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    # Stored as naive UTC instants.
    start_date = Column(DateTime, index=True, nullable=False)
    end_date = Column(DateTime, nullable=False)
