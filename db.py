"""Engine and session setup for the school day database."""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.getenv("SCHOOL_DAY_DATA_DIR", os.path.join(BASE_DIR, "instance"))
DEFAULT_DATABASE_URL = f"sqlite:///{os.path.join(DATA_DIR, 'school_day.db')}"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
SQL_ECHO = os.getenv("SQLALCHEMY_ECHO", "").lower() in {"1", "true", "yes"}


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(DATABASE_URL, future=True, echo=SQL_ECHO, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

Base = declarative_base()


def get_session():
    return SessionLocal()


def _prepare() -> None:
    if DATABASE_URL == DEFAULT_DATABASE_URL:
        os.makedirs(DATA_DIR, exist_ok=True)
    # Settings, Period and Term register themselves on Base.metadata.
    import models  # noqa: F401


def init_db() -> None:
    _prepare()
    Base.metadata.create_all(engine)


def reset_db() -> None:
    """Drop and recreate every table. Used by the seeding CLI and tests."""
    _prepare()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
