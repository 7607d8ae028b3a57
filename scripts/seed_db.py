import argparse
import logging
from datetime import date

from auth import DEFAULT_ADMIN_PASSWORD, hash_password
from db import get_session, init_db, reset_db
from settings_service import (
    DEFAULT_MANAGER_NAME,
    DEFAULT_PERIODS,
    DEFAULT_SCHOOL_NAME,
    SchoolSettingsManager,
    normalize_periods,
    normalize_terms,
)

logger = logging.getLogger("seed_db")


def default_terms(year: int) -> list[dict]:
    return [
        {
            "name": f"First term {year}",
            "start_date": date(year, 8, 18).isoformat(),
            "end_date": date(year, 11, 30).isoformat(),
        },
        {
            "name": f"Second term {year}",
            "start_date": date(year, 12, 15).isoformat(),
            "end_date": date(year + 1, 3, 1).isoformat(),
        },
    ]


def seed(manager: SchoolSettingsManager, password: str, year: int) -> None:
    password_hash = hash_password(password)
    settings = manager.ensure_settings(password_hash)
    manager.update_settings(
        settings.id,
        current_day_type="ON_SITE",
        admin_password_hash=password_hash,
        school_name=DEFAULT_SCHOOL_NAME,
        manager_name=DEFAULT_MANAGER_NAME,
    )
    for day_type, slots in DEFAULT_PERIODS.items():
        periods = normalize_periods(
            [
                {
                    "order": idx,
                    "name": f"Period {idx}",
                    "start_time": start,
                    "end_time": end,
                }
                for idx, (start, end) in enumerate(slots, start=1)
            ]
        )
        manager.replace_periods(day_type, periods)
    manager.replace_terms(normalize_terms(default_terms(year)))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the school day database with defaults.")
    parser.add_argument("--password", default=DEFAULT_ADMIN_PASSWORD, help="admin password to store")
    parser.add_argument("--year", type=int, default=date.today().year, help="academic year of the default terms")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    if args.reset:
        reset_db()
    else:
        init_db()
    seed(SchoolSettingsManager(session_factory=get_session), args.password, args.year)
    logger.info("Database seeded.")
    logger.info("Default admin password: %s", args.password)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
