import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="school-day-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SCHOOL_TIMEZONE"] = "Asia/Riyadh"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "admin123"

import pytest  # noqa: E402

from db import Base, engine, get_session, reset_db  # noqa: E402
from settings_service import SchoolSettingsManager  # noqa: E402


@pytest.fixture
def session_factory():
    reset_db()
    yield get_session
    Base.metadata.drop_all(engine)


@pytest.fixture
def manager(session_factory):
    return SchoolSettingsManager(session_factory=session_factory)


@pytest.fixture
def client(session_factory):
    from flask_app import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
