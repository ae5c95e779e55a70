"""Shared test configuration.

Settings are cached on first use, so the environment is set before any
licensehook module is imported.
"""

import os

from tests.helpers import TEST_NOTIFY_TOKEN

os.environ["LICENSE_NOTIFY_TOKEN"] = TEST_NOTIFY_TOKEN
os.environ.setdefault("CONVERTKIT_API_KEY", "ck_test_key")
os.environ.setdefault("CONVERTKIT_FORM_ID", "form_test_123")
os.environ.setdefault("LICENSE_NOTIFY_URL", "")

import pytest

from tests.helpers import FakeMailingList, MemoryAuditSink


@pytest.fixture
def fake_mailing_list():
    return FakeMailingList()


@pytest.fixture
def memory_audit():
    return MemoryAuditSink()


@pytest.fixture
async def db(tmp_path):
    """Fresh SQLite database per test, torn down afterwards."""
    import licensehook.db.base as db_mod
    from licensehook.db import close_db, get_session_factory, init_db

    db_mod._engine = None
    db_mod._session_factory = None
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'licensehook.db'}")
    yield get_session_factory()
    await close_db()
