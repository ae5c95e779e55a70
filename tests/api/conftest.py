"""API fixtures: a temporary SQLite database and an in-process HTTP client.

The database is initialized in the pytest-asyncio event loop and the app is
driven through httpx.ASGITransport in that same loop, so tests can query the
database directly. The webhook's nested call to /api/license-notify is routed
back into the same app.
"""

import httpx
import pytest
from fastapi import FastAPI

from licensehook.integrations.convertkit import get_mailing_list_client
from licensehook.main import create_app
from licensehook.services.notifier_client import LicenseNotifierClient, get_license_notifier
from tests.helpers import TEST_NOTIFY_TOKEN


@pytest.fixture
def app(db, fake_mailing_list) -> FastAPI:
    _app = create_app()
    _app.dependency_overrides[get_mailing_list_client] = lambda: fake_mailing_list
    _app.dependency_overrides[get_license_notifier] = lambda: LicenseNotifierClient(
        base_url="http://testserver",
        token=TEST_NOTIFY_TOKEN,
        transport=httpx.ASGITransport(app=_app),
    )
    return _app


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
