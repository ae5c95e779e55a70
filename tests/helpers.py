"""Test doubles and database helpers shared across test modules."""

from sqlalchemy import func, select

from licensehook.core.exceptions import MailingListError
from licensehook.db.base import get_session_factory

TEST_NOTIFY_TOKEN = "test-notify-token"


class FakeMailingList:
    """Stands in for ConvertKitClient; records subscribe calls."""

    def __init__(self, fail_with: tuple[int, str] | None = None):
        self.fail_with = fail_with
        self.calls: list[dict] = []

    async def subscribe(self, email: str, fields: dict[str, str]) -> dict:
        self.calls.append({"email": email, "fields": fields})
        if self.fail_with is not None:
            raise MailingListError(*self.fail_with)
        return {"subscription": {"subscriber": {"email_address": email}}}


class MemoryAuditSink:
    """In-memory AuditSink for tests that do not need the events table."""

    def __init__(self):
        self.events: list[tuple[str, object]] = []

    async def record(self, event_type: str, body=None) -> None:
        self.events.append((event_type, body))

    def types(self) -> list[str]:
        return [t for t, _ in self.events]


async def count_rows(model) -> int:
    async with get_session_factory()() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def all_rows(model) -> list:
    async with get_session_factory()() as session:
        result = await session.execute(select(model).order_by(model.id))
        return list(result.scalars().all())
