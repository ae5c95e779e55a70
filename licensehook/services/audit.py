"""AuditSink: best-effort writer for the append-only ``events`` table.

Contract: ``record`` never raises and never blocks primary control flow.
Failures are logged and swallowed.
"""

import json
from typing import Any, Protocol

import structlog

from licensehook.db.base import get_session_factory
from licensehook.db.models.event import Event

logger = structlog.get_logger(__name__)


class AuditSink(Protocol):
    async def record(self, event_type: str, body: Any = None) -> None: ...


def encode_body(body: Any) -> str:
    """Serialize an audit body to JSON text; unserializable values fall back to str()."""
    return json.dumps(body if body is not None else {}, default=str)


class DatabaseAuditSink:
    """Writes audit events through its own session so failures never poison the caller's transaction."""

    async def record(self, event_type: str, body: Any = None) -> None:
        try:
            factory = get_session_factory()
            async with factory() as session:
                session.add(Event(type=event_type, body=encode_body(body)))
                await session.commit()
        except Exception as e:
            logger.warning(
                "audit_write_failed",
                event_type=event_type,
                error=str(e),
                error_type=type(e).__name__,
            )


_default_sink = DatabaseAuditSink()


def get_audit_sink() -> AuditSink:
    """FastAPI dependency returning the process-wide audit sink."""
    return _default_sink
