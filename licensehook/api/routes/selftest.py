from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from licensehook.db.base import get_session_factory
from licensehook.db.models.event import Event

router = APIRouter()


@router.get("/selftest", response_class=PlainTextResponse)
async def selftest():
    """Liveness check: writes a fixed audit row directly, so a broken database surfaces as a 500."""
    async with get_session_factory()() as session:
        session.add(Event(type="selftest", body='{"ping": true}'))
        await session.commit()
    return "selftest ok"
