"""Generic event recorder for unclassified provider callbacks."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from licensehook.api.body import InvalidJSONBody, read_json_body
from licensehook.domain.extraction import event_type_of
from licensehook.services.audit import AuditSink, get_audit_sink

router = APIRouter()

RECORDED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/events", methods=RECORDED_METHODS, response_class=PlainTextResponse)
async def record_event(request: Request, audit: AuditSink = Depends(get_audit_sink)):
    """Record whatever arrives; always acknowledges with 200."""
    try:
        body = await read_json_body(request)
    except InvalidJSONBody:
        raw = await request.body()
        body = {"raw": raw.decode("utf-8", errors="replace")}

    await audit.record(event_type_of(body, default="event"), body)
    return "ok"
