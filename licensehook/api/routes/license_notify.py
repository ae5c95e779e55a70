"""License-notify endpoint: shared-secret gated forwarder to the mailing-list provider."""

import hmac

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError, field_validator

from licensehook.api.body import InvalidJSONBody, read_json_body
from licensehook.core.config import get_settings
from licensehook.core.exceptions import MailingListError
from licensehook.integrations.convertkit import ConvertKitClient, get_mailing_list_client

logger = structlog.get_logger(__name__)

router = APIRouter()


class LicenseNotifyRequest(BaseModel):
    """Delivery request; values are normalized, emptiness is checked by the handler."""

    email: str | None = None
    license_key: str | None = None
    platform: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str | None) -> str:
        return (v or "").strip().lower()

    @field_validator("license_key", "platform")
    @classmethod
    def _trim(cls, v: str | None) -> str:
        return (v or "").strip()

    @property
    def complete(self) -> bool:
        return bool(self.email and self.license_key and self.platform)


def token_matches(presented: object, expected: str) -> bool:
    """Exact, constant-time token comparison; empty tokens never match."""
    if not isinstance(presented, str) or not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


@router.post("/license-notify", response_class=PlainTextResponse)
async def license_notify(
    request: Request,
    mailing_list: ConvertKitClient = Depends(get_mailing_list_client),
):
    """Authenticate, validate, and forward a license e-mail request to Kit."""
    try:
        body = await read_json_body(request)
    except InvalidJSONBody:
        raise HTTPException(status_code=400, detail="invalid json")
    if not isinstance(body, dict):
        body = {}

    if not token_matches(body.get("token"), get_settings().license_notify_token):
        raise HTTPException(status_code=401, detail="unauthorized")

    try:
        notify = LicenseNotifyRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="invalid payload")
    if not notify.complete:
        raise HTTPException(status_code=400, detail="missing fields")

    try:
        await mailing_list.subscribe(
            notify.email,
            fields={"license_key": notify.license_key, "platform": notify.platform},
        )
    except MailingListError as e:
        logger.warning("mailing_list_subscribe_failed", status_code=e.status_code, platform=notify.platform)
        raise HTTPException(status_code=502, detail=f"kit error: {e.body}")

    logger.info("license_email_requested", platform=notify.platform)
    return "ok"
