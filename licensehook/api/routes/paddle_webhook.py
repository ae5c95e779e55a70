"""Paddle webhook ingestion: audit, customer/subscription upsert, license provisioning."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from licensehook.api.body import InvalidJSONBody, read_json_body
from licensehook.core.config import get_settings
from licensehook.db.base import get_session_factory
from licensehook.domain.extraction import WebhookFields, event_type_of, extract_webhook_fields
from licensehook.services.audit import AuditSink, get_audit_sink
from licensehook.services.notifier_client import LicenseNotifierClient, get_license_notifier
from licensehook.services.provisioning import (
    mark_notified,
    provision_license,
    upsert_customer,
    upsert_subscription,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/paddle-webhook", response_class=PlainTextResponse)
async def paddle_webhook(
    request: Request,
    audit: AuditSink = Depends(get_audit_sink),
    notifier: LicenseNotifierClient = Depends(get_license_notifier),
):
    """Ingest a Paddle event.

    The provider gets a 200 unless the body is unparseable or the customer
    upsert fails; notification failures never trigger provider redelivery.
    """
    try:
        payload = await read_json_body(request)
    except InvalidJSONBody:
        await audit.record("webhook.error", {"reason": "invalid json"})
        raise HTTPException(status_code=400, detail="invalid json")

    event_type = event_type_of(payload)
    await audit.record(event_type, payload)

    fields = extract_webhook_fields(payload)
    # every log line of this delivery, including provisioning, carries these
    with structlog.contextvars.bound_contextvars(event_type=event_type, transaction_id=fields.transaction_id):
        logger.info(
            "webhook_received",
            status=fields.status,
            product_label=fields.product_label,
        )
        return await _ingest(fields, audit, notifier)


async def _ingest(fields: WebhookFields, audit: AuditSink, notifier: LicenseNotifierClient) -> str:
    if not fields.email:
        await audit.record("webhook.note", {"note": "no email in payload"})
        return "ok (no email)"

    factory = get_session_factory()
    async with factory() as session:
        customer_id = await upsert_customer(session, fields.email)
        if customer_id is None:
            logger.error("customer_upsert_failed")
            await audit.record("webhook.error", {"reason": "customer upsert failed", "email": fields.email})
            raise HTTPException(status_code=500, detail="customer upsert failed")

        if fields.transaction_id:
            await upsert_subscription(
                session,
                customer_id=customer_id,
                transaction_id=fields.transaction_id,
                product_label=fields.product_label,
                price_id=fields.price_id,
                status=fields.status,
            )

        if fields.provisionable:
            await _provision_and_notify(session, customer_id, fields, audit, notifier)

    return "ok"


async def _provision_and_notify(
    session,
    customer_id: int,
    fields: WebhookFields,
    audit: AuditSink,
    notifier: LicenseNotifierClient,
) -> None:
    """Ensure the (customer, platform) license exists and deliver it until delivery succeeds."""
    platform = fields.product_label
    result = await provision_license(
        session,
        customer_id=customer_id,
        platform=platform,
        key_length=get_settings().license_key_length,
    )

    if result.created:
        await audit.record(
            "license.created",
            {"email": fields.email, "platform": platform, "license_key": result.license_key},
        )

    if not result.needs_notify:
        return

    await audit.record(
        "notify.attempt",
        {"email": fields.email, "platform": platform, "license_key": result.license_key},
    )

    try:
        response = await notifier.notify(email=fields.email, license_key=result.license_key, platform=platform)
    except Exception as e:
        logger.warning("license_notify_error", platform=platform, error=str(e), error_type=type(e).__name__)
        await audit.record("notify.error", {"message": str(e)})
        return

    if not response.is_success:
        logger.warning("license_notify_failed", platform=platform, status_code=response.status_code)
        await audit.record("notify.fail", {"status": response.status_code, "error": response.text})
        return

    await mark_notified(session, customer_id=customer_id, platform=platform, license_key=result.license_key)
    logger.info("license_notified", customer_id=customer_id, platform=platform)
    await audit.record("notify.ok", {"email": fields.email, "platform": platform})
