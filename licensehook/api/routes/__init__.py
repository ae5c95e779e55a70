from fastapi import APIRouter

from licensehook.api.routes import events, license_notify, paddle_webhook, selftest

api_router = APIRouter()

api_router.include_router(paddle_webhook.router, tags=["webhooks"])
api_router.include_router(license_notify.router, tags=["license"])
api_router.include_router(selftest.router, tags=["health"])
api_router.include_router(events.router, tags=["events"])
