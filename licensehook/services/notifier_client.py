"""HTTP client for the internal license-notify endpoint."""

import httpx
from fastapi import Request

from licensehook.core.config import get_settings

LICENSE_NOTIFY_PATH = "/api/license-notify"


class LicenseNotifierClient:
    """Posts license deliveries to ``/api/license-notify`` using the shared token."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Origin serving the notify endpoint (e.g. "https://example.com")
            token: Shared secret expected by the notify endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests route calls in-process)
        """
        self.url = base_url.rstrip("/") + LICENSE_NOTIFY_PATH
        self.token = token
        self.timeout = timeout
        self.transport = transport

    async def notify(self, *, email: str, license_key: str, platform: str) -> httpx.Response:
        payload = {
            "token": self.token,
            "email": email,
            "license_key": license_key,
            "platform": platform,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(self.url, json=payload)


def notifier_for_origin(origin: str) -> LicenseNotifierClient:
    """Build a notifier client from settings, defaulting the URL to ``origin``."""
    settings = get_settings()
    return LicenseNotifierClient(
        base_url=settings.license_notify_url or origin,
        token=settings.license_notify_token,
        timeout=settings.license_notify_timeout_seconds,
    )


def get_license_notifier(request: Request) -> LicenseNotifierClient:
    """FastAPI dependency: notifier pointed at the inbound request's origin unless configured."""
    return notifier_for_origin(str(request.base_url))
