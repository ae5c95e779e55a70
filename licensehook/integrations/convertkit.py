"""ConvertKit (Kit v3) integration: subscribe an e-mail to a form with custom fields."""

from urllib.parse import quote

import httpx

from licensehook.core.config import get_settings
from licensehook.core.exceptions import MailingListError


class ConvertKitClient:
    """Client for the Kit v3 form-subscribe API."""

    def __init__(
        self,
        api_key: str,
        form_id: str,
        base_url: str = "https://api.convertkit.com/v3",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.form_id = form_id
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def subscribe(self, email: str, fields: dict[str, str]) -> dict:
        """Upsert ``email`` on the form, attaching ``fields`` as subscriber custom fields.

        Custom field names must match the fields created in Kit.

        Raises:
            MailingListError: provider answered with a non-2xx status, or the
                request failed before a response arrived (status_code None)
        """
        url = f"{self.base_url}/forms/{quote(self.form_id, safe='')}/subscribe"
        payload = {
            "api_key": self.api_key,
            "email": email,
            "fields": fields,
        }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise MailingListError(None, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise MailingListError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            return {}


def get_mailing_list_client() -> ConvertKitClient:
    """FastAPI dependency building the ConvertKit client from settings."""
    settings = get_settings()
    return ConvertKitClient(
        api_key=settings.convertkit_api_key,
        form_id=settings.convertkit_form_id,
        base_url=settings.convertkit_base_url,
    )
