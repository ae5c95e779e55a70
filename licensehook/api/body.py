"""Request body helpers shared by the routes."""

import json
from typing import Any

from fastapi import Request


class InvalidJSONBody(ValueError):
    """Raised when a non-empty request body is not valid JSON."""


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON; an empty body parses to ``{}``.

    Raises:
        InvalidJSONBody: body is non-empty and not valid JSON
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidJSONBody(str(e)) from e
