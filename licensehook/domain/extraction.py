"""Tolerant field extraction from Paddle webhook payloads.

Paddle payloads vary by API version and event type, so every datum is
looked up through an ordered list of accessors; the first accessor that
yields a usable value wins.

Pure functions -- no I/O.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

Accessor = Callable[[dict, dict], Any]  # (payload, transaction root) -> value | None

SUCCESS_STATUSES = frozenset({"completed", "paid", "billed", "active"})
PRODUCT_TOKENS = ("nt", "tv", "dual")
UNKNOWN_PRODUCT = "unknown"
DEFAULT_STATUS = "pending"


def dig(obj: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(obj, list) or not -len(obj) <= step < len(obj):
                return None
            obj = obj[step]
        else:
            if not isinstance(obj, dict):
                return None
            obj = obj.get(step)
        if obj is None:
            return None
    return obj


def at_root(*path: str | int) -> Accessor:
    """Accessor reading from the transaction root (``data`` when present)."""
    return lambda payload, root: dig(root, *path)


def at_top(*path: str | int) -> Accessor:
    """Accessor reading from the top-level payload."""
    return lambda payload, root: dig(payload, *path)


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def first_present(accessors: Sequence[Accessor], payload: dict, root: dict | None = None) -> str | None:
    """Evaluate accessors in priority order, returning the first non-empty text value."""
    if root is None:
        root = transaction_root(payload)
    for accessor in accessors:
        value = _as_text(accessor(payload, root))
        if value is not None:
            return value
    return None


EVENT_TYPE_ACCESSORS: tuple[Accessor, ...] = (
    at_top("event_type"),
    at_top("type"),
    at_top("alert_name"),  # Paddle Classic
)

EMAIL_ACCESSORS: tuple[Accessor, ...] = (
    at_root("customer", "email"),
    at_root("customer_email"),
    at_root("user", "email"),
    at_top("customer", "email"),
    at_top("customer_email"),
    at_top("email"),
)

PRICE_ID_ACCESSORS: tuple[Accessor, ...] = (
    at_root("items", 0, "price", "id"),
    at_root("items", 0, "price_id"),
    at_root("price_id"),
)

TRANSACTION_ID_ACCESSORS: tuple[Accessor, ...] = (
    at_root("id"),
    at_root("transaction_id"),
)

STATUS_ACCESSORS: tuple[Accessor, ...] = (
    at_root("status"),
    at_top("status"),
)


def transaction_root(payload: dict) -> dict:
    """Paddle Billing nests the entity under ``data``; older shapes are flat."""
    data = payload.get("data")
    return data if isinstance(data, dict) else payload


def event_type_of(payload: Any, default: str = "transaction") -> str:
    """Best-effort event label used for the audit log."""
    if not isinstance(payload, dict):
        return default
    return first_present(EVENT_TYPE_ACCESSORS, payload) or default


def product_label_for(price_id: str | None) -> str:
    """Derive the product label (platform) from a price identifier.

    Plain, case-sensitive substring match in ``nt``, ``tv``, ``dual`` order.
    Known limitation: the match is unanchored, so ``price_tv_monthly`` maps to
    ``nt`` ("monthly" contains "nt"). Price ids must be named with that in mind.
    """
    if not price_id:
        return UNKNOWN_PRODUCT

    for label in PRODUCT_TOKENS:
        if label in price_id:
            return label
    return UNKNOWN_PRODUCT


@dataclass(frozen=True)
class WebhookFields:
    """Fields the ingestor needs, extracted from one webhook payload."""

    email: str | None
    price_id: str | None
    transaction_id: str | None
    status: str
    product_label: str

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES

    @property
    def provisionable(self) -> bool:
        """True when a license should exist for this delivery."""
        return self.is_success and self.product_label != UNKNOWN_PRODUCT


def extract_webhook_fields(payload: Any) -> WebhookFields:
    """Extract email / price / transaction / status from an untrusted payload."""
    if not isinstance(payload, dict):
        payload = {}
    root = transaction_root(payload)

    email = first_present(EMAIL_ACCESSORS, payload, root)
    price_id = first_present(PRICE_ID_ACCESSORS, payload, root)
    status = first_present(STATUS_ACCESSORS, payload, root) or DEFAULT_STATUS

    return WebhookFields(
        email=email.lower() if email else None,
        price_id=price_id,
        transaction_id=first_present(TRANSACTION_ID_ACCESSORS, payload, root),
        status=status.casefold(),
        product_label=product_label_for(price_id),
    )
