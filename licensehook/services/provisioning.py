"""Customer / subscription upserts and atomic license provisioning.

All writes are race-safe: e-mail, transaction id and (customer, platform)
carry unique constraints, and every insert uses ON CONFLICT.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from licensehook.db.models.customer import Customer
from licensehook.db.models.license import License
from licensehook.db.models.subscription import Subscription
from licensehook.db.upsert import insert_for
from licensehook.domain.license_keys import DEFAULT_LICENSE_KEY_LENGTH, generate_license_key

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    license_key: str
    created: bool
    notified: bool

    @property
    def needs_notify(self) -> bool:
        """Notify on first creation, and on every delivery until a notify succeeds."""
        return self.created or not self.notified


async def upsert_customer(session: AsyncSession, email: str) -> int | None:
    """Insert the customer if new, then return its id (None if it still cannot be read)."""
    stmt = insert_for(session, Customer).values(email=email).on_conflict_do_nothing(index_elements=["email"])
    await session.execute(stmt)
    await session.commit()

    result = await session.execute(select(Customer.id).where(Customer.email == email))
    return result.scalar_one_or_none()


async def upsert_subscription(
    session: AsyncSession,
    *,
    customer_id: int,
    transaction_id: str,
    product_label: str,
    price_id: str | None,
    status: str,
) -> None:
    """Upsert keyed on the Paddle transaction id; last write wins for status/label/price."""
    stmt = insert_for(session, Subscription).values(
        customer_id=customer_id,
        paddle_transaction_id=transaction_id,
        product_label=product_label,
        price_id=price_id,
        status=status,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["paddle_transaction_id"],
        set_={
            "status": stmt.excluded.status,
            "product_label": stmt.excluded.product_label,
            "price_id": stmt.excluded.price_id,
            "updated_at": datetime.now(UTC),
        },
    )
    await session.execute(stmt)
    await session.commit()


async def provision_license(
    session: AsyncSession,
    *,
    customer_id: int,
    platform: str,
    key_length: int = DEFAULT_LICENSE_KEY_LENGTH,
) -> ProvisionResult:
    """Create the (customer, platform) license if absent, otherwise return the existing one.

    The insert is conditional (ON CONFLICT DO NOTHING ... RETURNING), so two
    concurrent deliveries cannot both create a license for the same pair.
    """
    candidate = generate_license_key(key_length)
    stmt = (
        insert_for(session, License)
        .values(
            customer_id=customer_id,
            platform=platform,
            license_key=candidate,
            status="active",
            notified=False,
        )
        .on_conflict_do_nothing(index_elements=["customer_id", "platform"])
        .returning(License.id)
    )
    result = await session.execute(stmt)
    inserted_id = result.scalar_one_or_none()
    await session.commit()

    if inserted_id is not None:
        logger.info("license_created", customer_id=customer_id, platform=platform)
        return ProvisionResult(license_key=candidate, created=True, notified=False)

    existing = await session.execute(
        select(License.license_key, License.notified).where(
            License.customer_id == customer_id,
            License.platform == platform,
        )
    )
    row = existing.one()
    return ProvisionResult(license_key=row.license_key, created=False, notified=bool(row.notified))


async def mark_notified(session: AsyncSession, *, customer_id: int, platform: str, license_key: str) -> None:
    """Flag the license as delivered; scoped to the exact key so unrelated rows are untouched."""
    await session.execute(
        update(License)
        .where(
            License.customer_id == customer_id,
            License.platform == platform,
            License.license_key == license_key,
        )
        .values(notified=True, notified_at=datetime.now(UTC))
    )
    await session.commit()
