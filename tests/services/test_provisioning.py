"""Tests for customer/subscription upserts and atomic license provisioning (SQLite)."""

import asyncio

import pytest
from sqlalchemy import select

from licensehook.db.models.customer import Customer
from licensehook.db.models.license import License
from licensehook.db.models.subscription import Subscription
from licensehook.domain.license_keys import LICENSE_KEY_ALPHABET
from licensehook.services.provisioning import (
    ProvisionResult,
    mark_notified,
    provision_license,
    upsert_customer,
    upsert_subscription,
)
from tests.helpers import all_rows, count_rows

pytestmark = pytest.mark.integration


async def test_upsert_customer_is_idempotent(db):
    async with db() as session:
        first = await upsert_customer(session, "a@x.com")
        second = await upsert_customer(session, "a@x.com")

    assert first is not None
    assert first == second
    assert await count_rows(Customer) == 1


async def test_upsert_customer_distinct_emails_get_distinct_ids(db):
    async with db() as session:
        a = await upsert_customer(session, "a@x.com")
        b = await upsert_customer(session, "b@x.com")

    assert a != b
    assert await count_rows(Customer) == 2


async def test_upsert_subscription_last_write_wins(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        for status, price in [("pending", "price_nt_monthly"), ("completed", "price_tv_monthly"), ("past_due", None)]:
            await upsert_subscription(
                session,
                customer_id=customer_id,
                transaction_id="tx_1",
                product_label="nt" if price is None else price.split("_")[1],
                price_id=price,
                status=status,
            )

    rows = await all_rows(Subscription)
    assert len(rows) == 1
    assert rows[0].status == "past_due"
    assert rows[0].price_id is None
    assert rows[0].product_label == "nt"
    assert rows[0].paddle_transaction_id == "tx_1"


async def test_provision_license_creates_once(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        results = [
            await provision_license(session, customer_id=customer_id, platform="nt")
            for _ in range(5)
        ]

    assert results[0].created is True
    assert all(r.created is False for r in results[1:])
    assert len({r.license_key for r in results}) == 1
    assert await count_rows(License) == 1

    (license_row,) = await all_rows(License)
    assert license_row.status == "active"
    assert license_row.notified is False
    assert license_row.notified_at is None
    assert len(license_row.license_key) == 24
    assert set(license_row.license_key) <= set(LICENSE_KEY_ALPHABET)


async def test_provision_license_per_platform(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        nt = await provision_license(session, customer_id=customer_id, platform="nt")
        dual = await provision_license(session, customer_id=customer_id, platform="dual")

    assert nt.created and dual.created
    assert nt.license_key != dual.license_key
    assert await count_rows(License) == 2


async def test_provision_license_respects_key_length(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        result = await provision_license(session, customer_id=customer_id, platform="tv", key_length=32)

    assert len(result.license_key) == 32


async def test_concurrent_provisioning_yields_single_license(db):
    """Concurrent deliveries for one (customer, platform) pair cannot create two licenses."""
    async with db() as session:
        customer_id = await upsert_customer(session, "race@x.com")

    async def provision():
        async with db() as session:
            return await provision_license(session, customer_id=customer_id, platform="nt")

    results = await asyncio.gather(*(provision() for _ in range(5)))

    assert sum(r.created for r in results) == 1
    assert len({r.license_key for r in results}) == 1
    assert await count_rows(License) == 1


async def test_mark_notified_scoped_to_license_key(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        nt = await provision_license(session, customer_id=customer_id, platform="nt")
        tv = await provision_license(session, customer_id=customer_id, platform="tv")

        await mark_notified(session, customer_id=customer_id, platform="nt", license_key="not-the-key")
        await mark_notified(session, customer_id=customer_id, platform="nt", license_key=nt.license_key)

        rows = {
            row.platform: row
            for row in (await session.execute(select(License))).scalars()
        }

    assert rows["nt"].notified is True
    assert rows["nt"].notified_at is not None
    assert rows["tv"].notified is False
    assert rows["tv"].license_key == tv.license_key


async def test_existing_unnotified_license_still_needs_notify(db):
    async with db() as session:
        customer_id = await upsert_customer(session, "a@x.com")
        await provision_license(session, customer_id=customer_id, platform="nt")
        again = await provision_license(session, customer_id=customer_id, platform="nt")

    assert again.created is False
    assert again.notified is False
    assert again.needs_notify is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "created, notified, expected",
    [(True, False, True), (False, False, True), (False, True, False)],
)
def test_needs_notify(created, notified, expected):
    assert ProvisionResult(license_key="k", created=created, notified=notified).needs_notify is expected
