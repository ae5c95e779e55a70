"""Subscription model: one row per Paddle transaction, last write wins."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from licensehook.db.base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    paddle_transaction_id = Column(String(255), unique=True, nullable=False)

    product_label = Column(String(20), nullable=False)  # nt, tv, dual, unknown
    price_id = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
