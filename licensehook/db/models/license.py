"""License model: at most one license per (customer, platform)."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from licensehook.db.base import Base


class License(Base):
    __tablename__ = "licenses"
    __table_args__ = (UniqueConstraint("customer_id", "platform", name="uq_licenses_customer_platform"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)  # nt, tv, dual
    license_key = Column(String(64), unique=True, nullable=False)
    status = Column(String(20), nullable=False, default="active")

    # Only fields mutated after creation
    notified = Column(Boolean, nullable=False, default=False)
    notified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
