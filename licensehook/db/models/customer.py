"""Customer model: one row per purchaser e-mail."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String

from licensehook.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, nullable=False)  # trimmed, lower-cased

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
