"""Event model: append-only audit log of webhooks and internal milestones."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from licensehook.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(255), nullable=False, index=True)
    body = Column(Text, nullable=False, default="{}")  # raw JSON text

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    # NO updated_at -- events are immutable (append-only)
