"""
SQLAlchemy models for OilFacts Bot.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class SessionRecord(Base):
    """Conversation session of one customer, stored as a JSON document."""

    __tablename__ = "sessions"

    customer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    state: Mapped[str] = mapped_column(String(32), nullable=False)

    # Denormalized for pay page lookup
    payment_order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    data: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("ix_sessions_payment_order_id", "payment_order_id"),
        Index("ix_sessions_updated_at", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<SessionRecord(customer_id='{self.customer_id}', state='{self.state}')>"
