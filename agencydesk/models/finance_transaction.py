import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, String, Text

from agencydesk.db.base import Base


class FinanceTransaction(Base):
    """Income or expense entry, optionally linked to a client service."""
    __tablename__ = "finance_transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(String(10), nullable=False, index=True)  # income | expense
    category = Column(String(100), nullable=False)
    amount = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    description = Column(String(255), nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    client_id = Column(String(36), nullable=True)
    service_id = Column(String(36), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
