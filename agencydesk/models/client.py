import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String
from sqlalchemy.orm import relationship

from agencydesk.db.base import Base


class Client(Base):
    """
    A lead or confirmed client.

    Attributes:
        kind: "lead" or "confirmed"
        status: stored lifecycle status, re-resolved on every service change
        stage: pipeline stage, used for leads
        completed_date: set when the client is promoted to finished
    """
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    kind = Column(String(20), nullable=False, default="lead", index=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    stage = Column(String(20), nullable=True)
    name = Column(String(150), nullable=False, index=True)
    company = Column(String(150), nullable=True)
    email = Column(String(150), nullable=True)
    phone = Column(String(50), nullable=True)
    country = Column(String(100), nullable=True)
    # Weak references to users, kept as plain identifiers
    sales_owner_id = Column(String(36), nullable=True)
    account_manager_id = Column(String(36), nullable=True)
    completed_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    services = relationship(
        "ClientService",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientService.position",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Client(id={self.id}, name={self.name}, status={self.status})>"
