from sqlalchemy import Column, Date, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from agencydesk.db.base import Base


class ClientService(Base):
    """
    A service sold to a client. Owned by the client and deleted with it.

    `deliverables` stores the tagged deliverables payload as JSON; `position`
    keeps the order services were added in.
    """
    __tablename__ = "client_services"

    id = Column(String(36), primary_key=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    main_category = Column(String(100), nullable=False)
    sub_package = Column(String(150), nullable=True)
    # Catalog entries the labels were resolved from; plain identifiers
    main_package_id = Column(String(36), nullable=True)
    sub_package_id = Column(String(36), nullable=True)
    price = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="in_progress", index=True)
    deliverables = Column(JSON, nullable=True)
    sales_owner_id = Column(String(36), nullable=True)
    assignee_ids = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    completed_at = Column(Date, nullable=True)

    client = relationship("Client", back_populates="services")

    def __repr__(self):
        return f"<ClientService(id={self.id}, client_id={self.client_id}, status={self.status})>"
