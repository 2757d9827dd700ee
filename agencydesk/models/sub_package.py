import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from agencydesk.db.base import Base


class SubPackage(Base):
    """A priced offer inside a main package."""
    __tablename__ = "sub_packages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    main_package_id = Column(
        String(36), ForeignKey("main_packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    name_en = Column(String(100), nullable=False)
    price = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    billing_type = Column(String(20), nullable=False, default="monthly")
    description = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    duration = Column(String(50), nullable=True)
    duration_en = Column(String(50), nullable=True)
    deliverables = Column(JSON, nullable=False, default=list)
    platforms = Column(JSON, nullable=False, default=list)
    features = Column(Text, nullable=True)
    features_en = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    main_package = relationship("MainPackage", back_populates="sub_packages")

    def __repr__(self):
        return f"<SubPackage(id={self.id}, name_en={self.name_en}, price={self.price})>"
