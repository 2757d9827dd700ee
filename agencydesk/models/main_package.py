import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from agencydesk.db.base import Base


class MainPackage(Base):
    """
    Top-level entry of the package catalog (Social Media, Website, ...).

    Its English name is the `main_category` label of every service sold
    from it.
    """
    __tablename__ = "main_packages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    name_en = Column(String(100), nullable=False)
    icon = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    sub_packages = relationship(
        "SubPackage",
        back_populates="main_package",
        cascade="all, delete-orphan",
        order_by="SubPackage.order",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<MainPackage(id={self.id}, name_en={self.name_en})>"
