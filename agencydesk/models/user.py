from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String

from agencydesk.db.base import Base


class User(Base):
    """
    Staff user.

    `permissions` holds an explicit permission list; NULL means the user
    gets the default permissions of their role.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(150), nullable=False)
    role = Column(String(20), nullable=False, default="viewer")
    permissions = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Persisted display preferences
    display_currency = Column(String(3), nullable=False, default="USD")
    language = Column(String(2), nullable=False, default="ar")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
