import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, String, Text

from agencydesk.db.base import Base


class Employee(Base):
    """
    Agency staff member, as assigned to services and goals.

    Distinct from `User`: an employee has no login of their own. A user whose
    email matches an employee may edit that employee's profile.
    """
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    name_en = Column(String(100), nullable=True)
    email = Column(String(150), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), nullable=False)
    role_ar = Column(String(50), nullable=True)
    department = Column(String(100), nullable=True)
    job_title = Column(String(100), nullable=True)
    profile_image = Column(String(255), nullable=True)
    # Compensation, visible to employee managers only
    salary_type = Column(String(20), nullable=False, default="monthly")
    salary_amount = Column(Float, nullable=True)
    rate = Column(Float, nullable=True)
    rate_type = Column(String(20), nullable=True)
    salary_currency = Column(String(3), nullable=False, default="USD")
    salary_notes = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Employee(id={self.id}, email={self.email})>"
