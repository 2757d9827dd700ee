"""
Pydantic schemas for employees.
"""

from datetime import date, datetime
from enum import Enum
from typing import ClassVar, FrozenSet, Optional

from pydantic import BaseModel, EmailStr, Field

from agencydesk.core.currency import Currency


class SalaryType(str, Enum):
    MONTHLY = "monthly"
    PER_PROJECT = "per_project"


class RateType(str, Enum):
    PER_PROJECT = "per_project"
    PER_TASK = "per_task"
    PER_SERVICE = "per_service"


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    role: str = Field(..., min_length=1, max_length=50)
    role_ar: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=255)
    salary_type: SalaryType = SalaryType.MONTHLY
    salary_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rate_type: Optional[RateType] = None
    salary_currency: Currency = Currency.USD
    salary_notes: Optional[str] = None
    start_date: date
    is_active: bool = True


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    """
    Partial employee update.

    ADMIN_FIELDS may only be changed by employee managers; an employee
    editing their own profile has them dropped from the patch.
    """
    ADMIN_FIELDS: ClassVar[FrozenSet[str]] = frozenset({
        "salary_type", "salary_amount", "rate", "rate_type", "salary_currency", "salary_notes",
        "role", "role_ar", "department", "job_title", "is_active",
    })

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field(None, min_length=1, max_length=50)
    role_ar: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=255)
    salary_type: Optional[SalaryType] = None
    salary_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rate_type: Optional[RateType] = None
    salary_currency: Optional[Currency] = None
    salary_notes: Optional[str] = None
    start_date: Optional[date] = None
    is_active: Optional[bool] = None


class EmployeePublic(BaseModel):
    """Employee without compensation details"""
    id: str
    name: str
    name_en: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: str
    role_ar: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    profile_image: Optional[str] = None
    start_date: date
    is_active: bool = True

    class Config:
        from_attributes = True


class Employee(EmployeePublic):
    salary_type: SalaryType
    salary_amount: Optional[float] = None
    rate: Optional[float] = None
    rate_type: Optional[RateType] = None
    salary_currency: Currency
    salary_notes: Optional[str] = None
    created_at: Optional[datetime] = None
