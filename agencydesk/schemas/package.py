"""
Pydantic schemas for the package catalog.

Main packages group priced sub-packages. Users without package management
rights see sub-packages without their price.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from agencydesk.core.currency import Currency


class BillingType(str, Enum):
    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# ==================== Main packages ====================

class MainPackageBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field(..., min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    description_en: Optional[str] = None
    order: int = 0
    is_active: bool = True


class MainPackageCreate(MainPackageBase):
    pass


class MainPackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    description_en: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class MainPackage(MainPackageBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== Sub packages ====================

class SubPackageBase(BaseModel):
    main_package_id: str
    name: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    currency: Currency = Currency.USD
    billing_type: BillingType = BillingType.MONTHLY
    description: Optional[str] = None
    description_en: Optional[str] = None
    duration: Optional[str] = Field(None, max_length=50)
    duration_en: Optional[str] = Field(None, max_length=50)
    deliverables: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    features: Optional[str] = None
    features_en: Optional[str] = None
    order: int = 0
    is_active: bool = True


class SubPackageCreate(SubPackageBase):
    pass


class SubPackageUpdate(BaseModel):
    """Moving a sub-package to another main package is allowed"""
    main_package_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    billing_type: Optional[BillingType] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    duration: Optional[str] = Field(None, max_length=50)
    duration_en: Optional[str] = Field(None, max_length=50)
    deliverables: Optional[List[str]] = None
    platforms: Optional[List[str]] = None
    features: Optional[str] = None
    features_en: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class SubPackagePublic(BaseModel):
    """Sub-package without pricing"""
    id: str
    main_package_id: str
    name: str
    name_en: str
    billing_type: BillingType
    description: Optional[str] = None
    description_en: Optional[str] = None
    duration: Optional[str] = None
    duration_en: Optional[str] = None
    deliverables: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    features: Optional[str] = None
    features_en: Optional[str] = None
    order: int = 0
    is_active: bool = True

    class Config:
        from_attributes = True


class SubPackage(SubPackagePublic):
    price: float
    currency: Currency
    created_at: Optional[datetime] = None
