"""
Pydantic schemas for invoices.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from agencydesk.core.currency import Currency


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class InvoiceItem(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(1, gt=0, allow_inf_nan=False)
    unit_price: float = Field(0, ge=0, allow_inf_nan=False)


class InvoiceBase(BaseModel):
    """Base schema for invoices"""
    invoice_number: str = Field(..., min_length=1, max_length=50)
    client_id: Optional[str] = None
    client_name: str = Field(..., min_length=1, max_length=150)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    currency: Currency = Currency.USD
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issue_date: date
    due_date: date
    paid_date: Optional[date] = None
    items: List[InvoiceItem] = Field(default_factory=list)
    notes: Optional[str] = None


class InvoiceCreate(InvoiceBase):
    pass


class InvoiceUpdate(BaseModel):
    client_name: Optional[str] = Field(None, min_length=1, max_length=150)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    status: Optional[InvoiceStatus] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    items: Optional[List[InvoiceItem]] = None
    notes: Optional[str] = None


class Invoice(InvoiceBase):
    """Schema for invoice output"""
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
