"""
Pydantic schemas for finance transactions (income and expenses).
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from agencydesk.core.currency import Currency


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class FinanceTransactionBase(BaseModel):
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    currency: Currency = Currency.USD
    description: str = Field("", max_length=255)
    date: datetime.date
    client_id: Optional[str] = None
    service_id: Optional[str] = None
    notes: Optional[str] = None


class FinanceTransactionCreate(FinanceTransactionBase):
    pass


class FinanceTransaction(FinanceTransactionBase):
    id: str

    class Config:
        from_attributes = True


class FinanceTransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime.date] = None
    client_id: Optional[str] = None
    service_id: Optional[str] = None
    notes: Optional[str] = None
