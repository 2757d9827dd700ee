"""
Pydantic schemas for monthly goals.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from agencydesk.core.currency import Currency


class GoalType(str, Enum):
    FINANCIAL = "financial"
    CLIENTS = "clients"
    LEADS = "leads"
    PROJECTS = "projects"
    PERFORMANCE = "performance"  # target is a percentage
    CUSTOM = "custom"


class GoalStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ACHIEVED = "achieved"
    FAILED = "failed"


class GoalBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: GoalType
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2020)
    target: float = Field(..., ge=0, allow_inf_nan=False)
    current: float = Field(0, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    icon: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    status: GoalStatus = GoalStatus.NOT_STARTED
    responsible_person: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)


class GoalCreate(GoalBase):
    pass


class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    type: Optional[GoalType] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2020)
    target: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    current: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    icon: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    status: Optional[GoalStatus] = None
    responsible_person: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)


class Goal(GoalBase):
    id: str
    progress: int = 0  # percent of target reached, capped at 100
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoalSummary(BaseModel):
    total: int
    achieved: int
    in_progress: int
    completion_rate: int
