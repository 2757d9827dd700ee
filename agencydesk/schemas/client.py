"""
Pydantic schemas for clients and their services.

These models double as the domain types consumed by the computation core
(`agencydesk.core`): the store converts ORM rows into `Client` before any
status resolution or aggregation runs.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, ClassVar, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, EmailStr, Field, model_validator

from agencydesk.core.currency import Currency


class ClientKind(str, Enum):
    LEAD = "lead"
    CONFIRMED = "confirmed"


class ClientStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    FINISHED = "finished"
    ARCHIVED = "archived"


class ClientStage(str, Enum):
    """Sales pipeline stage for leads"""
    NEW = "new"
    CONTACTED = "contacted"
    PROPOSAL_SENT = "proposal_sent"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class ServiceStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    DELAYED = "delayed"
    COMPLETED = "completed"


# ==================== Deliverables ====================

class CounterDeliverables(BaseModel):
    """Deliverables tracked as done/total counter pairs."""
    COUNTERS: ClassVar[Tuple[str, ...]] = ()

    def counters(self) -> Iterator[Tuple[int, int]]:
        """Yield (done, total) for every tracked counter."""
        for name in self.COUNTERS:
            done = getattr(self, f"{name}_done")
            total = getattr(self, f"{name}_total")
            if done is None or total is None:
                continue
            yield done, total

    @model_validator(mode="after")
    def check_counters(self):
        for name in self.COUNTERS:
            done = getattr(self, f"{name}_done")
            total = getattr(self, f"{name}_total")
            if done is not None and total is not None and done > total:
                raise ValueError(f"{name}_done ({done}) exceeds {name}_total ({total})")
        return self


class SocialDeliverables(CounterDeliverables):
    COUNTERS: ClassVar[Tuple[str, ...]] = ("posts", "reels", "stories", "report")

    type: Literal["social"] = "social"
    posts_total: int = Field(0, ge=0)
    posts_done: int = Field(0, ge=0)
    reels_total: int = Field(0, ge=0)
    reels_done: int = Field(0, ge=0)
    stories_total: int = Field(0, ge=0)
    stories_done: int = Field(0, ge=0)
    report_total: Optional[int] = Field(None, ge=0)
    report_done: Optional[int] = Field(None, ge=0)


class LogoDeliverables(CounterDeliverables):
    COUNTERS: ClassVar[Tuple[str, ...]] = ("concepts", "revisions", "final_files")

    type: Literal["logo"] = "logo"
    concepts_total: int = Field(0, ge=0)
    concepts_done: int = Field(0, ge=0)
    revisions_total: int = Field(0, ge=0)
    revisions_done: int = Field(0, ge=0)
    final_files_total: int = Field(0, ge=0)
    final_files_done: int = Field(0, ge=0)


class WebsiteDeliverables(BaseModel):
    """Website projects are tracked as boolean milestones."""
    MILESTONES: ClassVar[Tuple[str, ...]] = (
        "requirements", "ui", "dev", "content", "qa", "launch"
    )

    type: Literal["website"] = "website"
    requirements_done: bool = False
    ui_done: bool = False
    dev_done: bool = False
    content_done: bool = False
    qa_done: bool = False
    launch_done: bool = False

    def counters(self) -> Iterator[Tuple[int, int]]:
        for name in self.MILESTONES:
            yield int(getattr(self, f"{name}_done")), 1


class CustomDeliverables(CounterDeliverables):
    COUNTERS: ClassVar[Tuple[str, ...]] = ("items",)

    type: Literal["custom"] = "custom"
    items_total: int = Field(0, ge=0)
    items_done: int = Field(0, ge=0)
    label: Optional[str] = Field(None, max_length=100)


Deliverables = Annotated[
    Union[SocialDeliverables, LogoDeliverables, WebsiteDeliverables, CustomDeliverables],
    Field(discriminator="type"),
]


# ==================== Services ====================

class ClientServiceBase(BaseModel):
    """Base schema for a service sold to a client"""
    main_category: str = Field(..., min_length=1, max_length=100)
    sub_package: Optional[str] = Field(None, max_length=100)
    main_package_id: Optional[str] = None
    sub_package_id: Optional[str] = None
    price: float = Field(0, ge=0, allow_inf_nan=False)
    currency: Currency = Currency.USD
    start_date: date
    end_date: date
    status: ServiceStatus = ServiceStatus.IN_PROGRESS
    deliverables: Optional[Deliverables] = None
    sales_owner_id: Optional[str] = None
    assignee_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClientServiceCreate(ClientServiceBase):
    """
    Schema for appending a service to a client.

    Either name the category directly or pick it from the package catalog
    with `main_package_id` / `sub_package_id`; catalog labels win.
    """
    main_category: Optional[str] = Field(None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def check_category(self):
        if not (self.main_category or self.main_package_id or self.sub_package_id):
            raise ValueError("main_category or a catalog package is required")
        return self


class ClientServiceUpdate(BaseModel):
    """Schema for patching a single service"""
    main_category: Optional[str] = Field(None, min_length=1, max_length=100)
    sub_package: Optional[str] = Field(None, max_length=100)
    main_package_id: Optional[str] = None
    sub_package_id: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ServiceStatus] = None
    deliverables: Optional[Deliverables] = None
    sales_owner_id: Optional[str] = None
    assignee_ids: Optional[List[str]] = None
    notes: Optional[str] = None


class ClientService(ClientServiceBase):
    """A persisted service"""
    id: str
    completed_at: Optional[date] = None

    class Config:
        from_attributes = True


# ==================== Clients ====================

class ClientBase(BaseModel):
    """Base schema for client records (leads and confirmed clients)"""
    kind: ClientKind = ClientKind.CONFIRMED
    status: ClientStatus = ClientStatus.ACTIVE
    stage: Optional[ClientStage] = None
    name: str = Field(..., min_length=1, max_length=150)
    company: Optional[str] = Field(None, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    country: Optional[str] = Field(None, max_length=80)
    sales_owner_id: Optional[str] = None
    account_manager_id: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema for creating a client, optionally with its first services"""
    services: List[ClientServiceCreate] = Field(default_factory=list)


class ClientUpdate(BaseModel):
    """Schema for updating client attributes; services are patched individually"""
    kind: Optional[ClientKind] = None
    status: Optional[ClientStatus] = None
    stage: Optional[ClientStage] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    company: Optional[str] = Field(None, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    country: Optional[str] = Field(None, max_length=80)
    sales_owner_id: Optional[str] = None
    account_manager_id: Optional[str] = None


class Client(ClientBase):
    """A client with its owned services, in insertion order"""
    id: str
    email: Optional[str] = None
    created_at: datetime
    completed_date: Optional[date] = None
    services: List[ClientService] = Field(default_factory=list)

    class Config:
        from_attributes = True
