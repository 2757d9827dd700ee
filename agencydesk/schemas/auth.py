"""
Pydantic schemas for authentication and user preferences.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from agencydesk.core.currency import Currency
from agencydesk.core.permissions import Permission, UserRole


class Language(str, Enum):
    AR = "ar"
    EN = "en"

    @property
    def direction(self) -> str:
        return "rtl" if self is Language.AR else "ltr"


class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthUser(BaseModel):
    """Current user as exposed by /api/auth/me"""
    id: int
    email: str
    name: str
    role: UserRole
    permissions: List[Permission] = Field(default_factory=list)
    display_currency: Currency = Currency.USD
    language: Language = Language.AR


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AuthUser


class Preferences(BaseModel):
    language: Language
    direction: str
    currency: Currency


class PreferencesUpdate(BaseModel):
    language: Optional[Language] = None
    currency: Optional[Currency] = None


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.VIEWER
    permissions: Optional[List[Permission]] = None


class NavItemOut(BaseModel):
    path: str
    label_key: str
