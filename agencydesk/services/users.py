"""
User lookups, creation and preference updates.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.config import settings
from agencydesk.core.currency import Currency, parse_currency
from agencydesk.core.permissions import UserRole, effective_permissions
from agencydesk.core.security import get_password_hash, verify_password
from agencydesk.models.user import User
from agencydesk.schemas.auth import AuthUser, Language, Preferences, PreferencesUpdate, UserCreate


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the active user matching the credentials, or None."""
    user = await get_user_by_email(db, email)
    if user is None or not user.is_active or not verify_password(password, user.password):
        return None
    return user


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    user = User(
        name=data.name,
        email=data.email.lower(),
        password=get_password_hash(data.password),
        role=data.role.value,
        permissions=[p.value for p in data.permissions] if data.permissions is not None else None,
        display_currency=settings.DEFAULT_CURRENCY,
        language=settings.DEFAULT_LANGUAGE,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def to_auth_user(user: User) -> AuthUser:
    """Expose a user with its effective permission set."""
    role = UserRole(user.role)
    return AuthUser(
        id=user.id,
        email=user.email,
        name=user.name or "",
        role=role,
        permissions=sorted(effective_permissions(role, user.permissions), key=lambda p: p.value),
        display_currency=user.display_currency or settings.DEFAULT_CURRENCY,
        language=user.language or settings.DEFAULT_LANGUAGE,
    )


def get_preferences(user: User) -> Preferences:
    language = Language(user.language or settings.DEFAULT_LANGUAGE)
    return Preferences(
        language=language,
        direction=language.direction,
        currency=parse_currency(user.display_currency or settings.DEFAULT_CURRENCY),
    )


async def update_preferences(db: AsyncSession, user: User, data: PreferencesUpdate) -> Preferences:
    if data.language is not None:
        user.language = data.language.value
    if data.currency is not None:
        user.display_currency = Currency(data.currency).value
    await db.commit()
    return get_preferences(user)
