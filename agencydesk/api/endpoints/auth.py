"""
    Authentication, Session and Preference Endpoints
    Endpoints:
    - /token: OAuth2 password flow used by the Swagger UI.
    - /login: Authenticates with a JSON body, returns a bearer token and sets the access_token cookie.
    - /logout: Clears the access_token cookie.
    - /me: Returns the current user with role and effective permissions.
    - /navigation: Navigation items visible to the current user.
    - /preferences: Reads and updates the persisted display language and currency.
    - /users: Creates a staff user (admin only).
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_auth_user, get_current_user, get_db, require_admin
from agencydesk.core.config import settings
from agencydesk.core.logging import get_logger
from agencydesk.core.permissions import visible_nav_items
from agencydesk.core.security import create_access_token
from agencydesk.models.user import User
from agencydesk.schemas.auth import (
    AuthUser,
    Login,
    NavItemOut,
    Preferences,
    PreferencesUpdate,
    Token,
    UserCreate,
)
from agencydesk.services.users import (
    authenticate,
    create_user,
    get_preferences,
    get_user_by_email,
    to_auth_user,
    update_preferences,
)

logger = get_logger(__name__)

router = APIRouter()


def _issue_token(user: User, response: Response) -> Token:
    access_token = create_access_token(data={"sub": str(user.id)})
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE,
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return Token(access_token=access_token, user=to_auth_user(user))


@router.post("/token", response_model=Token)
async def oauth2_token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """
    Standard OAuth2 endpoint used by the Swagger UI "Authorize" button.

    The OAuth2 'username' field carries the user's email.
    """
    user = await authenticate(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(user, response)


@router.post("/login", response_model=Token)
async def login(login_data: Login, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate with a JSON body. The token is returned and also set as an HTTP-only cookie."""
    user = await authenticate(db, login_data.email, login_data.password)
    if user is None:
        logger.info(f"Failed login for {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _issue_token(user, response)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE)
    return {"message": "Logout successful"}


@router.get("/me", response_model=AuthUser)
async def read_me(user: AuthUser = Depends(get_auth_user)):
    return user


@router.get("/navigation", response_model=List[NavItemOut])
async def navigation(user: AuthUser = Depends(get_auth_user)):
    return [NavItemOut(path=item.path, label_key=item.label_key) for item in visible_nav_items(user)]


@router.get("/preferences", response_model=Preferences)
async def read_preferences(current_user: User = Depends(get_current_user)):
    return get_preferences(current_user)


@router.put("/preferences", response_model=Preferences)
async def write_preferences(
    data: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await update_preferences(db, current_user, data)


@router.post("/users", response_model=AuthUser, status_code=status.HTTP_201_CREATED)
async def register_user(
    data: UserCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    if await get_user_by_email(db, data.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = await create_user(db, data)
    logger.info(f"User {user.id} created by admin {admin.id} with role {user.role}")
    return to_auth_user(user)
