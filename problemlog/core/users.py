# problemlog/core/users.py
"""
FastAPI Users configuration and authentication setup.
Staff log in with their e-mail address; menu access is granted per permission.
"""
import logging
import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi_users import BaseUserManager, FastAPIUsers, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    CookieTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users.password import PasswordHelper
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.engine import get_session
from ..models.user import User
from ..utils.dates import utcnow
from .config import get_settings
from .constants import ActivityAction, MenuPermission, UserRole

logger = logging.getLogger(__name__)

_settings = get_settings()
SECRET = _settings.secret_key

ACCESS_TOKEN_COOKIE_NAME = "problemlog_access_token"
ACCESS_TOKEN_LIFETIME_SECONDS = _settings.access_token_lifetime_seconds

# --- Authentication Transports ---
# 1. Bearer Token Transport (for API access via Authorization header)
bearer_transport = BearerTransport(tokenUrl="auth/jwt/login")

# 2. Cookie Transport (for the browser console)
cookie_transport = CookieTransport(
    cookie_name=ACCESS_TOKEN_COOKIE_NAME,
    cookie_max_age=ACCESS_TOKEN_LIFETIME_SECONDS,
    cookie_httponly=True,
    cookie_secure=_settings.is_production,
    cookie_samesite="lax",
)


# --- JWT Strategy ---
def get_jwt_strategy() -> JWTStrategy:
    """Returns JWT strategy for token generation and validation"""
    return JWTStrategy(secret=SECRET, lifetime_seconds=ACCESS_TOKEN_LIFETIME_SECONDS)


auth_backend_jwt = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

auth_backend_cookie = AuthenticationBackend(
    name="cookie",
    transport=cookie_transport,
    get_strategy=get_jwt_strategy,
)


# --- User Manager ---
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    """
    Handles user lifecycle events: registration and login bookkeeping.
    """

    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info("User registered: %s (%s)", user.name, user.email)

    async def on_after_login(
        self, user: User, request: Optional[Request] = None, response=None
    ):
        """Records the login time and writes a LOGIN activity."""
        from ..services.activity_service import log_activity

        session = self.user_db.session
        user.last_login = utcnow()
        session.add(user)
        await session.commit()
        await session.refresh(user)
        logger.info("User logged in: %s", user.email)
        await log_activity(session, user, ActivityAction.LOGIN, "System", "User logged in successfully")


# --- Dependency Injectors ---
async def get_user_db(session: AsyncSession = Depends(get_session)):
    yield SQLAlchemyUserDatabase(session, User)


# --- Argon2 Password Helper ---
argon2_context = CryptContext(schemes=["argon2"], deprecated="auto")
password_helper = PasswordHelper(argon2_context)


async def get_user_manager(user_db=Depends(get_user_db)):
    yield UserManager(user_db, password_helper)


# --- FastAPI Users Instance ---
fastapi_users = FastAPIUsers[User, uuid.UUID](
    get_user_manager,
    [auth_backend_jwt, auth_backend_cookie],
)

current_active_user = fastapi_users.current_user(active=True)
current_superuser = fastapi_users.current_user(active=True, superuser=True)


# --- Permission-Based Access Control ---
def has_permission(user: User, permission: str) -> bool:
    if user.role == UserRole.SUPERADMIN.value or user.is_superuser:
        return True
    return permission in (user.permissions or [])


class PermissionChecker:
    """
    Dependency class to check that the current user may open a menu.
    Passing several permissions accepts any of them.

    Usage:
        @router.get("/locations")
        def list_locations(user: User = Depends(PermissionChecker(MenuPermission.LOCATIONS))):
            ...
    """

    def __init__(self, *permissions: MenuPermission):
        self.permissions = [p.value for p in permissions]

    def __call__(self, user: User = Depends(current_active_user)) -> User:
        if not any(has_permission(user, p) for p in self.permissions):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required permission: {', '.join(self.permissions)}",
            )
        return user


require_complaints = PermissionChecker(MenuPermission.COMPLAINTS)
require_dashboard = PermissionChecker(MenuPermission.DASHBOARD)
require_locations = PermissionChecker(MenuPermission.LOCATIONS)
require_users = PermissionChecker(MenuPermission.USERS)
require_settings = PermissionChecker(MenuPermission.SETTINGS)
require_log_activity = PermissionChecker(MenuPermission.LOG_ACTIVITY)
require_mail = PermissionChecker(MenuPermission.MAIL)
