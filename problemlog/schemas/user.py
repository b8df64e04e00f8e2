# problemlog/schemas/user.py
"""
Pydantic schemas for FastAPI Users.
These schemas control what data is sent/received via the API.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi_users import schemas

from ..core.constants import MenuPermission, UserRole


class UserRead(schemas.BaseUser[uuid.UUID]):
    """
    Schema for reading user data (API responses).
    """

    name: str
    role: str
    avatar: str
    permissions: List[str]
    last_login: Optional[datetime] = None


class UserCreate(schemas.BaseUserCreate):
    """
    Schema for creating new users.
    When `permissions` is omitted the role defaults are granted.
    """

    name: str
    role: UserRole = UserRole.HELPDESK
    permissions: Optional[List[MenuPermission]] = None


class UserUpdate(schemas.BaseUserUpdate):
    """
    Schema for updating existing users.
    All fields are optional; an empty password keeps the current one.
    """

    name: Optional[str] = None
    role: Optional[UserRole] = None
    permissions: Optional[List[MenuPermission]] = None
    disabled: Optional[bool] = None
