# problemlog/models/user.py
"""
User model for FastAPI Users with SQLModel.
Combines FastAPI Users base fields with the back-office staff fields.
"""

import uuid as uuid_pkg
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def avatar_url_for(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


class User(SQLModel, table=True):
    """
    User model combining FastAPI Users authentication fields with staff fields.

    FastAPI Users provides minimal required fields, we add:
    - name: display name shown in comments and activity logs
    - role: staff role (Super Admin, Helpdesk, ...)
    - avatar: avatar URL derived from the name
    - permissions: menu permissions granted to the user
    - last_login: timestamp of the last successful login
    """

    __tablename__ = "users"

    # FastAPI Users required fields
    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False, max_length=320)
    hashed_password: str = Field(nullable=False, max_length=1024)
    is_active: bool = Field(default=True, nullable=False)
    is_superuser: bool = Field(default=False, nullable=False)
    is_verified: bool = Field(default=False, nullable=False)

    # Custom fields
    name: str = Field(nullable=False, max_length=150)
    role: str = Field(default="Helpdesk", max_length=50)
    avatar: str = Field(default="", max_length=500)
    permissions: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    last_login: Optional[datetime] = Field(default=None)

    @property
    def disabled(self) -> bool:
        return not self.is_active
