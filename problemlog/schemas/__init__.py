"""Pydantic schemas package"""
from .complaint import (
    CommentCreate,
    CommentRead,
    ComplaintCreate,
    ComplaintRead,
    ComplaintRow,
    ComplaintUpdate,
    TerminalOption,
)
from .user import UserCreate, UserRead, UserUpdate

__all__ = [
    "CommentCreate",
    "CommentRead",
    "ComplaintCreate",
    "ComplaintRead",
    "ComplaintRow",
    "ComplaintUpdate",
    "TerminalOption",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
