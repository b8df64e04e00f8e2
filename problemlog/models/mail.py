# problemlog/models/mail.py
"""
Internal mail between staff members.

One row per message. Per-user state (read, starred, deleted) is kept as lists
of user ids on the row itself, so a message sent to five people is still a
single row. Sender and recipients are snapshots taken when the mail is saved.
"""

import uuid as uuid_pkg
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow

NO_SUBJECT = "(No Subject)"


class Mail(SQLModel, table=True):
    __tablename__ = "mails"

    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True)

    sender_id: str = Field(index=True, max_length=64)
    sender_name: str = Field(max_length=150)
    sender_email: str = Field(max_length=320)
    sender_avatar: str = Field(default="", max_length=500)

    # [{"id", "name", "email"}]
    recipients: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    cc: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    subject: str = Field(default=NO_SUBJECT, max_length=255)
    content: str = Field(default="")
    timestamp: datetime = Field(default_factory=utcnow, index=True)
    is_draft: bool = Field(default=False, index=True)

    # User ids
    read_by: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    starred_by: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    deleted_by: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    purged_by: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # [{"name", "size", "type", "url"}]
    attachments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
