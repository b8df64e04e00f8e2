# problemlog/models/complaint.py
"""
Complaint (ticket) models: the complaint row, its comment thread and the
per-viewer "last seen" bookkeeping used for unread badges.
"""

import uuid as uuid_pkg
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from ..utils.dates import utcnow


class Complaint(SQLModel, table=True):
    """
    A customer- or internally-raised incident tied to a terminal.
    `terminal_id` is a plain string; it is not a foreign key to locations.
    """

    __tablename__ = "complaints"

    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True)
    no_tiket: str = Field(index=True, max_length=20)
    nasabah: str = Field(nullable=False, max_length=150)
    terminal_id: str = Field(index=True, max_length=50)
    waktu_trx: datetime
    waktu_aduan: datetime = Field(index=True)
    jenis_aduan: str = Field(default="", max_length=255)
    severity: str = Field(default="MEDIUM", max_length=10)
    pengecekan: str = Field(default="VALID", max_length=20)
    status: str = Field(default="OPEN", index=True, max_length=20)

    # Insertion order is the primary key order of the comments
    comments: List["ComplaintComment"] = Relationship(
        back_populates="complaint",
        sa_relationship_kwargs={"order_by": "ComplaintComment.id"},
    )


class ComplaintComment(SQLModel, table=True):
    """
    One message in a complaint thread. Author fields are a snapshot taken at
    post time. Comments are append-only.
    """

    __tablename__ = "complaint_comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    complaint_id: uuid_pkg.UUID = Field(foreign_key="complaints.id", index=True)

    user_id: str = Field(max_length=64)
    user_name: str = Field(max_length=150)
    user_role: str = Field(max_length=50)
    avatar: str = Field(default="", max_length=500)

    text: str = Field(nullable=False)
    timestamp: datetime = Field(default_factory=utcnow)

    complaint: Optional[Complaint] = Relationship(back_populates="comments")


class ComplaintCommentView(SQLModel, table=True):
    """How many comments of a complaint a given user had seen last time."""

    __tablename__ = "complaint_comment_views"

    user_id: str = Field(primary_key=True, max_length=64)
    complaint_id: uuid_pkg.UUID = Field(primary_key=True, foreign_key="complaints.id")
    last_seen_count: int = Field(default=0)
