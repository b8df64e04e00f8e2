import uuid as uuid_pkg
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class MailRecipient(BaseModel):
    id: str
    name: str
    email: str


class MailAttachment(BaseModel):
    name: str
    size: int = Field(ge=0)
    type: str = "application/octet-stream"
    url: str

    @field_validator("url")
    @classmethod
    def must_be_uploaded(cls, value: str) -> str:
        if not value.startswith("/uploads/mail/"):
            raise ValueError("Lampiran harus diunggah lewat /api/mail/attachments")
        return value


class MailCompose(BaseModel):
    """Compose form. `draft_id` sends or overwrites an existing draft."""

    to: List[uuid_pkg.UUID] = []
    cc: List[uuid_pkg.UUID] = []
    subject: str = ""
    content: str = ""
    attachments: List[MailAttachment] = []
    draft_id: Optional[uuid_pkg.UUID] = None


class MailRead(BaseModel):
    id: uuid_pkg.UUID
    sender_id: str
    sender_name: str
    sender_email: str
    sender_avatar: str
    recipients: List[MailRecipient]
    cc: List[MailRecipient]
    subject: str
    content: str
    timestamp: datetime
    timestamp_label: str
    is_draft: bool
    is_read: bool
    is_starred: bool
    attachments: List[MailAttachment]


class MailCounts(BaseModel):
    unread: int
    drafts: int


class MailReply(BaseModel):
    to: List[str]
    cc: List[str]
    subject: str
    content: str
