# problemlog/schemas/complaint.py
"""
Pydantic schemas for complaints and their comment threads.
"""
import uuid as uuid_pkg
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints

from ..core.constants import ComplaintStatus, Pengecekan, Severity

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ComplaintCreate(BaseModel):
    """Complaint form. Severity, validation and status have creation defaults."""

    nasabah: RequiredText
    terminal_id: RequiredText
    waktu_trx: datetime
    waktu_aduan: datetime
    jenis_aduan: str = ""
    severity: Severity = Severity.MEDIUM
    pengecekan: Pengecekan = Pengecekan.VALID
    status: ComplaintStatus = ComplaintStatus.OPEN


class ComplaintUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    nasabah: Optional[RequiredText] = None
    terminal_id: Optional[RequiredText] = None
    waktu_trx: Optional[datetime] = None
    waktu_aduan: Optional[datetime] = None
    jenis_aduan: Optional[str] = None
    severity: Optional[Severity] = None
    pengecekan: Optional[Pengecekan] = None
    status: Optional[ComplaintStatus] = None


class CommentCreate(BaseModel):
    text: RequiredText


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    user_name: str
    user_role: str
    avatar: str
    text: str
    timestamp: datetime
    is_own: bool = False


class ComplaintRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid_pkg.UUID
    no_tiket: str
    nasabah: str
    terminal_id: str
    waktu_trx: datetime
    waktu_aduan: datetime
    jenis_aduan: str
    severity: str
    pengecekan: str
    status: str
    comments: List[CommentRead] = []


class ComplaintRow(ComplaintRead):
    """Complaint list entry with the fields derived for one viewer."""

    downtime: str
    comment_count: int
    unread_count: int
    waktu_trx_label: str
    waktu_aduan_label: str


class TerminalOption(BaseModel):
    terminal_id: str
    nama_lokasi: str
