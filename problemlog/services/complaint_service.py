# problemlog/services/complaint_service.py
"""
Complaint repository: complaints, their comment threads and the per-viewer
"last seen" counts behind the unread badges.
"""
import logging
import random
import uuid as uuid_pkg
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import desc, func, select

from ..core.constants import COMPLAINT_TARGET, ActivityAction
from ..core.errors import PersistenceError
from ..models.complaint import Complaint, ComplaintComment, ComplaintCommentView
from ..models.user import User
from ..utils.dates import to_naive_utc
from .activity_service import log_activity

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "nasabah",
    "terminal_id",
    "waktu_trx",
    "waktu_aduan",
    "jenis_aduan",
    "severity",
    "pengecekan",
    "status",
)


def generate_ticket_number(rng: Optional[random.Random] = None) -> str:
    """
    Human ticket number, TKT- followed by five random digits.
    Uses the module-level generator unless `rng` is given.
    Not checked against existing tickets: two complaints may share a number.
    """
    return f"TKT-{(rng or random).randint(10000, 99999)}"


def _clean_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
    for key in ("waktu_trx", "waktu_aduan"):
        if key in fields:
            fields[key] = to_naive_utc(fields[key])
    for key in ("severity", "pengecekan", "status"):
        if key in fields and hasattr(fields[key], "value"):
            fields[key] = fields[key].value
    return fields


class ComplaintService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, what: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to save %s: %s", what, e)
            raise PersistenceError(f"Gagal menyimpan {what}.") from e

    # --- Reads ---

    async def list_complaints(self) -> List[Complaint]:
        """All complaints with their comments, newest complaint time first."""
        query = (
            select(Complaint)
            .options(selectinload(Complaint.comments))
            .order_by(desc(Complaint.waktu_aduan))
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def get_complaint(self, complaint_id: uuid_pkg.UUID) -> Complaint:
        query = (
            select(Complaint)
            .where(Complaint.id == complaint_id)
            .options(selectinload(Complaint.comments))
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(query)
        complaint = result.first()
        if not complaint:
            raise FileNotFoundError("Aduan tidak ditemukan.")
        return complaint

    async def count_comments(self, complaint_id: uuid_pkg.UUID) -> int:
        query = select(func.count()).select_from(ComplaintComment).where(
            ComplaintComment.complaint_id == complaint_id
        )
        result = await self.session.exec(query)
        return result.one() or 0

    # --- Writes ---

    async def create_complaint(self, data: Dict[str, Any], actor: User) -> Complaint:
        """Stores a new complaint under a freshly generated ticket number."""
        complaint = Complaint(no_tiket=generate_ticket_number(), **_clean_fields(data))
        self.session.add(complaint)
        await self._commit("aduan")

        # The creator has seen the (empty) thread
        await self.mark_seen(complaint.id, str(actor.id), 0)
        await log_activity(
            self.session,
            actor,
            ActivityAction.CREATE,
            COMPLAINT_TARGET,
            f"Membuat aduan baru {complaint.no_tiket} - {complaint.nasabah}",
        )
        logger.info("Complaint %s created by %s", complaint.no_tiket, actor.email)
        return await self.get_complaint(complaint.id)

    async def update_complaint(
        self, complaint_id: uuid_pkg.UUID, data: Dict[str, Any], actor: User
    ) -> Complaint:
        """Partial update of the core fields. Comments are never touched here."""
        complaint = await self.get_complaint(complaint_id)
        for key, value in _clean_fields(data).items():
            setattr(complaint, key, value)
        self.session.add(complaint)
        await self._commit("aduan")

        await log_activity(
            self.session,
            actor,
            ActivityAction.UPDATE,
            COMPLAINT_TARGET,
            f"Memperbarui data aduan {complaint.nasabah}",
        )
        return await self.get_complaint(complaint_id)

    async def append_comment(
        self, complaint_id: uuid_pkg.UUID, text: str, actor: User
    ) -> ComplaintComment:
        """
        Appends one comment with a snapshot of the author and returns the stored
        row. The poster's own comment is marked as seen straight away.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Komentar tidak boleh kosong.")

        complaint = await self.get_complaint(complaint_id)
        comment = ComplaintComment(
            complaint_id=complaint.id,
            user_id=str(actor.id),
            user_name=actor.name,
            user_role=actor.role,
            avatar=actor.avatar,
            text=text,
        )
        self.session.add(comment)
        await self._commit("komentar")
        await self.session.refresh(comment)

        await self.mark_seen(complaint.id, str(actor.id), await self.count_comments(complaint.id))
        await log_activity(
            self.session,
            actor,
            ActivityAction.UPDATE,
            COMPLAINT_TARGET,
            f"Menambahkan komentar pada tiket {complaint.no_tiket}",
        )
        return comment

    # --- Read/unread bookkeeping ---

    async def get_seen_counts(self, viewer_id: str) -> Dict[str, int]:
        """complaint id -> comment count the viewer had seen."""
        query = select(ComplaintCommentView).where(ComplaintCommentView.user_id == viewer_id)
        result = await self.session.exec(query)
        return {str(v.complaint_id): v.last_seen_count for v in result.all()}

    async def mark_seen(self, complaint_id: uuid_pkg.UUID, viewer_id: str, count: int) -> None:
        view = await self.session.get(ComplaintCommentView, (viewer_id, complaint_id))
        if view:
            view.last_seen_count = count
        else:
            view = ComplaintCommentView(
                user_id=viewer_id, complaint_id=complaint_id, last_seen_count=count
            )
        self.session.add(view)
        await self._commit("status baca")

    async def open_thread(self, complaint_id: uuid_pkg.UUID, viewer: User) -> Complaint:
        """Returns the complaint and snapshots its comment count as seen by `viewer`."""
        complaint = await self.get_complaint(complaint_id)
        await self.mark_seen(complaint.id, str(viewer.id), len(complaint.comments))
        return complaint
