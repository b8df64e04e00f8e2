# problemlog/services/mail_service.py
"""
Internal mail: folders, per-user read/star/trash state, drafts, replies and
attachment uploads.
"""
import logging
import os
import uuid as uuid_pkg
from typing import Any, Dict, Iterable, List, Optional, Set

import aiofiles
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import desc, select

from ..core.constants import ActivityAction
from ..core.errors import PersistenceError
from ..models.mail import NO_SUBJECT, Mail
from ..models.user import User
from ..utils.dates import format_datetime, utcnow
from .activity_service import log_activity

logger = logging.getLogger(__name__)

MAIL_TARGET = "Mail"
FOLDERS = ("inbox", "sent", "drafts", "trash")
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024
REPLY_SEPARATOR = "------------------------------"


def recipient_ids(mail: Mail) -> Set[str]:
    """Ids in To and CC."""
    return {r["id"] for r in (mail.recipients or []) + (mail.cc or [])}


def is_visible(mail: Mail, user_id: str) -> bool:
    """
    A draft belongs to its sender only. A sent mail is visible to the sender
    and every To/CC recipient, until that user purges it from their trash.
    """
    if user_id in (mail.purged_by or []):
        return False
    if mail.sender_id == user_id:
        return True
    return not mail.is_draft and user_id in recipient_ids(mail)


def in_folder(mail: Mail, folder: str, user_id: str) -> bool:
    if folder not in FOLDERS:
        raise ValueError(f"Folder tidak dikenal: {folder}")
    if not is_visible(mail, user_id):
        return False

    deleted = user_id in (mail.deleted_by or [])
    if folder == "trash":
        return deleted
    if deleted:
        return False
    if folder == "drafts":
        return mail.is_draft and mail.sender_id == user_id
    if mail.is_draft:
        return False
    if folder == "sent":
        return mail.sender_id == user_id
    return user_id in recipient_ids(mail)


def matches_search(mail: Mail, term: Optional[str]) -> bool:
    """Case-insensitive substring match on subject, body or sender name."""
    if not term:
        return True
    needle = term.lower()
    return any(needle in (value or "").lower() for value in (mail.subject, mail.content, mail.sender_name))


def is_unread(mail: Mail, user_id: str) -> bool:
    return user_id not in (mail.read_by or [])


def _without(values: Iterable[str], user_id: str) -> List[str]:
    return [v for v in values or [] if v != user_id]


def _with(values: Iterable[str], user_id: str) -> List[str]:
    values = list(values or [])
    # JSON columns only see reassignment, never in-place appends
    return values if user_id in values else values + [user_id]


class MailService:
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

    async def _all_mails(self) -> List[Mail]:
        result = await self.session.exec(select(Mail).order_by(desc(Mail.timestamp)))
        return list(result.all())

    async def list_folder(self, folder: str, viewer_id: str, search: Optional[str] = None) -> List[Mail]:
        """Mails of one folder for `viewer_id`, newest first."""
        folder = (folder or "").lower()
        if folder not in FOLDERS:
            raise ValueError(f"Folder tidak dikenal: {folder}")
        return [
            m for m in await self._all_mails()
            if in_folder(m, folder, viewer_id) and matches_search(m, search)
        ]

    async def counts(self, viewer_id: str) -> Dict[str, int]:
        mails = await self._all_mails()
        return {
            "unread": sum(1 for m in mails if in_folder(m, "inbox", viewer_id) and is_unread(m, viewer_id)),
            "drafts": sum(1 for m in mails if in_folder(m, "drafts", viewer_id)),
        }

    async def get_mail(self, mail_id: uuid_pkg.UUID, viewer_id: str) -> Mail:
        mail = await self.session.get(Mail, mail_id)
        if not mail or not is_visible(mail, viewer_id):
            raise FileNotFoundError("Pesan tidak ditemukan.")
        return mail

    async def available_recipients(self, viewer: User) -> List[Dict[str, Any]]:
        """Active staff the viewer can write to, by name."""
        result = await self.session.exec(
            select(User).where(User.is_active == True).order_by(User.name)  # noqa: E712
        )
        return [
            {"id": str(u.id), "name": u.name, "email": u.email}
            for u in result.all()
            if u.id != viewer.id
        ]

    # --- Per-user state ---

    async def open_mail(self, mail_id: uuid_pkg.UUID, viewer: User) -> Mail:
        """Returns the mail and marks it read for the viewer."""
        viewer_id = str(viewer.id)
        mail = await self.get_mail(mail_id, viewer_id)
        if is_unread(mail, viewer_id):
            mail.read_by = _with(mail.read_by, viewer_id)
            self.session.add(mail)
            await self._commit("status baca")
        return mail

    async def mark_unread(self, mail_id: uuid_pkg.UUID, viewer: User) -> Mail:
        viewer_id = str(viewer.id)
        mail = await self.get_mail(mail_id, viewer_id)
        mail.read_by = _without(mail.read_by, viewer_id)
        self.session.add(mail)
        await self._commit("status baca")
        return mail

    async def toggle_star(self, mail_id: uuid_pkg.UUID, viewer: User) -> Mail:
        viewer_id = str(viewer.id)
        mail = await self.get_mail(mail_id, viewer_id)
        if viewer_id in (mail.starred_by or []):
            mail.starred_by = _without(mail.starred_by, viewer_id)
        else:
            mail.starred_by = _with(mail.starred_by, viewer_id)
        self.session.add(mail)
        await self._commit("bintang")
        return mail

    # --- Writes ---

    async def _resolve_recipients(self, ids: Iterable[Any]) -> List[Dict[str, Any]]:
        """Snapshots of active users, in the order given, without duplicates."""
        wanted: List[str] = []
        for user_id in ids or []:
            if str(user_id) not in wanted:
                wanted.append(str(user_id))
        if not wanted:
            return []

        result = await self.session.exec(
            select(User).where(User.id.in_([uuid_pkg.UUID(i) for i in wanted]))
        )
        users = {str(u.id): u for u in result.all() if u.is_active}
        missing = [i for i in wanted if i not in users]
        if missing:
            raise ValueError(f"Penerima tidak dikenal: {', '.join(missing)}")
        return [{"id": i, "name": users[i].name, "email": users[i].email} for i in wanted]

    async def _own_draft(self, draft_id: uuid_pkg.UUID, sender: User) -> Mail:
        mail = await self.session.get(Mail, draft_id)
        if not mail or not mail.is_draft or mail.sender_id != str(sender.id):
            raise FileNotFoundError("Draft tidak ditemukan.")
        return mail

    def _new_mail(self, sender: User) -> Mail:
        return Mail(
            sender_id=str(sender.id),
            sender_name=sender.name,
            sender_email=sender.email,
            sender_avatar=sender.avatar or "",
        )

    async def _fill(self, mail: Mail, data: Dict[str, Any]) -> Mail:
        mail.recipients = await self._resolve_recipients(data.get("to"))
        mail.cc = await self._resolve_recipients(data.get("cc"))
        mail.subject = (data.get("subject") or "").strip() or NO_SUBJECT
        mail.content = data.get("content") or ""
        mail.attachments = [dict(a) for a in data.get("attachments") or []]
        mail.timestamp = utcnow()
        mail.deleted_by = []
        mail.purged_by = []
        return mail

    async def send_mail(self, data: Dict[str, Any], sender: User) -> Mail:
        """
        Sends a new mail, or sends an existing draft when `draft_id` is given.
        The sender has read their own mail.
        """
        if not data.get("to"):
            raise ValueError("Harap pilih setidaknya satu penerima.")

        if data.get("draft_id"):
            mail = await self._own_draft(data["draft_id"], sender)
        else:
            mail = self._new_mail(sender)
        await self._fill(mail, data)
        mail.is_draft = False
        mail.read_by = [str(sender.id)]

        self.session.add(mail)
        await self._commit("pesan")
        await self.session.refresh(mail)

        names = ", ".join(r["name"] for r in mail.recipients)
        await log_activity(self.session, sender, ActivityAction.CREATE, MAIL_TARGET, f"Sent mail to {names}")
        logger.info("Mail %s sent by %s", mail.id, sender.email)
        return mail

    async def save_draft(self, data: Dict[str, Any], sender: User) -> Mail:
        """Creates or overwrites a draft. A completely empty compose form is not saved."""
        if not any(data.get(k) for k in ("to", "cc", "subject", "content", "attachments")):
            raise ValueError("Draft kosong tidak disimpan.")

        if data.get("draft_id"):
            mail = await self._own_draft(data["draft_id"], sender)
        else:
            mail = self._new_mail(sender)
        await self._fill(mail, data)
        mail.is_draft = True

        self.session.add(mail)
        await self._commit("draft")
        await self.session.refresh(mail)
        return mail

    async def delete_mail(self, mail_id: uuid_pkg.UUID, viewer: User) -> None:
        """
        First delete moves the mail to the viewer's trash. Deleting it again
        from the trash removes it for the viewer for good; the row itself goes
        once nobody can see it any more.
        """
        viewer_id = str(viewer.id)
        mail = await self.get_mail(mail_id, viewer_id)

        if viewer_id in (mail.deleted_by or []):
            mail.purged_by = _with(mail.purged_by, viewer_id)
            participants = {mail.sender_id} if mail.is_draft else {mail.sender_id} | recipient_ids(mail)
            if participants <= set(mail.purged_by):
                await self.session.delete(mail)
            else:
                self.session.add(mail)
        else:
            mail.deleted_by = _with(mail.deleted_by, viewer_id)
            self.session.add(mail)
        await self._commit("pesan")

        await log_activity(self.session, viewer, ActivityAction.DELETE, MAIL_TARGET, f"Deleted mail {mail_id}")

    async def restore_mail(self, mail_id: uuid_pkg.UUID, viewer: User) -> Mail:
        """Takes the mail out of the viewer's trash, back to its original folder."""
        viewer_id = str(viewer.id)
        mail = await self.get_mail(mail_id, viewer_id)
        if viewer_id not in (mail.deleted_by or []):
            raise ValueError("Pesan tidak ada di Sampah.")
        mail.deleted_by = _without(mail.deleted_by, viewer_id)
        self.session.add(mail)
        await self._commit("pesan")
        return mail

    async def reply_template(self, mail_id: uuid_pkg.UUID, viewer: User) -> Dict[str, Any]:
        """Compose form prefilled to answer the sender, quoting the original."""
        mail = await self.get_mail(mail_id, str(viewer.id))
        subject = mail.subject if mail.subject.startswith("Re: ") else f"Re: {mail.subject}"
        content = (
            f"\n\n\n{REPLY_SEPARATOR}\n"
            f"Pada {format_datetime(mail.timestamp)}, {mail.sender_name} menulis:\n\n{mail.content}"
        )
        return {"to": [mail.sender_id], "cc": [], "subject": subject, "content": content}

    # --- Attachments ---

    @staticmethod
    async def save_attachment(file: UploadFile, upload_dir: str) -> Dict[str, Any]:
        """Stores an upload under {upload_dir}/mail and returns its descriptor."""
        content = await file.read()
        if not content:
            raise ValueError("File lampiran kosong.")
        if len(content) > MAX_ATTACHMENT_BYTES:
            raise ValueError("Ukuran lampiran maksimal 10 MB.")

        file_extension = os.path.splitext(file.filename or "")[1]
        saved_filename = f"{uuid_pkg.uuid4()}{file_extension}"
        save_dir = os.path.join(upload_dir, "mail")
        os.makedirs(save_dir, exist_ok=True)

        async with aiofiles.open(os.path.join(save_dir, saved_filename), "wb") as out_file:
            await out_file.write(content)

        return {
            "name": file.filename or saved_filename,
            "size": len(content),
            "type": file.content_type or "application/octet-stream",
            "url": f"/uploads/mail/{saved_filename}",
        }
