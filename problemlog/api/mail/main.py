# problemlog/api/mail/main.py
import uuid as uuid_pkg
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import get_settings
from ...core.errors import PersistenceError
from ...core.users import require_mail
from ...db.engine import get_session
from ...models.mail import Mail
from ...models.user import User
from ...services.mail_service import MailService, is_unread
from ...utils.dates import format_datetime
from .models import MailAttachment, MailCompose, MailCounts, MailRead, MailRecipient, MailReply

router = APIRouter()

SAVE_FAILED = "Gagal menyimpan pesan. Silakan coba lagi."


def get_mail_service(session: AsyncSession = Depends(get_session)) -> MailService:
    return MailService(session)


def _to_read(mail: Mail, viewer: User) -> MailRead:
    viewer_id = str(viewer.id)
    return MailRead(
        id=mail.id,
        sender_id=mail.sender_id,
        sender_name=mail.sender_name,
        sender_email=mail.sender_email,
        sender_avatar=mail.sender_avatar,
        recipients=mail.recipients,
        cc=mail.cc,
        subject=mail.subject,
        content=mail.content,
        timestamp=mail.timestamp,
        timestamp_label=format_datetime(mail.timestamp),
        is_draft=mail.is_draft,
        is_read=not is_unread(mail, viewer_id),
        is_starred=viewer_id in (mail.starred_by or []),
        attachments=mail.attachments,
    )


@router.get("/mail", response_model=List[MailRead])
async def api_list_mail(
    folder: str = "inbox",
    search: Optional[str] = None,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mails = await service.list_folder(folder, str(current_user.id), search)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [_to_read(m, current_user) for m in mails]


@router.get("/mail/counts", response_model=MailCounts)
async def api_mail_counts(
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    return await service.counts(str(current_user.id))


@router.get("/mail/recipients", response_model=List[MailRecipient])
async def api_mail_recipients(
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    return await service.available_recipients(current_user)


@router.post("/mail/send", response_model=MailRead, status_code=status.HTTP_201_CREATED)
async def api_send_mail(
    compose: MailCompose,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mail = await service.send_mail(compose.model_dump(), current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.post("/mail/drafts", response_model=MailRead)
async def api_save_draft(
    compose: MailCompose,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mail = await service.save_draft(compose.model_dump(), current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.post("/mail/attachments", response_model=MailAttachment, status_code=status.HTTP_201_CREATED)
async def api_upload_attachment(
    file: UploadFile = File(...),
    current_user: User = Depends(require_mail),
):
    try:
        return await MailService.save_attachment(file, get_settings().upload_dir)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/mail/{mail_id}", response_model=MailRead)
async def api_open_mail(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    """Returns the mail and marks it read for the caller."""
    try:
        mail = await service.open_mail(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.get("/mail/{mail_id}/reply", response_model=MailReply)
async def api_reply_template(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        return await service.reply_template(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/mail/{mail_id}/unread", response_model=MailRead)
async def api_mark_unread(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mail = await service.mark_unread(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.post("/mail/{mail_id}/star", response_model=MailRead)
async def api_toggle_star(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mail = await service.toggle_star(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.post("/mail/{mail_id}/restore", response_model=MailRead)
async def api_restore_mail(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    try:
        mail = await service.restore_mail(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return _to_read(mail, current_user)


@router.delete("/mail/{mail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def api_delete_mail(
    mail_id: uuid_pkg.UUID,
    service: MailService = Depends(get_mail_service),
    current_user: User = Depends(require_mail),
):
    """Moves the mail to the caller's trash; from the trash, removes it for good."""
    try:
        await service.delete_mail(mail_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
