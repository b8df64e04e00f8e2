# problemlog/api/complaints/main.py
import uuid as uuid_pkg
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.errors import PersistenceError
from ...core.users import require_complaints
from ...db.engine import get_session
from ...models.user import User
from ...schemas.complaint import (
    CommentCreate,
    CommentRead,
    ComplaintCreate,
    ComplaintRow,
    ComplaintUpdate,
    TerminalOption,
)
from ...services import complaint_view
from ...services.complaint_service import ComplaintService
from ...services.location_service import LocationService
from ...utils.dates import utcnow

router = APIRouter()

SAVE_FAILED = "Gagal menyimpan data. Silakan coba lagi."


def get_complaint_service(session: AsyncSession = Depends(get_session)) -> ComplaintService:
    return ComplaintService(session)


async def _row_for(service: ComplaintService, complaint_id: uuid_pkg.UUID, viewer: User) -> ComplaintRow:
    complaint = await service.get_complaint(complaint_id)
    seen = await service.get_seen_counts(str(viewer.id))
    return complaint_view.build_row(complaint, seen.get(str(complaint.id)), str(viewer.id), utcnow())


@router.get("/complaints", response_model=List[ComplaintRow])
async def list_complaints(
    search: Optional[str] = None,
    service: ComplaintService = Depends(get_complaint_service),
    current_user: User = Depends(require_complaints),
):
    complaints = await service.list_complaints()
    seen = await service.get_seen_counts(str(current_user.id))
    return complaint_view.build_rows(complaints, seen, str(current_user.id), utcnow(), search)


@router.get("/complaints/terminals", response_model=List[TerminalOption])
async def search_terminals(
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_complaints),
):
    """Type-ahead for the terminal field of the complaint form."""
    locations = await LocationService(session).get_all_locations()
    return complaint_view.filter_locations(locations, search)


@router.post("/complaints", response_model=ComplaintRow, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    complaint: ComplaintCreate,
    service: ComplaintService = Depends(get_complaint_service),
    current_user: User = Depends(require_complaints),
):
    try:
        created = await service.create_complaint(complaint.model_dump(), current_user)
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return await _row_for(service, created.id, current_user)


@router.put("/complaints/{complaint_id}", response_model=ComplaintRow)
async def update_complaint(
    complaint_id: uuid_pkg.UUID,
    complaint_update: ComplaintUpdate,
    service: ComplaintService = Depends(get_complaint_service),
    current_user: User = Depends(require_complaints),
):
    updates = complaint_update.model_dump(exclude_unset=True)
    try:
        await service.update_complaint(complaint_id, updates, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return await _row_for(service, complaint_id, current_user)


@router.get("/complaints/{complaint_id}/comments", response_model=List[CommentRead])
async def open_comment_thread(
    complaint_id: uuid_pkg.UUID,
    service: ComplaintService = Depends(get_complaint_service),
    current_user: User = Depends(require_complaints),
):
    """Returns the thread and marks every current comment as seen by the caller."""
    try:
        complaint = await service.open_thread(complaint_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return complaint_view.build_thread(complaint, str(current_user.id))


@router.post(
    "/complaints/{complaint_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    complaint_id: uuid_pkg.UUID,
    comment: CommentCreate,
    service: ComplaintService = Depends(get_complaint_service),
    current_user: User = Depends(require_complaints),
):
    try:
        saved = await service.append_comment(complaint_id, comment.text, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError:
        raise HTTPException(status_code=500, detail=SAVE_FAILED)
    return complaint_view.comment_to_read(saved, str(current_user.id))
