# problemlog/api/activity/main.py
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.constants import ActivityAction
from ...core.users import current_active_user, require_log_activity
from ...db.engine import get_session
from ...models.user import User
from ...services.activity_service import ActivityService, log_activity
from .models import ActivityFilters, ActivityLogPage, MenuView

router = APIRouter()


def get_activity_service(session: AsyncSession = Depends(get_session)) -> ActivityService:
    return ActivityService(session)


@router.get("/activity-logs", response_model=ActivityLogPage)
async def api_get_activity_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    action: Optional[str] = None,
    user: Optional[str] = None,
    service: ActivityService = Depends(get_activity_service),
    current_user: User = Depends(require_log_activity),
):
    total = await service.count_logs(action, user)
    items = await service.get_logs_paginated(page, page_size, action, user)
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


@router.get("/activity-logs/filters", response_model=ActivityFilters)
async def api_get_activity_filters(
    service: ActivityService = Depends(get_activity_service),
    current_user: User = Depends(require_log_activity),
):
    return {
        "users": await service.get_distinct_users(),
        "actions": await service.get_distinct_actions(),
    }


@router.post("/activity-logs/view", status_code=status.HTTP_204_NO_CONTENT)
async def api_log_menu_view(
    view: MenuView,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(current_active_user),
):
    await log_activity(session, current_user, ActivityAction.VIEW, view.target, view.details)
