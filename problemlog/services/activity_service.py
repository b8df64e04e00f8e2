# problemlog/services/activity_service.py
"""
Activity logging: who did what, on which menu or record.
Writes are fire-and-forget; a failed log never blocks the primary action.
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from ..core.constants import ActivityAction
from ..models.activity_log import ActivityLog
from ..models.user import User

logger = logging.getLogger(__name__)


async def log_activity(
    session: AsyncSession,
    user: Optional[User],
    action: ActivityAction,
    target: str,
    details: str = "",
) -> None:
    """
    Record an activity for `user`.

    The row is written through a separate session on the same engine as
    `session`, so a failure here (logged and swallowed) never rolls back or
    expires anything the caller holds.
    """
    if user is None:
        return
    action_value = ActivityAction(action).value
    entry = ActivityLog(
        user_id=str(user.id),
        user_name=user.name,
        user_role=user.role,
        action=action_value,
        target=target,
        details=details,
    )
    async with SQLModelAsyncSession(session.bind, expire_on_commit=False) as log_session:
        try:
            log_session.add(entry)
            await log_session.commit()
        except Exception as e:
            logger.warning("Activity log failed (%s %s): %s", action_value, target, e)
            await log_session.rollback()


class ActivityService:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _filtered(self, statement, action_filter: Optional[str], user_filter: Optional[str]):
        if action_filter and action_filter != "all":
            statement = statement.where(ActivityLog.action == action_filter.upper())
        if user_filter and user_filter != "all":
            statement = statement.where(ActivityLog.user_name == user_filter)
        return statement

    async def get_logs_paginated(
        self,
        page: int = 1,
        page_size: int = 20,
        action_filter: Optional[str] = None,
        user_filter: Optional[str] = None,
    ) -> List[ActivityLog]:
        """Newest first, with optional action and user-name filters."""
        offset = (max(page, 1) - 1) * page_size
        statement = self._filtered(
            select(ActivityLog), action_filter, user_filter
        ).order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).offset(offset).limit(page_size)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_logs(
        self,
        action_filter: Optional[str] = None,
        user_filter: Optional[str] = None,
    ) -> int:
        statement = self._filtered(select(func.count()).select_from(ActivityLog), action_filter, user_filter)
        result = await self.session.execute(statement)
        return result.scalar_one() or 0

    async def get_distinct_users(self) -> List[str]:
        statement = select(ActivityLog.user_name).distinct().order_by(ActivityLog.user_name)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_distinct_actions(self) -> List[str]:
        statement = select(ActivityLog.action).distinct().order_by(ActivityLog.action)
        result = await self.session.execute(statement)
        return list(result.scalars().all())
