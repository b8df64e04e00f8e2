# problemlog/api/auth/main.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.constants import ActivityAction
from ...core.users import ACCESS_TOKEN_COOKIE_NAME, current_active_user
from ...db.engine import get_session
from ...models.user import User
from ...services.activity_service import log_activity

router = APIRouter()


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def api_logout(
    response: Response,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(current_active_user),
):
    """
    Records the logout and clears the session cookie.
    Bearer tokens are stateless and simply expire.
    """
    await log_activity(session, current_user, ActivityAction.LOGOUT, "System", "User logged out")
    response.delete_cookie(ACCESS_TOKEN_COOKIE_NAME)
