# problemlog/core/bootstrap.py
import logging

from sqlmodel import select

from ..db.engine import async_session_maker, create_db_and_tables
from ..models.user import User
from ..schemas.user import UserCreate
from ..services.user_service import UserService
from .config import get_settings
from .constants import UserRole

logger = logging.getLogger(__name__)


async def bootstrap_system() -> None:
    """
    Idempotent bootstrapping:
    1. Creates the tables.
    2. When no user exists yet, creates the first Super Admin from
       ADMIN_EMAIL / ADMIN_PASSWORD.
    """
    logger.info("[Bootstrap] Initializing database schema...")
    await create_db_and_tables()

    async with async_session_maker() as session:
        existing_user = (await session.exec(select(User))).first()
        if existing_user:
            logger.info("[Bootstrap] Users found. Skipping admin creation.")
            return

        settings = get_settings()
        if not (settings.admin_email and settings.admin_password):
            logger.warning("[Bootstrap] ADMIN_EMAIL or ADMIN_PASSWORD not set. No user can log in yet.")
            return

        await start_auto_creation(session, settings.admin_email, settings.admin_name, settings.admin_password)


async def start_auto_creation(session, email: str, name: str, password: str) -> User:
    """Creates the first Super Admin silently."""
    user = await UserService(session).create_user(
        UserCreate(
            email=email,
            password=password,
            name=name,
            role=UserRole.SUPERADMIN,
            is_verified=True,
        )
    )
    logger.info("[Bootstrap] Created first Super Admin: %s", email)
    return user
