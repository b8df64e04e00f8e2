import asyncio
import os
import tempfile
import uuid
from datetime import datetime

# Settings are read at import time; point them at a throwaway location first
_TMP_DIR = tempfile.mkdtemp(prefix="problemlog-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'app.sqlite')}")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP_DIR, "uploads"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from problemlog import models  # noqa: F401
from problemlog.core.constants import DEFAULT_ROLE_PERMISSIONS, UserRole
from problemlog.core.users import current_active_user, password_helper
from problemlog.db.engine import get_session
from problemlog.main import app
from problemlog.models.user import User, avatar_url_for

TEST_PASSWORD = "rahasia123"


def make_user(role: UserRole = UserRole.HELPDESK, name: str = "Budi Santoso", permissions=None, **kwargs) -> User:
    if permissions is None:
        permissions = [p.value for p in DEFAULT_ROLE_PERMISSIONS[role]]
    return User(
        id=kwargs.pop("id", uuid.uuid4()),
        email=kwargs.pop("email", f"{uuid.uuid4().hex[:8]}@example.com"),
        hashed_password=password_helper.hash(TEST_PASSWORD),
        name=name,
        role=role.value,
        avatar=avatar_url_for(name),
        permissions=permissions,
        is_superuser=role == UserRole.SUPERADMIN,
        **kwargs,
    )


def dt(text: str) -> datetime:
    return datetime.fromisoformat(text)


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@pytest.fixture
def engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}", poolclass=NullPool)


@pytest.fixture
async def session(engine):
    await create_tables(engine)
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def helpdesk():
    return make_user(UserRole.HELPDESK, name="Budi Santoso")


@pytest.fixture
def admin():
    return make_user(UserRole.SUPERADMIN, name="Siti Admin")


@pytest.fixture
def technician():
    return make_user(UserRole.TECHNICIAN, name="Tono Teknisi")


class ApiHarness:
    """TestClient bound to a per-test database, acting as `self.user`."""

    def __init__(self, engine, user: User):
        self.engine = engine
        self.user = user
        self.session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self.client = TestClient(app)
        asyncio.run(create_tables(engine))

    def store(self, *objects) -> None:
        async def _store():
            async with self.session_maker() as session:
                for obj in objects:
                    session.add(obj)
                await session.commit()

        asyncio.run(_store())

    def act_as(self, user: User) -> None:
        self.user = user

    def execute(self, sql: str) -> None:
        async def _execute():
            async with self.engine.begin() as conn:
                await conn.exec_driver_sql(sql)

        asyncio.run(_execute())


@pytest.fixture
def api(engine, helpdesk):
    harness = ApiHarness(engine, helpdesk)

    async def _get_session():
        async with harness.session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[current_active_user] = lambda: harness.user
    harness.store(helpdesk)
    yield harness
    app.dependency_overrides.clear()
