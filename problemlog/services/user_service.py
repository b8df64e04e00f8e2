# problemlog/services/user_service.py
import uuid as uuid_pkg
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.constants import DEFAULT_ROLE_PERMISSIONS, ActivityAction, UserRole
from ..core.users import password_helper
from ..models.user import User, avatar_url_for
from ..schemas.user import UserCreate, UserUpdate
from .activity_service import log_activity


def _permission_values(permissions) -> List[str]:
    return [getattr(p, "value", p) for p in permissions]


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all_users(self) -> List[User]:
        result = await self.session.exec(select(User).order_by(User.name))
        return list(result.all())

    async def get_user(self, user_id: uuid_pkg.UUID) -> User:
        user = await self.session.get(User, user_id)
        if not user:
            raise FileNotFoundError("User not found")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.exec(select(User).where(User.email == email.lower()))
        return result.first()

    async def create_user(self, user_create: UserCreate, actor: Optional[User] = None) -> User:
        if await self.get_user_by_email(user_create.email):
            raise ValueError("Email sudah terdaftar.")

        role = UserRole(user_create.role)
        permissions = (
            user_create.permissions
            if user_create.permissions is not None
            else DEFAULT_ROLE_PERMISSIONS[role]
        )
        db_user = User(
            email=user_create.email.lower(),
            hashed_password=password_helper.hash(user_create.password),
            name=user_create.name,
            role=role.value,
            avatar=avatar_url_for(user_create.name),
            permissions=_permission_values(permissions),
            is_active=user_create.is_active if user_create.is_active is not None else True,
            is_verified=bool(user_create.is_verified),
            is_superuser=role == UserRole.SUPERADMIN,
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)

        await log_activity(
            self.session, actor, ActivityAction.CREATE,
            f"User: {db_user.name}", f"Created new user with role {db_user.role}",
        )
        return db_user

    async def update_user(self, user_id: uuid_pkg.UUID, user_update: UserUpdate, actor: Optional[User] = None) -> User:
        db_user = await self.get_user(user_id)
        update_data = user_update.model_dump(exclude_unset=True)

        if "disabled" in update_data:
            db_user.is_active = not update_data.pop("disabled")

        # An empty password keeps the current one
        password = update_data.pop("password", None)
        if password and password.strip():
            db_user.hashed_password = password_helper.hash(password)

        if update_data.get("email"):
            other = await self.get_user_by_email(update_data["email"])
            if other and other.id != db_user.id:
                raise ValueError("Email sudah terdaftar.")
            db_user.email = update_data.pop("email").lower()

        if update_data.get("name"):
            db_user.name = update_data.pop("name")
            db_user.avatar = avatar_url_for(db_user.name)

        if update_data.get("role"):
            role = UserRole(update_data.pop("role"))
            db_user.role = role.value
            db_user.is_superuser = role == UserRole.SUPERADMIN

        if update_data.get("permissions") is not None:
            db_user.permissions = _permission_values(update_data.pop("permissions"))

        for key in ("is_active", "is_verified"):
            if update_data.get(key) is not None:
                setattr(db_user, key, update_data[key])

        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)

        await log_activity(
            self.session, actor, ActivityAction.UPDATE,
            f"User: {db_user.name}", f"Updated details for user ID {db_user.id}",
        )
        return db_user

    async def delete_user(self, user_id: uuid_pkg.UUID, actor: Optional[User] = None) -> None:
        db_user = await self.get_user(user_id)
        name = db_user.name
        await self.session.delete(db_user)
        await self.session.commit()
        await log_activity(
            self.session, actor, ActivityAction.DELETE, f"User: {name}", f"Deleted user ID {user_id}"
        )
