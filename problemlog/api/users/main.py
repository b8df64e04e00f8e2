# problemlog/api/users/main.py
import uuid as uuid_pkg
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.users import current_active_user, require_users
from ...db.engine import get_session
from ...models.user import User
from ...schemas.user import UserCreate, UserRead, UserUpdate
from ...services.user_service import UserService

router = APIRouter()


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)


@router.get("/users/me", response_model=UserRead)
async def api_get_me(current_user: User = Depends(current_active_user)):
    return current_user


@router.get("/users", response_model=List[UserRead])
async def api_get_all_users(
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_users),
):
    return await service.get_all_users()


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def api_create_user(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_users),
):
    try:
        return await service.create_user(user_data, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/users/{user_id}", response_model=UserRead)
async def api_update_user(
    user_id: uuid_pkg.UUID,
    user_data: UserUpdate,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_users),
):
    try:
        return await service.update_user(user_id, user_data, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="User tidak ditemukan")


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def api_delete_user(
    user_id: uuid_pkg.UUID,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_users),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=403, detail="Tidak dapat menghapus akun sendiri.")
    try:
        await service.delete_user(user_id, current_user)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="User tidak ditemukan")
