# problemlog/api/master_data/main.py
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.constants import MasterDataType, MenuPermission
from ...core.errors import PersistenceError
from ...core.users import current_active_user, has_permission
from ...db.engine import get_session
from ...models.user import User
from ...services.master_data_service import MasterDataService
from ...utils.dates import utcnow
from .models import MasterDataCreate, MasterDataImportResult, MasterDataRead, MasterDataUpdate

router = APIRouter()

TYPE_PERMISSIONS = {
    MasterDataType.CATEGORY: MenuPermission.MASTER_CATEGORY,
    MasterDataType.COMPLAINT_CATEGORY: MenuPermission.MASTER_COMPLAINT_CATEGORY,
    MasterDataType.INFO: MenuPermission.MASTER_INFO,
    MasterDataType.BANK: MenuPermission.MASTER_BANK,
}


def get_master_data_service(
    data_type: MasterDataType,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(current_active_user),
) -> MasterDataService:
    """Service for one reference table; the whole Data Master menu also grants access."""
    allowed = has_permission(current_user, MenuPermission.DATA_MASTER.value) or has_permission(
        current_user, TYPE_PERMISSIONS[data_type].value
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. Required permission: {TYPE_PERMISSIONS[data_type].value}",
        )
    return MasterDataService(session, data_type)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/master-data/{data_type}", response_model=List[MasterDataRead])
async def get_all_items(service: MasterDataService = Depends(get_master_data_service)):
    return await service.get_all()


@router.post("/master-data/{data_type}", response_model=MasterDataRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    item: MasterDataCreate,
    service: MasterDataService = Depends(get_master_data_service),
    current_user: User = Depends(current_active_user),
):
    try:
        return await service.create_item(item.name, item.description, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/master-data/{data_type}/template")
async def download_template(service: MasterDataService = Depends(get_master_data_service)):
    return _csv_response(service.template_csv(), f"template_{service.data_type.value.lower()}.csv")


@router.get("/master-data/{data_type}/export")
async def export_items(
    service: MasterDataService = Depends(get_master_data_service),
    current_user: User = Depends(current_active_user),
):
    content = await service.export_csv(current_user)
    return _csv_response(content, f"{service.data_type.value.lower()}_export_{utcnow():%Y-%m-%d}.csv")


@router.post("/master-data/{data_type}/import", response_model=MasterDataImportResult)
async def import_items(
    file: UploadFile = File(...),
    service: MasterDataService = Depends(get_master_data_service),
    current_user: User = Depends(current_active_user),
):
    try:
        imported = await service.import_csv(await file.read(), current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"imported": imported}


@router.put("/master-data/{data_type}/{item_id}", response_model=MasterDataRead)
async def update_item(
    item_id: int,
    item_update: MasterDataUpdate,
    service: MasterDataService = Depends(get_master_data_service),
    current_user: User = Depends(current_active_user),
):
    try:
        return await service.update_item(item_id, item_update.model_dump(exclude_unset=True), current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/master-data/{data_type}/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    service: MasterDataService = Depends(get_master_data_service),
    current_user: User = Depends(current_active_user),
):
    try:
        await service.delete_item(item_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
