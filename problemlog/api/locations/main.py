# problemlog/api/locations/main.py
import uuid as uuid_pkg
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.errors import PersistenceError
from ...core.users import require_locations
from ...db.engine import get_session
from ...models.user import User
from ...services.location_service import LocationService
from ...utils.dates import utcnow
from .models import ImportResult, LocationCreate, LocationRead, LocationUpdate

router = APIRouter()


def get_location_service(session: AsyncSession = Depends(get_session)) -> LocationService:
    return LocationService(session)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/locations", response_model=List[LocationRead])
async def get_all_locations(
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    return await service.get_all_locations()


@router.post("/locations", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
async def create_location(
    location: LocationCreate,
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    try:
        return await service.create_location(location.model_dump(), current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/locations/template")
async def download_template(current_user: User = Depends(require_locations)):
    return _csv_response(LocationService.template_csv(), "template_import_lokasi.csv")


@router.get("/locations/export")
async def export_locations(
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    content = await service.export_csv(current_user)
    return _csv_response(content, f"data_lokasi_export_{utcnow():%Y-%m-%d}.csv")


@router.post("/locations/import", response_model=ImportResult)
async def import_locations(
    file: UploadFile = File(...),
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    try:
        return await service.import_csv(await file.read(), current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/locations/{location_id}", response_model=LocationRead)
async def get_location(
    location_id: uuid_pkg.UUID,
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    try:
        return await service.get_location(location_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/locations/{location_id}", response_model=LocationRead)
async def update_location(
    location_id: uuid_pkg.UUID,
    location_update: LocationUpdate,
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    updates = location_update.model_dump(exclude_unset=True)
    try:
        return await service.update_location(location_id, updates, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: uuid_pkg.UUID,
    service: LocationService = Depends(get_location_service),
    current_user: User = Depends(require_locations),
):
    try:
        await service.delete_location(location_id, current_user)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
