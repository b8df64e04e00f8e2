# problemlog/api/dashboard/main.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.users import require_dashboard
from ...db.engine import get_session
from ...models.user import User
from ...services import complaint_view, dashboard_service
from ...services.complaint_service import ComplaintService
from ...utils.dates import utcnow
from .models import BucketCount, DashboardIncident, DashboardOverview

router = APIRouter()


def _incident(complaint, now) -> DashboardIncident:
    return DashboardIncident(
        id=complaint.id,
        no_tiket=complaint.no_tiket,
        nasabah=complaint.nasabah,
        terminal_id=complaint.terminal_id,
        jenis_aduan=complaint.jenis_aduan,
        severity=complaint.severity,
        status=complaint.status,
        waktu_aduan=complaint.waktu_aduan,
        downtime=complaint_view.calculate_downtime(now, complaint.status, complaint.waktu_aduan),
        tone=dashboard_service.problem_tone(complaint.jenis_aduan),
    )


@router.get("/dashboard", response_model=DashboardOverview)
async def get_dashboard(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_dashboard),
):
    complaints = await ComplaintService(session).list_complaints()
    now = utcnow()
    buckets = dashboard_service.partition(complaints)
    return DashboardOverview(
        summary=dashboard_service.summary(complaints, now),
        active_incidents=[_incident(c, now) for c in dashboard_service.active_incidents(complaints)],
        buckets=[BucketCount(name=name, count=len(rows)) for name, rows in buckets.items()],
    )


@router.get("/dashboard/buckets/{bucket}", response_model=List[DashboardIncident])
async def get_bucket(
    bucket: str,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_dashboard),
):
    complaints = await ComplaintService(session).list_complaints()
    now = utcnow()
    try:
        rows = dashboard_service.bucket_complaints(complaints, bucket.upper())
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [_incident(c, now) for c in rows]
