import uuid as uuid_pkg
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel


class DashboardIncident(BaseModel):
    id: uuid_pkg.UUID
    no_tiket: str
    nasabah: str
    terminal_id: str
    jenis_aduan: str
    severity: str
    status: str
    waktu_aduan: datetime
    downtime: str
    tone: str


class DashboardSummary(BaseModel):
    total: int
    active: int
    by_status: Dict[str, int]
    generated_at: datetime


class BucketCount(BaseModel):
    name: str
    count: int


class DashboardOverview(BaseModel):
    summary: DashboardSummary
    active_incidents: List[DashboardIncident]
    buckets: List[BucketCount]
