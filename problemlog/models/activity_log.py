from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=utcnow, index=True)
    user_id: str
    user_name: str = Field(index=True)
    user_role: Optional[str] = None
    action: str = Field(index=True)
    target: str
    details: str = ""
