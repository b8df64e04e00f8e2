from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ActivityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    user_id: str
    user_name: str
    user_role: Optional[str] = None
    action: str
    target: str
    details: str


class ActivityLogPage(BaseModel):
    items: List[ActivityLogRead]
    total: int
    page: int
    page_size: int
    total_pages: int


class ActivityFilters(BaseModel):
    users: List[str]
    actions: List[str]


class MenuView(BaseModel):
    """A menu opened in the console, recorded as a VIEW activity."""

    target: str
    details: str = ""
