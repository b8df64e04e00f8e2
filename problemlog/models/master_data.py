from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow


class MasterData(SQLModel, table=True):
    """Row of a small reference table (problem categories, bank issuers, ...)."""

    __tablename__ = "master_data"

    id: Optional[int] = Field(default=None, primary_key=True)
    type: str = Field(index=True, max_length=30)
    code: str = Field(index=True, max_length=20)
    name: str = Field(nullable=False, max_length=150)
    description: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow)
