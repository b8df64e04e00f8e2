from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MasterDataCreate(BaseModel):
    name: RequiredText
    description: str = ""


class MasterDataUpdate(BaseModel):
    name: Optional[RequiredText] = None
    description: Optional[str] = None


class MasterDataRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    code: str
    name: str
    description: str
    created_at: datetime


class MasterDataImportResult(BaseModel):
    imported: int
