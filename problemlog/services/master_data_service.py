# problemlog/services/master_data_service.py
import csv
import io
import logging
import random
from typing import Any, Dict, List, Optional, Set

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.constants import ActivityAction, MasterDataType
from ..core.errors import PersistenceError
from ..models.master_data import MasterData
from ..models.user import User
from .activity_service import log_activity

logger = logging.getLogger(__name__)

# type -> (menu title, code prefix, has description column)
MASTER_CONFIG = {
    MasterDataType.CATEGORY: ("Kategori Problem", "CAT", True),
    MasterDataType.COMPLAINT_CATEGORY: ("Kategori Aduan", "ADC", True),
    MasterDataType.INFO: ("Info Problem", "INF", True),
    MasterDataType.BANK: ("Bank Issuer", "BNK", False),
}


def _cell(values, index: int) -> str:
    if index < len(values) and isinstance(values[index], str):
        return values[index].strip()
    return ""


class MasterDataService:
    def __init__(self, session: AsyncSession, data_type: MasterDataType, rng: Optional[random.Random] = None):
        self.session = session
        self.data_type = MasterDataType(data_type)
        self.title, self.prefix, self.has_description = MASTER_CONFIG[self.data_type]
        self.rng = rng or random

    async def _commit(self, what: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to save %s: %s", what, e)
            raise PersistenceError(f"Gagal menyimpan {what}.") from e

    async def _existing_codes(self) -> Set[str]:
        result = await self.session.exec(
            select(MasterData.code).where(MasterData.type == self.data_type.value)
        )
        return set(result.all())

    def _generate_code(self, taken: Set[str]) -> str:
        """PREFIX-NNNN, unique within this type. Gives up after 1000 attempts."""
        for _ in range(1000):
            code = f"{self.prefix}-{self.rng.randint(1000, 9999)}"
            if code not in taken:
                taken.add(code)
                return code
        raise ValueError(f"Tidak ada kode {self.prefix} yang tersedia.")

    async def get_all(self) -> List[MasterData]:
        result = await self.session.exec(
            select(MasterData)
            .where(MasterData.type == self.data_type.value)
            .order_by(MasterData.created_at, MasterData.id)
        )
        return list(result.all())

    async def get_item(self, item_id: int) -> MasterData:
        item = await self.session.get(MasterData, item_id)
        if not item or item.type != self.data_type.value:
            raise FileNotFoundError(f"Data {self.title} tidak ditemukan.")
        return item

    async def create_item(self, name: str, description: str = "", actor: Optional[User] = None) -> MasterData:
        item = MasterData(
            type=self.data_type.value,
            code=self._generate_code(await self._existing_codes()),
            name=name,
            description=description if self.has_description else "",
        )
        self.session.add(item)
        await self._commit(self.title)
        await self.session.refresh(item)
        await log_activity(
            self.session, actor, ActivityAction.CREATE, self.title, f"Created {item.name} ({item.code})"
        )
        return item

    async def update_item(self, item_id: int, data: Dict[str, Any], actor: Optional[User] = None) -> MasterData:
        """Only name and description change; the code is fixed at creation."""
        item = await self.get_item(item_id)
        if data.get("name"):
            item.name = data["name"]
        if "description" in data and self.has_description:
            item.description = data["description"] or ""
        self.session.add(item)
        await self._commit(self.title)
        await self.session.refresh(item)
        await log_activity(self.session, actor, ActivityAction.UPDATE, self.title, f"Updated {item.name}")
        return item

    async def delete_item(self, item_id: int, actor: Optional[User] = None) -> None:
        item = await self.get_item(item_id)
        name = item.name
        await self.session.delete(item)
        await self._commit(self.title)
        await log_activity(self.session, actor, ActivityAction.DELETE, self.title, f"Deleted {name}")

    # --- CSV ---

    def template_csv(self) -> str:
        columns = ["name", "description"] if self.has_description else ["name"]
        example = [f"Contoh Nama {self.data_type.value}"]
        if self.has_description:
            example.append("Contoh Deskripsi Tambahan")
        return pd.DataFrame([example], columns=columns).to_csv(index=False)

    async def export_csv(self, actor: Optional[User] = None) -> str:
        columns = ["code", "name", "description"] if self.has_description else ["code", "name"]
        items = await self.get_all()
        df = pd.DataFrame([[getattr(i, c) for c in columns] for i in items], columns=columns)
        await log_activity(self.session, actor, ActivityAction.EXPORT, self.title, "Exported data to CSV")
        return df.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC)

    async def import_csv(self, content: bytes, actor: Optional[User] = None) -> int:
        """
        Imports `name[,description]` rows (header skipped). Codes are generated,
        never read from the file. Returns the number of rows imported.
        """
        try:
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, header=0)
        except pd.errors.EmptyDataError:
            return 0
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ValueError(f"Gagal membaca file CSV: {e}")

        codes = await self._existing_codes()
        imported = 0
        for values in df.itertuples(index=False, name=None):
            name = _cell(values, 0)
            if not name:
                continue
            description = _cell(values, 1) if self.has_description else ""
            self.session.add(
                MasterData(
                    type=self.data_type.value,
                    code=self._generate_code(codes),
                    name=name,
                    description=description,
                )
            )
            imported += 1

        await self._commit(self.title)
        await log_activity(
            self.session, actor, ActivityAction.IMPORT, self.title,
            f"Imported {imported} items with auto-generated codes",
        )
        return imported
