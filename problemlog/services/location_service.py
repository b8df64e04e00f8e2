# problemlog/services/location_service.py
"""
Terminal locations: CRUD plus CSV import, export and template.
"""
import csv
import io
import logging
import random
import uuid as uuid_pkg
from typing import Any, Dict, List, Optional, Set

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.constants import LOCATION_TARGET, ActivityAction
from ..core.errors import PersistenceError
from ..models.location import Location
from ..models.user import User
from .activity_service import log_activity

logger = logging.getLogger(__name__)

# Column order shared by import template, import parser and export
LOCATION_CSV_COLUMNS = [
    "terminal_id",
    "tanggal_aktivasi",  # YYYYMMDD
    "tanggal_relokasi",  # YYYYMMDD
    "kode_toko",
    "nama_lokasi",
    "alamat",
    "wilayah",
    "provinsi",
    "dc_toko",
    "titik_kordinat",
    "jam_buka",  # HH:MM
    "jam_tutup",  # HH:MM
    "flm",  # ADVANTAGE, BRINKS-AMS, BRINKS-ICS, KEJAR
    "slm",  # DN, DATINDO
    "vendor_modem",
    "nomor_modem",
    "kebersihan",
    "penempatan",  # INDOMARET, ALFAMART, ALFAMIDI
    "jenis_box",
    "tipe_mesin",
    "sn_atm",
    "vendor_ups",
    "sn_ups",
    "vendor_lcd",
    "sn_lcd",
]

TEMPLATE_EXAMPLE_ROW = [
    "TID-99999", "20250101", "20250201", "TKO-888", "Contoh Lokasi", "Jl. Contoh No 1",
    "Jakarta Pusat", "DKI Jakarta", "DC JAKARTA", "-6.123, 106.123", "07:00", "22:00",
    "ADVANTAGE", "DN", "Telkomsel", "081234567890", "Bersih", "INDOMARET", "Standard",
    "NCR", "SN-ATM-001", "ICA", "SN-UPS-001", "Samsung", "SN-LCD-001",
]

# Value used when an imported column is blank
IMPORT_DEFAULTS = {
    "tanggal_aktivasi": "-",
    "tanggal_relokasi": "-",
    "kode_toko": "-",
    "nama_lokasi": "Nama Tidak Diketahui",
    "alamat": "-",
    "wilayah": "-",
    "provinsi": "-",
    "dc_toko": "-",
    "titik_kordinat": "",
    "jam_buka": "00:00",
    "jam_tutup": "23:59",
    "flm": "ADVANTAGE",
    "slm": "DN",
    "vendor_modem": "-",
    "nomor_modem": "-",
    "kebersihan": "-",
    "penempatan": "INDOMARET",
    "jenis_box": "Standard",
    "tipe_mesin": "ATM",
    "sn_atm": "-",
    "vendor_ups": "-",
    "sn_ups": "-",
    "vendor_lcd": "-",
    "sn_lcd": "-",
}


def calculate_total_jam_tutup(jam_buka: Optional[str], jam_tutup: Optional[str]) -> float:
    """
    Hours per day the location is closed: 24 minus the opening span.
    A closing time earlier than the opening time crosses midnight.
    """
    if not jam_buka or not jam_tutup:
        return 0
    h_buka, m_buka = (int(x) for x in jam_buka.split(":"))
    h_tutup, m_tutup = (int(x) for x in jam_tutup.split(":"))

    diff_mins = (h_tutup * 60 + m_tutup) - (h_buka * 60 + m_buka)
    if diff_mins < 0:
        diff_mins += 24 * 60

    return round(24 - diff_mins / 60, 2)


def _cell(values: List[Any], index: int) -> str:
    # Short rows are padded with NaN by pandas
    if index < len(values) and isinstance(values[index], str):
        return values[index].strip()
    return ""


class LocationService:
    def __init__(self, session: AsyncSession, rng: Optional[random.Random] = None):
        self.session = session
        self.rng = rng or random

    async def _commit(self, what: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to save %s: %s", what, e)
            raise PersistenceError(f"Gagal menyimpan {what}.") from e

    async def _existing_codes(self) -> Set[str]:
        result = await self.session.exec(select(Location.kode_terminal))
        return set(result.all())

    async def _existing_terminal_ids(self) -> Set[str]:
        result = await self.session.exec(select(Location.terminal_id))
        return {t.lower() for t in result.all()}

    def _generate_unique_code(self, taken: Set[str]) -> str:
        """RND- plus four random digits, not present in `taken` (which is updated)."""
        for _ in range(1000):
            code = f"RND-{self.rng.randint(1000, 9999)}"
            if code not in taken:
                taken.add(code)
                return code
        raise ValueError("Tidak ada kode RND yang tersedia.")

    # --- CRUD ---

    async def get_all_locations(self) -> List[Location]:
        result = await self.session.exec(select(Location).order_by(Location.terminal_id))
        return list(result.all())

    async def get_location(self, location_id: uuid_pkg.UUID) -> Location:
        location = await self.session.get(Location, location_id)
        if not location:
            raise FileNotFoundError("Lokasi tidak ditemukan.")
        return location

    async def create_location(self, data: Dict[str, Any], actor: Optional[User] = None) -> Location:
        data = {k: v for k, v in data.items() if k not in ("id", "kode_terminal", "total_jam_tutup")}
        if data["terminal_id"].lower() in await self._existing_terminal_ids():
            raise ValueError(f"Terminal ID '{data['terminal_id']}' sudah terdaftar.")

        location = Location(
            **data,
            kode_terminal=self._generate_unique_code(await self._existing_codes()),
            total_jam_tutup=calculate_total_jam_tutup(data.get("jam_buka"), data.get("jam_tutup")),
        )
        self.session.add(location)
        await self._commit("lokasi")
        await self.session.refresh(location)

        await log_activity(
            self.session, actor, ActivityAction.CREATE,
            f"Location: {location.terminal_id}", f"Created new location {location.nama_lokasi}",
        )
        return location

    async def update_location(
        self, location_id: uuid_pkg.UUID, data: Dict[str, Any], actor: Optional[User] = None
    ) -> Location:
        location = await self.get_location(location_id)
        # kode_terminal is system generated and never changes
        data = {k: v for k, v in data.items() if k not in ("id", "kode_terminal", "total_jam_tutup")}

        new_tid = data.get("terminal_id")
        if new_tid and new_tid.lower() != location.terminal_id.lower():
            if new_tid.lower() in await self._existing_terminal_ids():
                raise ValueError(f"Terminal ID '{new_tid}' sudah terdaftar.")

        if "jam_buka" in data or "jam_tutup" in data:
            location.total_jam_tutup = calculate_total_jam_tutup(
                data.get("jam_buka") or location.jam_buka,
                data.get("jam_tutup") or location.jam_tutup,
            )
        for key, value in data.items():
            setattr(location, key, value)

        self.session.add(location)
        await self._commit("lokasi")
        await self.session.refresh(location)

        await log_activity(
            self.session, actor, ActivityAction.UPDATE,
            f"Location: {location.terminal_id}", f"Updated location {location.nama_lokasi}",
        )
        return location

    async def delete_location(self, location_id: uuid_pkg.UUID, actor: Optional[User] = None) -> None:
        location = await self.get_location(location_id)
        terminal_id, nama_lokasi = location.terminal_id, location.nama_lokasi
        await self.session.delete(location)
        await self._commit("lokasi")

        await log_activity(
            self.session, actor, ActivityAction.DELETE,
            f"Location: {terminal_id}", f"Deleted location {nama_lokasi}",
        )

    # --- CSV ---

    async def import_csv(self, content: bytes, actor: Optional[User] = None) -> Dict[str, Any]:
        """
        Imports locations from a CSV in template column order (header row skipped).
        Rows without a terminal id are ignored; terminal ids already known
        (case-insensitive, including earlier rows of the same file) are
        reported in `skipped` as "TID - name".
        """
        try:
            df = pd.read_csv(
                io.BytesIO(content), dtype=str, keep_default_na=False, header=0, skip_blank_lines=True
            )
        except pd.errors.EmptyDataError:
            return {"success": 0, "skipped": []}
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ValueError(f"Gagal membaca file CSV: {e}")

        known_ids = await self._existing_terminal_ids()
        codes = await self._existing_codes()
        skipped: List[str] = []
        success = 0

        for values in df.itertuples(index=False, name=None):
            values = list(values)
            terminal_id = _cell(values, 0)
            if not terminal_id:
                continue

            fields = {
                column: _cell(values, i) or IMPORT_DEFAULTS[column]
                for i, column in enumerate(LOCATION_CSV_COLUMNS)
                if column != "terminal_id"
            }
            if terminal_id.lower() in known_ids:
                skipped.append(f"{terminal_id} - {fields['nama_lokasi']}")
                continue

            self.session.add(
                Location(
                    terminal_id=terminal_id,
                    kode_terminal=self._generate_unique_code(codes),
                    total_jam_tutup=calculate_total_jam_tutup(fields["jam_buka"], fields["jam_tutup"]),
                    flag_aktif=True,
                    **fields,
                )
            )
            known_ids.add(terminal_id.lower())
            success += 1

        await self._commit("import lokasi")
        logger.info("Imported %d locations, skipped %d", success, len(skipped))

        await log_activity(
            self.session, actor, ActivityAction.IMPORT, LOCATION_TARGET,
            f"Imported {success} records. Skipped {len(skipped)}.",
        )
        return {"success": success, "skipped": skipped}

    async def export_csv(self, actor: Optional[User] = None) -> str:
        locations = await self.get_all_locations()
        df = pd.DataFrame(
            [[getattr(loc, col) for col in LOCATION_CSV_COLUMNS] for loc in locations],
            columns=LOCATION_CSV_COLUMNS,
        )
        await log_activity(
            self.session, actor, ActivityAction.EXPORT, LOCATION_TARGET,
            "Exported full location database to CSV",
        )
        return df.to_csv(index=False, quoting=csv.QUOTE_ALL)

    @staticmethod
    def template_csv() -> str:
        df = pd.DataFrame([TEMPLATE_EXAMPLE_ROW], columns=LOCATION_CSV_COLUMNS)
        return df.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC)
