import uuid as uuid_pkg
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, StringConstraints

from ...models.location import LocationBase

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Jam = Annotated[str, StringConstraints(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")]


class LocationCreate(LocationBase):
    terminal_id: RequiredText
    nama_lokasi: RequiredText
    jam_buka: Jam = "00:00"
    jam_tutup: Jam = "23:59"
    flm: Literal["ADVANTAGE", "BRINKS-AMS", "BRINKS-ICS", "KEJAR"] = "ADVANTAGE"
    slm: Literal["DN", "DATINDO"] = "DN"
    penempatan: Literal["INDOMARET", "ALFAMART", "ALFAMIDI"] = "INDOMARET"


class LocationUpdate(BaseModel):
    terminal_id: Optional[RequiredText] = None
    tanggal_aktivasi: Optional[str] = None
    tanggal_relokasi: Optional[str] = None
    kode_toko: Optional[str] = None
    nama_lokasi: Optional[RequiredText] = None
    alamat: Optional[str] = None
    wilayah: Optional[str] = None
    provinsi: Optional[str] = None
    dc_toko: Optional[str] = None
    titik_kordinat: Optional[str] = None
    jam_buka: Optional[Jam] = None
    jam_tutup: Optional[Jam] = None
    flm: Optional[Literal["ADVANTAGE", "BRINKS-AMS", "BRINKS-ICS", "KEJAR"]] = None
    slm: Optional[Literal["DN", "DATINDO"]] = None
    vendor_modem: Optional[str] = None
    nomor_modem: Optional[str] = None
    kebersihan: Optional[str] = None
    penempatan: Optional[Literal["INDOMARET", "ALFAMART", "ALFAMIDI"]] = None
    jenis_box: Optional[str] = None
    tipe_mesin: Optional[str] = None
    sn_atm: Optional[str] = None
    vendor_ups: Optional[str] = None
    sn_ups: Optional[str] = None
    vendor_lcd: Optional[str] = None
    sn_lcd: Optional[str] = None
    flag_aktif: Optional[bool] = None


class LocationRead(LocationBase):
    id: uuid_pkg.UUID
    kode_terminal: str
    total_jam_tutup: float


class ImportResult(BaseModel):
    success: int
    skipped: List[str]
