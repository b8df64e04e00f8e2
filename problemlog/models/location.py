# problemlog/models/location.py
import uuid as uuid_pkg
from typing import Optional

from sqlmodel import Field, SQLModel


class LocationBase(SQLModel):
    terminal_id: str = Field(index=True, unique=True, max_length=50)
    tanggal_aktivasi: str = Field(default="-", max_length=8)  # YYYYMMDD
    tanggal_relokasi: str = Field(default="-", max_length=8)  # YYYYMMDD
    kode_toko: str = "-"
    nama_lokasi: str
    alamat: str = "-"
    wilayah: str = "-"
    provinsi: str = "-"
    dc_toko: str = "-"
    titik_kordinat: str = ""
    jam_buka: str = Field(default="00:00", max_length=5)  # HH:MM
    jam_tutup: str = Field(default="23:59", max_length=5)  # HH:MM
    flm: str = "ADVANTAGE"
    slm: str = "DN"
    vendor_modem: str = "-"
    nomor_modem: str = "-"
    kebersihan: str = "-"
    penempatan: str = "INDOMARET"
    jenis_box: str = "Standard"
    tipe_mesin: str = "ATM"
    sn_atm: str = "-"
    vendor_ups: str = "-"
    sn_ups: str = "-"
    vendor_lcd: str = "-"
    sn_lcd: str = "-"
    flag_aktif: bool = True


class Location(LocationBase, table=True):
    """ATM terminal location. `kode_terminal` is system generated and immutable."""

    __tablename__ = "locations"

    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True)
    kode_terminal: str = Field(index=True, unique=True, max_length=20)
    total_jam_tutup: float = Field(default=0)
