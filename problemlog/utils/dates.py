from datetime import datetime, timezone
from typing import Optional

BULAN_SINGKAT = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]


def utcnow() -> datetime:
    """Naive UTC now. Timestamps are stored naive (UTC) in every dialect."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_datetime(value: Optional[datetime]) -> str:
    """Short Indonesian date, e.g. '20 Mei 2024 08:30'. Empty values render as '-'."""
    if not value:
        return "-"
    return f"{value.day} {BULAN_SINGKAT[value.month - 1]} {value.year} {value:%H:%M}"
