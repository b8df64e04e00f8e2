# problemlog/services/dashboard_service.py
"""
Monitoring overview built from the complaint list.

Buckets are a read-time convenience: a complaint lands in every bucket whose
keywords appear in its complaint type, so buckets may overlap and some
complaints may fall in none of them.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from ..core.constants import ComplaintStatus
from ..models.complaint import Complaint

PROBLEM_TERBARU = "PROBLEM_TERBARU"

# Bucket name -> keywords matched against jenis_aduan (lower case)
BUCKET_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "JARKOM": ("jaringan", "network", "communication", "komunikasi", "signal", "sinyal", "rto", "modem", "offline"),
    "FLM": ("cassette", "kaset", "printer", "paper", "kertas", "struk", "jam", "flm"),
    "SLM": ("reader", "dispenser", "hardware", "sparepart", "mesin", "slm"),
    "AMS": ("host", "system", "sistem", "software", "maintenance", "ams"),
    "REQ_REPLENISH": ("replenish", "cash out", "cash empty", "habis", "uang"),
    "LOKASI": ("listrik", "power", "padam", "lokasi", "gedung", "toko tutup"),
}

BUCKET_NAMES: Tuple[str, ...] = (PROBLEM_TERBARU,) + tuple(BUCKET_KEYWORDS)

TONE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("critical", ("host", "down", "communication", "power")),
    ("warning", ("printer", "hardware", "reader")),
    ("info", ("cash", "full")),
)


def active_incidents(complaints: Iterable[Complaint]) -> List[Complaint]:
    return [c for c in complaints if c.status != ComplaintStatus.CLOSED.value]


def matches_bucket(complaint: Complaint, bucket: str) -> bool:
    if bucket == PROBLEM_TERBARU:
        return True
    keywords = BUCKET_KEYWORDS.get(bucket)
    if keywords is None:
        raise ValueError(f"Kategori dashboard tidak dikenal: {bucket}")
    text = (complaint.jenis_aduan or "").lower()
    return any(k in text for k in keywords)


def bucket_complaints(complaints: Iterable[Complaint], bucket: str) -> List[Complaint]:
    """Complaints of one bucket, newest complaint time first."""
    if bucket not in BUCKET_NAMES:
        raise ValueError(f"Kategori dashboard tidak dikenal: {bucket}")
    rows = [c for c in complaints if matches_bucket(c, bucket)]
    return sorted(rows, key=lambda c: c.waktu_aduan, reverse=True)


def partition(complaints: Iterable[Complaint]) -> Dict[str, List[Complaint]]:
    complaints = list(complaints)
    return {name: bucket_complaints(complaints, name) for name in BUCKET_NAMES}


def problem_tone(text: str) -> str:
    """Badge colour family for a problem description."""
    lowered = (text or "").lower()
    for tone, keywords in TONE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return tone
    return "neutral"


def summary(complaints: Iterable[Complaint], now: datetime) -> Dict[str, object]:
    complaints = list(complaints)
    by_status = {s.value: 0 for s in ComplaintStatus}
    for c in complaints:
        by_status[c.status] = by_status.get(c.status, 0) + 1
    return {
        "total": len(complaints),
        "active": len(active_incidents(complaints)),
        "by_status": by_status,
        "generated_at": now,
    }
