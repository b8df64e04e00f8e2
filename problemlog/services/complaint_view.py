# problemlog/services/complaint_view.py
"""
Derived fields for the complaint list and comment thread.

Everything here is a pure function of its arguments; callers pass `now`
explicitly so the values can be tested without touching the clock.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..core.constants import ComplaintStatus
from ..models.complaint import Complaint, ComplaintComment
from ..models.location import Location
from ..schemas.complaint import CommentRead, ComplaintRow, TerminalOption
from ..utils.dates import format_datetime, to_naive_utc

DOWNTIME_DONE = "Selesai"


def calculate_downtime(now: datetime, status: str, waktu_aduan: datetime) -> str:
    """
    Time since the complaint was received, as "{hours}j {minutes}m".
    Closed complaints show "Selesai"; a complaint time in the future shows "0j 0m".
    """
    if status == ComplaintStatus.CLOSED.value:
        return DOWNTIME_DONE

    elapsed = to_naive_utc(now) - to_naive_utc(waktu_aduan)
    total_seconds = int(elapsed.total_seconds())
    if total_seconds < 0:
        return "0j 0m"

    hours, remainder = divmod(total_seconds, 3600)
    return f"{hours}j {remainder // 60}m"


def unread_count(comment_count: int, last_seen: Optional[int]) -> int:
    return max(0, comment_count - (last_seen or 0))


def matches_search(complaint: Complaint, term: Optional[str]) -> bool:
    """Case-insensitive substring match on ticket number, customer or terminal."""
    if not term:
        return True
    needle = term.lower()
    return (
        needle in complaint.no_tiket.lower()
        or needle in complaint.nasabah.lower()
        or needle in complaint.terminal_id.lower()
    )


def filter_locations(locations: Iterable[Location], term: Optional[str]) -> List[TerminalOption]:
    """Terminal type-ahead: terminal id or location name contains the term."""
    needle = (term or "").lower()
    return [
        TerminalOption(terminal_id=loc.terminal_id, nama_lokasi=loc.nama_lokasi)
        for loc in locations
        if needle in loc.terminal_id.lower() or needle in loc.nama_lokasi.lower()
    ]


def is_own_comment(comment: ComplaintComment, viewer_id: Optional[str]) -> bool:
    return viewer_id is not None and comment.user_id == str(viewer_id)


def comment_to_read(comment: ComplaintComment, viewer_id: Optional[str]) -> CommentRead:
    return CommentRead(
        id=comment.id,
        user_id=comment.user_id,
        user_name=comment.user_name,
        user_role=comment.user_role,
        avatar=comment.avatar,
        text=comment.text,
        timestamp=comment.timestamp,
        is_own=is_own_comment(comment, viewer_id),
    )


def build_thread(complaint: Complaint, viewer_id: Optional[str]) -> List[CommentRead]:
    """Comments in insertion order, flagged when written by the viewer."""
    return [comment_to_read(c, viewer_id) for c in complaint.comments]


def build_row(
    complaint: Complaint,
    last_seen: Optional[int],
    viewer_id: Optional[str],
    now: datetime,
) -> ComplaintRow:
    comments = build_thread(complaint, viewer_id)
    return ComplaintRow(
        id=complaint.id,
        no_tiket=complaint.no_tiket,
        nasabah=complaint.nasabah,
        terminal_id=complaint.terminal_id,
        waktu_trx=complaint.waktu_trx,
        waktu_aduan=complaint.waktu_aduan,
        jenis_aduan=complaint.jenis_aduan,
        severity=complaint.severity,
        pengecekan=complaint.pengecekan,
        status=complaint.status,
        comments=comments,
        downtime=calculate_downtime(now, complaint.status, complaint.waktu_aduan),
        comment_count=len(comments),
        unread_count=unread_count(len(comments), last_seen),
        waktu_trx_label=format_datetime(complaint.waktu_trx),
        waktu_aduan_label=format_datetime(complaint.waktu_aduan),
    )


def build_rows(
    complaints: Iterable[Complaint],
    seen_counts: Dict[str, int],
    viewer_id: Optional[str],
    now: datetime,
    search: Optional[str] = None,
) -> List[ComplaintRow]:
    """
    List rows for one viewer. Input order is kept (the repository already
    sorts by complaint time, newest first).
    """
    return [
        build_row(c, seen_counts.get(str(c.id)), viewer_id, now)
        for c in complaints
        if matches_search(c, search)
    ]
