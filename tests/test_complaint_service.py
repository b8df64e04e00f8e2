import random

import pytest
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from problemlog.core.errors import PersistenceError
from problemlog.models.activity_log import ActivityLog
from problemlog.services.complaint_service import ComplaintService, generate_ticket_number

from .conftest import dt, make_user

COMPLAINT_FORM = {
    "nasabah": "Andi Wijaya",
    "terminal_id": "S1A2B3",
    "waktu_trx": dt("2024-05-20T08:00:00"),
    "waktu_aduan": dt("2024-05-20T08:30:00"),
    "jenis_aduan": "Uang tidak keluar",
}


def test_ticket_number_format():
    number = generate_ticket_number(random.Random(7))
    assert number.startswith("TKT-")
    assert len(number) == 9
    assert 10000 <= int(number[4:]) <= 99999


def test_ticket_number_without_generator_uses_module_random(monkeypatch):
    monkeypatch.setattr(random, "randint", lambda a, b: 54321)
    assert generate_ticket_number() == "TKT-54321"


async def test_create_applies_defaults_and_logs(session, helpdesk):
    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)

    assert complaint.no_tiket.startswith("TKT-")
    assert (complaint.severity, complaint.pengecekan, complaint.status) == ("MEDIUM", "VALID", "OPEN")
    assert complaint.comments == []

    logs = (await session.exec(select(ActivityLog))).all()
    assert [(l.action, l.target) for l in logs] == [("CREATE", "Data Aduan")]
    assert complaint.no_tiket in logs[0].details


async def test_list_is_newest_complaint_first(session, helpdesk):
    service = ComplaintService(session)
    await service.create_complaint({**COMPLAINT_FORM, "nasabah": "Lama"}, helpdesk)
    await service.create_complaint(
        {**COMPLAINT_FORM, "nasabah": "Baru", "waktu_aduan": dt("2024-05-21T08:30:00")}, helpdesk
    )
    assert [c.nasabah for c in await service.list_complaints()] == ["Baru", "Lama"]


async def test_update_changes_only_sent_fields_and_keeps_comments(session, helpdesk):
    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)
    await service.append_comment(complaint.id, "Sudah dicek", helpdesk)

    updated = await service.update_complaint(complaint.id, {"status": "CLOSED", "nasabah": None}, helpdesk)

    assert updated.status == "CLOSED"
    assert updated.nasabah == "Andi Wijaya"
    assert updated.no_tiket == complaint.no_tiket
    assert [c.text for c in updated.comments] == ["Sudah dicek"]


async def test_update_unknown_complaint(session, helpdesk):
    import uuid

    with pytest.raises(FileNotFoundError):
        await ComplaintService(session).update_complaint(uuid.uuid4(), {"status": "HOLD"}, helpdesk)


async def test_comments_snapshot_author_and_keep_order(session, helpdesk, technician):
    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)

    await service.append_comment(complaint.id, "  Pertama  ", helpdesk)
    await service.append_comment(complaint.id, "Kedua", technician)

    stored = await service.get_complaint(complaint.id)
    assert [c.text for c in stored.comments] == ["Pertama", "Kedua"]
    assert stored.comments[1].user_name == "Tono Teknisi"
    assert stored.comments[1].user_role == "Technician"
    assert stored.comments[1].user_id == str(technician.id)


async def test_blank_comment_is_rejected(session, helpdesk):
    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)
    with pytest.raises(ValueError):
        await service.append_comment(complaint.id, "   ", helpdesk)
    assert await service.count_comments(complaint.id) == 0


async def test_unread_tracking_per_viewer(session, helpdesk, technician):
    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)
    key = str(complaint.id)

    await service.append_comment(complaint.id, "Mohon dicek", helpdesk)
    await service.append_comment(complaint.id, "Baik", helpdesk)

    # The poster has seen their own comments; the technician never opened the thread
    assert (await service.get_seen_counts(str(helpdesk.id)))[key] == 2
    assert key not in await service.get_seen_counts(str(technician.id))

    await service.open_thread(complaint.id, technician)
    assert (await service.get_seen_counts(str(technician.id)))[key] == 2

    await service.append_comment(complaint.id, "Teknisi berangkat", helpdesk)
    assert (await service.get_seen_counts(str(technician.id)))[key] == 2


async def test_commit_failure_becomes_persistence_error(session, helpdesk, monkeypatch):
    from sqlalchemy.exc import OperationalError

    async def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", broken_commit)
    with pytest.raises(PersistenceError):
        await ComplaintService(session).create_complaint(COMPLAINT_FORM, make_user())


async def test_create_and_comment_survive_missing_activity_table(engine, session, helpdesk, technician):
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE activity_logs")

    service = ComplaintService(session)
    complaint = await service.create_complaint(COMPLAINT_FORM, helpdesk)
    assert complaint.no_tiket.startswith("TKT-")
    assert complaint.nasabah == "Andi Wijaya"

    comment = await service.append_comment(complaint.id, "Sedang dicek teknisi", technician)
    assert comment.text == "Sedang dicek teknisi"
    assert comment.user_name == "Tono Teknisi"

    updated = await service.update_complaint(complaint.id, {"status": "HOLD"}, helpdesk)
    assert updated.status == "HOLD"
    assert [c.text for c in updated.comments] == ["Sedang dicek teknisi"]


async def test_naive_timestamps_read_back_unchanged(engine, session, helpdesk):
    complaint = await ComplaintService(session).create_complaint(COMPLAINT_FORM, helpdesk)

    async with AsyncSession(engine) as fresh:
        stored = await ComplaintService(fresh).get_complaint(complaint.id)
    assert stored.waktu_aduan == dt("2024-05-20T08:30:00")
    assert stored.waktu_aduan.tzinfo is None
