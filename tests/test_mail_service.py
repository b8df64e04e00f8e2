import io

import pytest
from fastapi import UploadFile
from sqlmodel import select

from problemlog.models.activity_log import ActivityLog
from problemlog.services.mail_service import MailService, in_folder, matches_search

from .conftest import make_user


@pytest.fixture
async def staff(session, helpdesk, admin, technician):
    session.add_all([helpdesk, admin, technician])
    await session.commit()
    return helpdesk, admin, technician


def _ids(mails):
    return [m.subject for m in mails]


async def test_send_delivers_to_recipients_and_cc(session, staff):
    helpdesk, admin, technician = staff
    service = MailService(session)

    mail = await service.send_mail(
        {"to": [admin.id], "cc": [technician.id], "subject": "Replenish", "content": "Mohon approval"},
        helpdesk,
    )

    assert mail.recipients == [{"id": str(admin.id), "name": "Siti Admin", "email": admin.email}]
    assert mail.read_by == [str(helpdesk.id)]
    assert _ids(await service.list_folder("inbox", str(admin.id))) == ["Replenish"]
    assert _ids(await service.list_folder("inbox", str(technician.id))) == ["Replenish"]
    assert _ids(await service.list_folder("sent", str(helpdesk.id))) == ["Replenish"]
    assert await service.list_folder("inbox", str(helpdesk.id)) == []

    logs = (await session.exec(select(ActivityLog))).all()
    assert [(l.action, l.target, l.details) for l in logs] == [("CREATE", "Mail", "Sent mail to Siti Admin")]


async def test_send_requires_a_recipient(session, staff):
    helpdesk, _, technician = staff
    with pytest.raises(ValueError, match="penerima"):
        await MailService(session).send_mail({"cc": [technician.id], "subject": "Tanpa tujuan"}, helpdesk)


async def test_unknown_or_disabled_recipient_is_rejected(session, staff):
    helpdesk, admin, _ = staff
    ghost = make_user(name="Mantan Pegawai", is_active=False)
    session.add(ghost)
    await session.commit()

    with pytest.raises(ValueError):
        await MailService(session).send_mail({"to": [admin.id, ghost.id]}, helpdesk)


async def test_unread_counts_follow_read_state(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    mail = await service.send_mail({"to": [admin.id], "subject": "Cek TID"}, helpdesk)

    assert await service.counts(str(admin.id)) == {"unread": 1, "drafts": 0}
    await service.open_mail(mail.id, admin)
    assert await service.counts(str(admin.id)) == {"unread": 0, "drafts": 0}
    await service.mark_unread(mail.id, admin)
    assert await service.counts(str(admin.id)) == {"unread": 1, "drafts": 0}
    # The sender's own state is separate
    assert str(helpdesk.id) in (await service.get_mail(mail.id, str(helpdesk.id))).read_by


async def test_star_is_per_user(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    mail = await service.send_mail({"to": [admin.id], "subject": "Bintang"}, helpdesk)

    starred = await service.toggle_star(mail.id, admin)
    assert starred.starred_by == [str(admin.id)]
    unstarred = await service.toggle_star(mail.id, admin)
    assert unstarred.starred_by == []


async def test_drafts_are_private_and_sent_in_place(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)

    draft = await service.save_draft({"to": [admin.id], "content": "Belum selesai"}, helpdesk)
    assert draft.is_draft
    assert draft.subject == "(No Subject)"
    assert await service.counts(str(helpdesk.id)) == {"unread": 0, "drafts": 1}
    assert await service.list_folder("inbox", str(admin.id)) == []
    with pytest.raises(FileNotFoundError):
        await service.get_mail(draft.id, str(admin.id))

    sent = await service.send_mail(
        {"to": [admin.id], "subject": "Final", "content": "Sudah selesai", "draft_id": draft.id}, helpdesk
    )
    assert sent.id == draft.id
    assert not sent.is_draft
    assert await service.list_folder("drafts", str(helpdesk.id)) == []
    assert _ids(await service.list_folder("inbox", str(admin.id))) == ["Final"]


async def test_empty_draft_is_not_saved(session, staff):
    with pytest.raises(ValueError):
        await MailService(session).save_draft({"subject": "", "content": ""}, staff[0])


async def test_someone_elses_draft_cannot_be_sent(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    draft = await service.save_draft({"subject": "Punya Budi"}, helpdesk)
    with pytest.raises(FileNotFoundError):
        await service.send_mail({"to": [helpdesk.id], "draft_id": draft.id}, admin)


async def test_trash_restore_and_purge_are_per_user(session, staff):
    helpdesk, admin, technician = staff
    service = MailService(session)
    mail = await service.send_mail({"to": [admin.id, technician.id], "subject": "Hapus"}, helpdesk)

    await service.delete_mail(mail.id, admin)
    assert await service.list_folder("inbox", str(admin.id)) == []
    assert _ids(await service.list_folder("trash", str(admin.id))) == ["Hapus"]
    # Other recipients are unaffected
    assert _ids(await service.list_folder("inbox", str(technician.id))) == ["Hapus"]
    assert await service.list_folder("trash", str(technician.id)) == []

    await service.restore_mail(mail.id, admin)
    assert _ids(await service.list_folder("inbox", str(admin.id))) == ["Hapus"]
    with pytest.raises(ValueError):
        await service.restore_mail(mail.id, admin)

    await service.delete_mail(mail.id, admin)
    await service.delete_mail(mail.id, admin)
    with pytest.raises(FileNotFoundError):
        await service.get_mail(mail.id, str(admin.id))
    assert _ids(await service.list_folder("sent", str(helpdesk.id))) == ["Hapus"]


async def test_row_is_removed_once_everyone_purged(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    mail = await service.send_mail({"to": [admin.id], "subject": "Sekali"}, helpdesk)
    mail_id = mail.id

    for user in (admin, helpdesk):
        await service.delete_mail(mail_id, user)
        await service.delete_mail(mail_id, user)

    assert (await session.exec(select(ActivityLog).where(ActivityLog.target == "Mail"))).all()
    session.expunge_all()
    with pytest.raises(FileNotFoundError):
        await service.get_mail(mail_id, str(helpdesk.id))


async def test_reply_quotes_the_original(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    mail = await service.send_mail({"to": [admin.id], "subject": "Laporan", "content": "ATM offline"}, helpdesk)

    reply = await service.reply_template(mail.id, admin)
    assert reply["to"] == [str(helpdesk.id)]
    assert reply["subject"] == "Re: Laporan"
    assert "Budi Santoso menulis:" in reply["content"]
    assert reply["content"].endswith("ATM offline")


async def test_search_and_unknown_folder(session, staff):
    helpdesk, admin, _ = staff
    service = MailService(session)
    await service.send_mail({"to": [admin.id], "subject": "Printer error", "content": "TID-1"}, helpdesk)
    await service.send_mail({"to": [admin.id], "subject": "Replenish", "content": "Jakarta"}, helpdesk)

    assert _ids(await service.list_folder("inbox", str(admin.id), "printer")) == ["Printer error"]
    assert _ids(await service.list_folder("inbox", str(admin.id), "budi")) == ["Replenish", "Printer error"]
    with pytest.raises(ValueError):
        await service.list_folder("spam", str(admin.id))


def test_folder_rules_without_database():
    from problemlog.models.mail import Mail

    mail = Mail(
        sender_id="a", sender_name="A", sender_email="a@example.com",
        recipients=[{"id": "b", "name": "B", "email": "b@example.com"}],
        subject="Halo", content="Isi",
    )
    assert in_folder(mail, "inbox", "b")
    assert not in_folder(mail, "inbox", "c")
    assert in_folder(mail, "sent", "a")
    assert matches_search(mail, "HAL")
    assert not matches_search(mail, "tidak ada")


async def test_attachment_is_written_under_mail_dir(tmp_path):
    upload = UploadFile(io.BytesIO(b"log error"), filename="log_error.txt")

    descriptor = await MailService.save_attachment(upload, str(tmp_path))

    assert descriptor["name"] == "log_error.txt"
    assert descriptor["size"] == 9
    assert descriptor["url"].startswith("/uploads/mail/")
    assert descriptor["url"].endswith(".txt")
    stored = tmp_path / "mail" / descriptor["url"].rsplit("/", 1)[1]
    assert stored.read_bytes() == b"log error"


async def test_empty_attachment_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        await MailService.save_attachment(UploadFile(io.BytesIO(b""), filename="kosong.txt"), str(tmp_path))
