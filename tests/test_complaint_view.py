import uuid
from datetime import datetime, timedelta, timezone

from problemlog.models.complaint import Complaint, ComplaintComment
from problemlog.models.location import Location
from problemlog.services import complaint_view

from .conftest import dt


def _complaint(**kwargs):
    defaults = dict(
        id=uuid.uuid4(),
        no_tiket="TKT-12345",
        nasabah="Andi Wijaya",
        terminal_id="S1A2B3",
        waktu_trx=dt("2024-05-20T08:00:00"),
        waktu_aduan=dt("2024-05-20T08:30:00"),
        jenis_aduan="Uang tidak keluar",
        status="OPEN",
    )
    defaults.update(kwargs)
    return Complaint(**defaults)


def _comment(comment_id, user_id="u-1", text="Sedang dicek"):
    return ComplaintComment(
        id=comment_id,
        complaint_id=uuid.uuid4(),
        user_id=user_id,
        user_name="Budi",
        user_role="Helpdesk",
        avatar="",
        text=text,
        timestamp=dt("2024-05-20T09:00:00"),
    )


class TestCalculateDowntime:
    def test_hours_and_minutes_since_complaint(self):
        now = dt("2024-05-20T11:15:00")
        assert complaint_view.calculate_downtime(now, "OPEN", dt("2024-05-20T08:30:00")) == "2j 45m"

    def test_closed_complaint_is_done(self):
        now = dt("2024-05-21T00:00:00")
        assert complaint_view.calculate_downtime(now, "CLOSED", dt("2024-05-20T08:30:00")) == "Selesai"

    def test_future_complaint_time_is_zero(self):
        now = dt("2024-05-20T08:00:00")
        assert complaint_view.calculate_downtime(now, "IN PROGRESS", dt("2024-05-20T09:00:00")) == "0j 0m"

    def test_hours_are_not_wrapped_into_days(self):
        now = dt("2024-05-22T08:30:00")
        assert complaint_view.calculate_downtime(now, "HOLD", dt("2024-05-20T08:30:00")) == "48j 0m"

    def test_aware_and_naive_values_compare_in_utc(self):
        now = datetime(2024, 5, 20, 10, 0, tzinfo=timezone(timedelta(hours=7)))
        assert complaint_view.calculate_downtime(now, "OPEN", dt("2024-05-20T02:00:00")) == "1j 0m"

    def test_open_downtime_never_decreases(self):
        received = dt("2024-05-20T08:30:00")

        def minutes(label):
            hours, mins = label.split()
            return int(hours[:-1]) * 60 + int(mins[:-1])

        earlier = dt("2024-05-20T08:29:00")
        readings = []
        for step in range(0, 60 * 50, 37):
            now = earlier + timedelta(minutes=step)
            readings.append(minutes(complaint_view.calculate_downtime(now, "OPEN", received)))
        assert readings == sorted(readings)
        assert readings[0] == 0

    def test_closed_stays_done_as_time_passes(self):
        received = dt("2024-05-20T08:30:00")
        for now in (dt("2024-05-20T09:00:00"), dt("2024-05-23T09:00:00")):
            assert complaint_view.calculate_downtime(now, "CLOSED", received) == "Selesai"


class TestUnreadCount:
    def test_never_opened_counts_every_comment(self):
        assert complaint_view.unread_count(3, None) == 3

    def test_seen_comments_are_subtracted(self):
        assert complaint_view.unread_count(5, 2) == 3

    def test_never_negative(self):
        assert complaint_view.unread_count(1, 4) == 0


class TestSearch:
    def test_empty_term_matches_everything(self):
        assert complaint_view.matches_search(_complaint(), "")
        assert complaint_view.matches_search(_complaint(), None)

    def test_matches_ticket_customer_and_terminal_case_insensitively(self):
        complaint = _complaint()
        assert complaint_view.matches_search(complaint, "tkt-123")
        assert complaint_view.matches_search(complaint, "WIJAYA")
        assert complaint_view.matches_search(complaint, "s1a2")

    def test_does_not_match_complaint_type(self):
        assert not complaint_view.matches_search(_complaint(), "uang")


def test_filter_locations_matches_terminal_or_name():
    locations = [
        Location(terminal_id="S1A2B3", nama_lokasi="Indomaret Sudirman", kode_terminal="RND-1000"),
        Location(terminal_id="T9X8Y7", nama_lokasi="Alfamart Thamrin", kode_terminal="RND-1001"),
    ]
    assert [o.terminal_id for o in complaint_view.filter_locations(locations, "thamrin")] == ["T9X8Y7"]
    assert [o.terminal_id for o in complaint_view.filter_locations(locations, "s1a")] == ["S1A2B3"]
    assert len(complaint_view.filter_locations(locations, "")) == 2


def test_build_row_derives_viewer_fields():
    complaint = _complaint(comments=[_comment(1, "u-1"), _comment(2, "u-2"), _comment(3, "u-2")])
    row = complaint_view.build_row(complaint, 1, "u-1", dt("2024-05-20T09:30:00"))

    assert row.downtime == "1j 0m"
    assert row.comment_count == 3
    assert row.unread_count == 2
    assert row.waktu_aduan_label == "20 Mei 2024 08:30"
    assert [c.is_own for c in row.comments] == [True, False, False]


def test_build_rows_keeps_order_and_filters():
    first = _complaint(no_tiket="TKT-11111", nasabah="Andi")
    second = _complaint(no_tiket="TKT-22222", nasabah="Rina")
    rows = complaint_view.build_rows([first, second], {}, "u-1", dt("2024-05-20T09:30:00"))
    assert [r.no_tiket for r in rows] == ["TKT-11111", "TKT-22222"]

    rows = complaint_view.build_rows([first, second], {}, "u-1", dt("2024-05-20T09:30:00"), "rina")
    assert [r.no_tiket for r in rows] == ["TKT-22222"]
