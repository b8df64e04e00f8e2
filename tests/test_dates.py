from datetime import datetime, timedelta, timezone

from problemlog.utils.dates import format_datetime, to_naive_utc


def test_format_datetime_uses_indonesian_month_names():
    assert format_datetime(datetime(2024, 8, 5, 7, 3)) == "5 Agu 2024 07:03"
    assert format_datetime(datetime(2024, 12, 31, 23, 59)) == "31 Des 2024 23:59"


def test_format_datetime_empty_is_dash():
    assert format_datetime(None) == "-"


def test_to_naive_utc_converts_aware_values():
    aware = datetime(2024, 5, 20, 15, 0, tzinfo=timezone(timedelta(hours=7)))
    assert to_naive_utc(aware) == datetime(2024, 5, 20, 8, 0)
    assert to_naive_utc(datetime(2024, 5, 20, 8, 0)) == datetime(2024, 5, 20, 8, 0)
