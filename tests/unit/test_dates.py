from datetime import date, datetime, timezone

from eventhub.utils.dates import end_of_day, start_of_day, to_naive_local, today
from eventhub.utils.settings import refresh_settings


def test_start_and_end_of_day():
    moment = datetime(2026, 3, 14, 15, 9, 26)
    assert start_of_day(moment) == datetime(2026, 3, 14)
    assert start_of_day(date(2026, 3, 14)) == datetime(2026, 3, 14)
    assert end_of_day(moment) == datetime(2026, 3, 14, 23, 59, 59, 999999)


def test_today_truncates_reference_instant():
    assert today(datetime(2026, 3, 14, 23, 59)) == datetime(2026, 3, 14)


def test_to_naive_local_leaves_naive_values_alone():
    naive = datetime(2026, 3, 14, 10, 0)
    assert to_naive_local(naive) is naive
    assert to_naive_local(None) is None


def test_to_naive_local_converts_aware_values_to_configured_zone(monkeypatch):
    monkeypatch.setenv("EVENTHUB_TIMEZONE", "America/New_York")
    refresh_settings()
    aware = datetime(2026, 7, 1, 16, 0, tzinfo=timezone.utc)
    assert to_naive_local(aware) == datetime(2026, 7, 1, 12, 0)
