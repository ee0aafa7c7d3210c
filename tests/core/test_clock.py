import time
from datetime import datetime, timezone

from app.core import clock


def test_iso_and_epoch_ms_agree():
    moment = datetime(2024, 1, 1, 12, 0, 0, 999_999, tzinfo=timezone.utc)

    assert clock.to_iso(moment) == "2024-01-01T12:00:00.999Z"
    assert clock.to_epoch_ms(moment) == 1704110400999


def test_process_uptime_is_measured_from_import(monkeypatch):
    monkeypatch.setattr(clock, "PROCESS_STARTED_AT", time.monotonic() - 30)

    assert 30 <= clock.process_uptime() < 60


def test_process_uptime_is_never_negative(monkeypatch):
    monkeypatch.setattr(clock, "PROCESS_STARTED_AT", time.monotonic() + 60)

    assert clock.process_uptime() == 0.0
