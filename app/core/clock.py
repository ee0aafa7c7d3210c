import time
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Taken once, when the service is first imported into the process
PROCESS_STARTED_AT = time.monotonic()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    # 2024-01-01T12:00:00.000Z
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_epoch_ms(moment: datetime) -> int:
    # floor, same truncation as to_iso
    return (moment - EPOCH) // timedelta(milliseconds=1)


def utc_now_iso() -> str:
    return to_iso(utc_now())


def process_uptime() -> float:
    """Seconds since the process loaded the service, never negative."""
    return max(0.0, time.monotonic() - PROCESS_STARTED_AT)
