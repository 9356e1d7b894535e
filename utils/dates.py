from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    # naive datetimes are taken as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def to_ms(moment: datetime) -> int:
    return int(as_utc(moment).timestamp() * 1000)


def from_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def academy_tz() -> ZoneInfo:
    return ZoneInfo(current_app.config.get("ACADEMY_TIMEZONE", "America/Lima"))


def parse_date(value: str) -> date:
    # Expect "YYYY-MM-DD"
    return date.fromisoformat((value or "").strip())
