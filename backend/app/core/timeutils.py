from datetime import datetime, time, timedelta, timezone
from typing import Optional

from app.core.config import REPORT_UTC_OFFSET_HOURS


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalise aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into UTC.

    Values without an offset are wall-clock times in the reporting zone, the
    same zone the "today" counters use.
    """
    text = str(value or "").strip()
    if text.endswith("Z") or text.endswith("z"):
        text = f"{text[:-1]}+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=report_timezone())
    return ensure_utc(parsed)


def report_timezone() -> timezone:
    return timezone(timedelta(hours=REPORT_UTC_OFFSET_HOURS))


def today_bounds(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Start and end (exclusive) of the current reporting day, as UTC instants."""
    tz = report_timezone()
    local_now = (ensure_utc(now) or datetime.now(timezone.utc)).astimezone(tz)
    start = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def is_today(value: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if value is None:
        return False
    start, end = today_bounds(now)
    return start <= ensure_utc(value) < end
