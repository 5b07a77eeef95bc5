from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


_FRACTION_RE = re.compile(r"\.(\d+)")
_GRAPH_DT_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _to_utc_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_graph_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a Graph dateTime string into an aware UTC datetime.

    Graph returns seven fractional digits and, inside a dateTimeTimeZone,
    no offset at all. Values without an offset are taken as UTC, which is
    what the client asks for in its Prefer header.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return _to_utc_datetime(datetime.fromisoformat(text))


def to_graph_datetime(value: datetime) -> str:
    return _to_utc_datetime(value).strftime(_GRAPH_DT_FORMAT)


def format_utc_dt(dt_utc: Optional[datetime]) -> str:
    if dt_utc is None:
        return "-"
    return _to_utc_datetime(dt_utc).isoformat().replace("+00:00", "Z")


def format_local_dt(
    dt_utc: Optional[datetime], tz: ZoneInfo, with_date: bool = True
) -> str:
    if dt_utc is None:
        return "-"
    local_dt = dt_utc.astimezone(tz)
    if with_date:
        return local_dt.strftime("%Y-%m-%d %H:%M:%S %Z")
    return local_dt.strftime("%H:%M")


def tomorrow_slot(
    tz: ZoneInfo, now: datetime | None = None
) -> Tuple[datetime, datetime]:
    """Tomorrow 10:00 to 10:30 in ``tz``, returned as aware local datetimes."""
    if now is None:
        now = datetime.now(tz)
    local_now = now.astimezone(tz)
    tomorrow = (local_now + timedelta(days=1)).date()
    start = datetime(tomorrow.year, tomorrow.month, tomorrow.day, 10, 0, tzinfo=tz)
    return start, start + timedelta(minutes=30)


def clock_stamp(now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now()
    return now.strftime("%H:%M:%S")


def mask_secret(value: str) -> str:
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]
