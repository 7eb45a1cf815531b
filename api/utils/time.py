from datetime import date, datetime, time, timezone

def parse_iso_date(s: str) -> date:
    """Parses a YYYY-MM-DD string."""
    return date.fromisoformat(s.strip())

def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def compact_timestamp(dt: datetime) -> str:
    """Formats a datetime as YYYYMMDDHHMMSS in its own wall-clock time."""
    return dt.strftime("%Y%m%d%H%M%S")

def api_iso_z(dt: datetime | None) -> str | None:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    if dt is None:
        return None
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

def api_date(d: date | None) -> str | None:
    return d.isoformat() if d else None

def api_time(t: time | None) -> str | None:
    return t.strftime("%H:%M") if t else None
