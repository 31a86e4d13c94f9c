import datetime as dt
import hashlib
from typing import Any

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%d.%m.%Y",
    "%m/%d/%Y",
)

def text_sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()

def to_datetime(v: Any) -> dt.datetime:
    """Parse a date-like cell. Raises ValueError when nothing matches."""
    if isinstance(v, dt.datetime):
        return v
    if isinstance(v, dt.date):
        return dt.datetime(v.year, v.month, v.day)
    s = str(v).strip()
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(s, fmt)
        except ValueError:
            pass
    try:
        return dt.datetime.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Invalid date value: {s!r}") from None

def to_date_str(v: Any) -> str | None:
    if v is None or v == "":
        return None
    try:
        return to_datetime(v).date().isoformat()
    except ValueError:
        return None
