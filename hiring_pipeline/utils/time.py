from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Read a datetime or ISO 8601 string as an aware UTC datetime.

    Naive values are taken as UTC. Returns None for anything that does not
    parse, including empty strings and non-string objects.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_duration(seconds: float) -> str:
    """Render an elapsed time as "3d 4h", "5h" or "< 1h"."""
    total = int(seconds) if seconds > 0 else 0
    days, remainder = divmod(total, 86400)
    hours = remainder // 3600

    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h"
    return "< 1h"
