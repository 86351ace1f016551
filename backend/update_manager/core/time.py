"""Utilities for timezone-aware timestamps."""

from datetime import UTC, datetime
from typing import Optional

# Formats seen from Windows agents besides ISO-8601.
_FALLBACK_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
)


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(UTC)


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an agent-supplied timestamp into an aware UTC datetime.

    Returns ``None`` for empty or unparseable input; agents report dates in
    whatever shape the OS hands them and a bad date must not sink a report.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in _FALLBACK_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            else:
                return None

    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        # Offsets that push the value past datetime.min/max.
        return None
