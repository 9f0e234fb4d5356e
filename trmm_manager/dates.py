from datetime import datetime
from typing import Optional


FALLBACK_LAST_SEEN_FORMAT = "%H:%M %d/%m/%Y"


def parse_iso_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp with or without fractional seconds."""
    text = str(value or "").strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_last_seen_timestamp(value: Optional[str], fmt: Optional[str] = None) -> str:
    """Render a server timestamp in local time, or return it unchanged if unparsable."""
    text = str(value or "").strip()
    if not text:
        return "N/A"
    parsed = parse_iso_timestamp(text)
    if parsed is None:
        return text
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    pattern = str(fmt or "").strip() or FALLBACK_LAST_SEEN_FORMAT
    try:
        rendered = parsed.strftime(pattern)
    except ValueError:
        rendered = ""
    return rendered or parsed.strftime(FALLBACK_LAST_SEEN_FORMAT)


def to_iso_with_offset(moment: datetime) -> str:
    """ISO-8601 with seconds precision and a `+HH:MM` offset."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.replace(microsecond=0).isoformat()
