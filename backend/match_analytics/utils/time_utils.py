from datetime import datetime
from typing import Union
from pytz import utc

# Kickoff timestamps and log records are kept in UTC
DEFAULT_TZ = utc

def get_current_time() -> datetime:
    """Get current time in UTC."""
    return datetime.now(DEFAULT_TZ)

def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Naive values are assumed to be UTC. A trailing 'Z' is accepted.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return DEFAULT_TZ.localize(parsed)
    return parsed
