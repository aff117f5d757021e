"""UTC datetime utilities."""

import re
from datetime import datetime, timezone

# Tendermint renders nanosecond precision; datetime holds microseconds
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_rfc3339(value: str) -> datetime:
    """Parse '2023-01-02T03:04:05.123456789Z' into an aware UTC datetime."""
    text = value.strip().replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def from_unix_seconds(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_unix_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
