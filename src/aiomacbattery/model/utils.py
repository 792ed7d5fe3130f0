"""Helper utils for the Graph models."""

import re
from datetime import UTC, datetime

_FRACTION = re.compile(r"\.(\d+)")


def convert_graph_timestamp(timestamp: str | None) -> datetime | None:
    """Convert a Graph ISO 8601 timestamp to an aware datetime object.

    Graph sends up to seven fractional digits and a trailing `Z`, which
    `datetime.fromisoformat` does not accept on every Python version, so the
    fraction is cut to microseconds first. Unparseable values become None.
    """
    if not timestamp:
        return None
    text = timestamp.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
