from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

log = logging.getLogger(__name__)

# Tried in order; the first layout that parses wins.
PUB_DATE_LAYOUTS = (
    "%a, %d %b %Y %H:%M:%S %z",  # RFC 1123, numeric zone
    "%a, %d %b %Y %H:%M %z",
    "%d %b %Y %H:%M:%S %z",
    "%Y-%m-%dT%H:%M:%S%z",  # RFC 3339
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%a, %d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)

NAMED_ZONES = {
    "GMT": "+0000",
    "UTC": "+0000",
    "UT": "+0000",
    "Z": "+0000",
    "EST": "-0500",
    "EDT": "-0400",
    "CST": "-0600",
    "CDT": "-0500",
    "MST": "-0700",
    "MDT": "-0600",
    "PST": "-0800",
    "PDT": "-0700",
}

_TRAILING_ZONE = re.compile(r"\s([A-Z]{1,3})$")


def parse_pub_date(raw: str | None) -> datetime | None:
    """Return the UTC timestamp for a feed date string, or None if it cannot be read."""
    if not raw:
        return None
    value = _numeric_zone(" ".join(raw.split()))
    for layout in PUB_DATE_LAYOUTS:
        try:
            parsed = datetime.strptime(value, layout)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
        except ValueError:
            continue
        except OverflowError:
            # the offset pushed the instant outside years 1-9999
            break
    log.debug("Unrecognised publication date: %r", raw)
    return None


def _numeric_zone(value: str) -> str:
    match = _TRAILING_ZONE.search(value)
    if not match or match.group(1) not in NAMED_ZONES:
        return value
    return f"{value[: match.start(1)]}{NAMED_ZONES[match.group(1)]}"
