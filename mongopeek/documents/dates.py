"""ISO-8601 date parsing for ``ISODate(...)`` and ``$date`` strings."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from .values import DateTime

_ISO_DATE_RE = re.compile(
    r"""
    ^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})
    (?:
        [T\ ](?P<hour>\d{2}):(?P<minute>\d{2})
        (?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?
        (?P<tz>Z|z|[+-]\d{2}:?\d{2})?
    )?$
    """,
    re.VERBOSE,
)


def _parse_offset(text: str) -> tzinfo:
    if text in ("Z", "z"):
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid UTC offset {text!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_iso_datetime(text: str, default_tz: Optional[tzinfo] = None) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Accepts full RFC 3339 (with or without fractional seconds), a bare date,
    and a timestamp without an offset. Values without an offset are placed in
    ``default_tz`` (UTC when not given).

    Raises:
        ValueError: If the text is not one of the accepted forms.
    """
    match = _ISO_DATE_RE.match(text.strip())
    if not match:
        raise ValueError(f"unrecognised date {text!r}")

    parts = match.groupdict()
    fraction = parts["fraction"] or ""
    microsecond = int((fraction + "000000")[:6]) if fraction else 0
    tz = _parse_offset(parts["tz"]) if parts["tz"] else (default_tz or timezone.utc)

    # datetime() validates the calendar fields
    return datetime(
        int(parts["year"]),
        int(parts["month"]),
        int(parts["day"]),
        int(parts["hour"] or 0),
        int(parts["minute"] or 0),
        int(parts["second"] or 0),
        microsecond,
        tzinfo=tz,
    )


def parse_iso_date(text: str, default_tz: Optional[tzinfo] = None) -> DateTime:
    """Parse an ISO-8601 timestamp into a ``DateTime`` value."""
    return DateTime.from_datetime(parse_iso_datetime(text, default_tz))


def format_iso_date(value: DateTime) -> Optional[str]:
    """Render a ``DateTime`` as ``YYYY-MM-DDTHH:MM:SS[.mmm]Z``.

    Returns None for instants outside years 1970-9999, which have no
    relaxed extended-JSON form.
    """
    if value.millis < 0:
        return None
    try:
        moment = value.to_datetime()
    except OverflowError:
        return None
    if moment.year > 9999:
        return None
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond // 1000:03d}"
    return text + "Z"
