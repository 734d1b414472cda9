"""
Date normalization.

Every date that leaves the extractor is either an ISO-8601 UTC instant
(YYYY-MM-DDTHH:MM:SSZ) or None.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dateparser

_NON_DIGIT_RE = re.compile(r'[^0-9]')

# Fields missing from a parsed string are filled from this fixed instant so
# the result never depends on the current date.
_PARSE_DEFAULT = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize a free-form date string.

    Strings carrying exactly eight digits (20240115, 2024/01/15) are read as
    YYYYMMDD at UTC midnight. Anything else goes through dateutil;
    unparseable input returns None.

    Examples:
        >>> normalize_date('20240115')
        '2024-01-15T00:00:00Z'
        >>> normalize_date('not a date') is None
        True
    """
    if not value or not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    digits = _NON_DIGIT_RE.sub('', trimmed)
    if len(digits) == 8:
        year, month, day = int(digits[:4]), int(digits[4:6]), int(digits[6:8])
        if 1 <= month <= 12 and 1 <= day <= 31:
            try:
                return format_instant(datetime(year, month, day, tzinfo=timezone.utc))
            except ValueError:
                # 2024-02-31 and friends fall through to the generic parser
                pass

    try:
        parsed = dateparser.parse(trimmed, default=_PARSE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed is None:
        return None
    return format_instant(parsed)
