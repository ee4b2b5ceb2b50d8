# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value formatting utilities

Conversions between the values stored in EXIF and the string formats used
by editors:

- EXIF wire format: ``YYYY:MM:DD HH:MM:SS``
- Calendar date:    ``YYYY-MM-DD``
- Clock time:       ``HH:MM:SS`` (seconds optional on input)
- Civil date/time:  ``YYYY-MM-DDTHH:MM:SS``
- GPS time:         ``[hour, minute, second]``

An empty input always converts to an empty output.

Copyright 2025 DNAi inc.
"""

import re
from datetime import datetime
from typing import List, Optional, Sequence, Union

EXIF_DATETIME_FORMAT = '%Y:%m:%d %H:%M:%S'
EXIF_DATE_FORMAT = '%Y:%m:%d'
INPUT_DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'
INPUT_DATE_FORMAT = '%Y-%m-%d'
INPUT_TIME_FORMAT = '%H:%M:%S'

# Permissive: whitespace between date and time is optional, seconds may be missing
_EXIF_DATETIME_RE = re.compile(r'(\d{4}):(\d{2}):(\d{2})\s*(\d{2}):(\d{2})(?::(\d{2}))?')
_EXIF_DATE_RE = re.compile(r'(\d{4}):(\d{2}):(\d{2})')
_INPUT_DATETIME_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:T(\d{2}):(\d{2})(?::(\d{2}))?)?$')
_INPUT_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
_INPUT_TIME_RE = re.compile(r'^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?$')


def to_input_datetime(exif_str: Optional[str]) -> str:
    """
    Convert ``YYYY:MM:DD HH:MM:SS`` to ``YYYY-MM-DDTHH:MM:SS``.

    Missing seconds default to ``00``. Returns an empty string when the
    value does not look like an EXIF date/time.
    """
    if not exif_str:
        return ''
    match = _EXIF_DATETIME_RE.search(exif_str.strip())
    if not match:
        return ''
    year, month, day, hour, minute, second = match.groups()
    return f"{year}-{month}-{day}T{hour}:{minute}:{second or '00'}"


def to_input_date(exif_str: Optional[str]) -> str:
    """Convert ``YYYY:MM:DD`` (optionally followed by a time) to ``YYYY-MM-DD``."""
    if not exif_str:
        return ''
    match = _EXIF_DATE_RE.search(exif_str)
    if not match:
        return ''
    return '-'.join(match.groups())


def to_input_time(exif_numbers: Optional[Sequence[Union[int, float]]]) -> str:
    """
    Convert a GPS time ``[hour, minute, second]`` to ``HH:MM:SS``.

    Fractional parts are dropped. Anything other than three numbers
    converts to an empty string.
    """
    if not exif_numbers or len(exif_numbers) != 3:
        return ''
    return ':'.join(f"{int(number):02d}" for number in exif_numbers)


def from_input_datetime(value: Optional[str]) -> str:
    """
    Convert ``YYYY-MM-DDTHH:MM[:SS]`` to the EXIF wire format.

    A missing time part becomes ``00:00:00``.

    Raises:
        ValueError: If the value is not a valid civil date/time
    """
    if not value:
        return ''
    match = _INPUT_DATETIME_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid date/time (expected YYYY-MM-DDTHH:MM:SS): {value}")
    year, month, day, hour, minute, second = match.groups()
    parsed = datetime(
        int(year), int(month), int(day),
        int(hour or 0), int(minute or 0), int(second or 0)
    )
    return parsed.strftime(EXIF_DATETIME_FORMAT)


def from_input_date(value: Optional[str]) -> str:
    """
    Convert ``YYYY-MM-DD`` to ``YYYY:MM:DD``.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if not value:
        return ''
    if not _INPUT_DATE_RE.match(value.strip()):
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value}")
    return datetime.strptime(value.strip(), INPUT_DATE_FORMAT).strftime(EXIF_DATE_FORMAT)


def from_input_time(value: Optional[str]) -> List[int]:
    """
    Convert ``HH:MM:SS`` or ``HH:MM`` to ``[hour, minute, second]``.

    Returns an empty list when the value is empty or not a valid clock time.
    """
    if not value:
        return []
    match = _INPUT_TIME_RE.match(value.strip())
    if not match:
        return []
    hour, minute, second = (int(part or 0) for part in match.groups())
    if hour > 23 or minute > 59 or second > 59:
        return []
    return [hour, minute, second]


def parse_exif_datetime(exif_str: str) -> Optional[datetime]:
    """
    Parse an EXIF date/time string into a naive datetime.

    Returns:
        datetime object or None if the value cannot be parsed
    """
    civil = to_input_datetime(exif_str)
    if not civil:
        return None
    try:
        return datetime.strptime(civil, INPUT_DATETIME_FORMAT)
    except ValueError:
        return None


def parse_exif_date(exif_str: str) -> Optional[datetime]:
    """Parse the ``YYYY:MM:DD`` part of an EXIF value; None if absent or invalid."""
    calendar = to_input_date(exif_str)
    if not calendar:
        return None
    try:
        return datetime.strptime(calendar, INPUT_DATE_FORMAT)
    except ValueError:
        return None
