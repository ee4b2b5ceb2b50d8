# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Timezone normalization for EXIF date/time fields

DateTime, DateTimeOriginal and DateTimeDigitized hold civil (local) time
as written by the camera and are shown unchanged. GPSDateStamp and
GPSTimeStamp hold UTC; they are combined into one instant, converted to
the host's local zone for display, and converted back to UTC on save.

Zone rules come from the running system (``datetime.astimezone()``); no
timezone database is bundled.

Copyright 2025 DNAi inc.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Union

from exifdate.exif_tags import IFD_GPS, UTC_FIELDS
from exifdate.tiff_reader import EXIFField
from exifdate.value_formatter import (
    EXIF_DATE_FORMAT,
    INPUT_DATE_FORMAT,
    INPUT_TIME_FORMAT,
    from_input_date,
    from_input_datetime,
    from_input_time,
    parse_exif_date,
    to_input_date,
    to_input_datetime,
    to_input_time,
)

logger = logging.getLogger(__name__)

StoredValue = Union[str, List[int]]


class TimezoneNormalizer:
    """
    Converts stored field values to display values and back.

    A GPS time on its own has no date, so it is paired with one, in order
    of preference:

    1. the GPSDateStamp field
    2. a datetime field from the same directory as the time field
    3. any datetime field
    4. today's date
    """

    def __init__(self, fields: List[EXIFField], today: Optional[date] = None):
        """
        Initialize the normalizer.

        Args:
            fields: All fields extracted from one image
            today: Last-resort date for GPS times (defaults to the current date)
        """
        self.fields = fields
        self.today = today

    def _find(self, name: str) -> Optional[EXIFField]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def reference_date(self, time_field: EXIFField) -> date:
        """
        Pick the UTC date a GPS time field is combined with.

        Args:
            time_field: The GPSTimeStamp field

        Returns:
            The date from the first usable source in preference order
        """
        gps_date = self._find('GPSDateStamp')
        if gps_date is not None and gps_date.ifd == IFD_GPS:
            parsed = parse_exif_date(gps_date.value)
            if parsed is not None:
                return parsed.date()

        same_ifd = [f for f in self.fields if f.type == 'datetime' and f.ifd == time_field.ifd]
        any_ifd = [f for f in self.fields if f.type == 'datetime']
        for candidate in same_ifd + any_ifd:
            parsed = parse_exif_date(candidate.value)
            if parsed is not None:
                return parsed.date()

        logger.debug("No date found for %s, using today", time_field.name)
        return self.today or date.today()

    def gps_instant(self) -> Optional[datetime]:
        """
        Build the UTC instant described by the GPS date and time fields.

        Returns:
            Timezone-aware UTC datetime, or None if there are no usable GPS fields
        """
        time_field = self._find('GPSTimeStamp')
        date_field = self._find('GPSDateStamp')

        if time_field is not None:
            clock = self._gps_clock(time_field)
            if clock is not None:
                day = self.reference_date(time_field)
                return datetime.combine(day, clock, tzinfo=timezone.utc)

        # A date on its own stands for midnight UTC
        if date_field is not None:
            parsed = parse_exif_date(date_field.value)
            if parsed is not None:
                return datetime.combine(parsed.date(), time(0, 0, 0), tzinfo=timezone.utc)
        return None

    @staticmethod
    def _gps_clock(time_field: EXIFField) -> Optional[time]:
        components = time_field.value
        try:
            return time(*(int(c) for c in components))
        except (TypeError, ValueError):
            # e.g. a leap second [h, m, 60]
            logger.debug("GPSTimeStamp %r is not a valid clock time", components)
            return None

    def local_instant(self) -> Optional[datetime]:
        """The GPS instant converted to the host's local zone."""
        instant = self.gps_instant()
        if instant is None:
            return None
        return instant.astimezone()

    def to_display(self, field: EXIFField) -> str:
        """
        Format a stored value for an editor.

        Returns:
            ``YYYY-MM-DDTHH:MM:SS`` for datetime fields, ``YYYY-MM-DD`` for
            date fields, ``HH:MM:SS`` for time fields; empty if the stored
            value cannot be interpreted
        """
        if field.name in UTC_FIELDS:
            if field.type == 'date' and parse_exif_date(field.value) is None:
                return ''
            if field.type == 'time' and self._gps_clock(field) is None:
                return to_input_time(field.value)
            local = self.local_instant()
            if local is None:
                return ''
            if field.type == 'time':
                return local.strftime(INPUT_TIME_FORMAT)
            return local.strftime(INPUT_DATE_FORMAT)

        if field.type == 'datetime':
            return to_input_datetime(field.value)
        if field.type == 'date':
            return to_input_date(field.value)
        return to_input_time(field.value)

    def display_values(self) -> Dict[str, str]:
        """Display value of every field, keyed by field name."""
        return {field.name: self.to_display(field) for field in self.fields}

    def to_storage(self, field: EXIFField, edited: str, edits: Optional[Dict[str, str]] = None) -> StoredValue:
        """
        Convert an edited display value back to the stored representation.

        GPS values are paired with their partner's local value (the edited
        one if ``edits`` holds it, otherwise the displayed one), read as local
        time and converted to UTC.

        Args:
            field: Field being saved
            edited: Value in the display format for the field type
            edits: All edited values of the same save, keyed by field name

        Returns:
            EXIF string for date/datetime fields, ``[hour, minute, second]``
            for time fields; empty if ``edited`` is empty

        Raises:
            ValueError: If a date or datetime value is malformed
        """
        edits = edits or {}

        if field.name not in UTC_FIELDS:
            if field.type == 'datetime':
                return from_input_datetime(edited)
            if field.type == 'date':
                return from_input_date(edited)
            return from_input_time(edited)

        if field.type == 'time':
            components = from_input_time(edited)
            if not components:
                return []
            local_time = time(*components)
            local_date = self._partner_date(edits)
        else:
            stored_date = from_input_date(edited)
            if not stored_date:
                return ''
            local_date = datetime.strptime(stored_date, EXIF_DATE_FORMAT).date()
            local_time = self._partner_time(edits)

        # A naive datetime is interpreted in the host's local zone
        utc = datetime.combine(local_date, local_time).astimezone(timezone.utc)
        if field.type == 'time':
            return [utc.hour, utc.minute, utc.second]
        return utc.strftime(EXIF_DATE_FORMAT)

    def _partner_date(self, edits: Dict[str, str]) -> date:
        edited_date = edits.get('GPSDateStamp')
        if edited_date and self._find('GPSDateStamp') is not None:
            return datetime.strptime(from_input_date(edited_date), EXIF_DATE_FORMAT).date()
        local = self.local_instant()
        if local is not None:
            return local.date()
        time_field = self._find('GPSTimeStamp')
        return self.reference_date(time_field) if time_field else (self.today or date.today())

    def _partner_time(self, edits: Dict[str, str]) -> time:
        edited_time = edits.get('GPSTimeStamp')
        if edited_time and self._find('GPSTimeStamp') is not None:
            components = from_input_time(edited_time)
            if components:
                return time(*components)
        local = self.local_instant()
        if local is not None:
            return local.time()
        return time(0, 0, 0)
