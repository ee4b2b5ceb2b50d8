# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
In-place field patcher

This module writes edited date/time values back into a working copy of the
file, at exactly the byte range the original value occupied. The working
buffer is treated as a fixed-size arena: every write is a bounded slice
assignment of the same length, so the file never grows or shrinks and no
other byte is touched.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import List, Sequence, Union

from exifdate.tiff_reader import EXIFField

logger = logging.getLogger(__name__)

EditValue = Union[str, Sequence[int], None]


class FieldPatcher:
    """
    Writes re-encoded values into a mutable buffer.

    ASCII fields keep their declared ``count``: the new text is truncated
    to ``count - 1`` bytes, NUL-terminated, and zero-padded. GPS time fields
    are written as three ``x/1`` rationals.
    """

    RATIONAL_SIZE = 8
    GPS_TIME_COMPONENTS = 3
    MAX_LONG = 0xFFFFFFFF

    def __init__(
        self,
        working: bytearray,
        endian: str = '>',
        charset: str = 'utf-8',
        warn_on_truncate: bool = True
    ):
        """
        Initialize the patcher.

        Args:
            working: Mutable copy of the file data that receives all writes
            endian: Byte order of the TIFF structure ('<' or '>')
            charset: Encoding used for ASCII values
            warn_on_truncate: Log a warning when a value has to be shortened
        """
        self.working = working
        self.endian = endian
        self.charset = charset
        self.warn_on_truncate = warn_on_truncate
        self.warnings: List[str] = []

    def patch(self, field: EXIFField, new_value: EditValue) -> bool:
        """
        Write one edited value at the field's original value offset.

        Args:
            field: Field descriptor produced by the reader
            new_value: EXIF-format string for date/datetime fields, or
                ``[hour, minute, second]`` for time fields. Empty values
                are ignored.

        Returns:
            True if bytes were written, False if the edit or the slot was empty

        Raises:
            TypeError: If the value shape does not match the field type
            ValueError: If the write would fall outside the buffer
        """
        if new_value is None or len(new_value) == 0:
            logger.debug("No new value for %s, left unchanged", field.name)
            return False

        if field.type == 'time':
            if isinstance(new_value, str):
                raise TypeError(f"{field.name} expects [hour, minute, second], got a string")
            self.write_rational_triple(field.value_offset, field.count, new_value)
        elif field.type in ('date', 'datetime'):
            if not isinstance(new_value, str):
                raise TypeError(f"{field.name} expects a string, got {type(new_value).__name__}")
            if field.count == 0:
                logger.debug("%s has no room for a value, left unchanged", field.name)
                return False
            self.write_ascii(field.value_offset, field.count, new_value, field.name)
        else:
            raise ValueError(f"Unknown field type: {field.type}")

        logger.debug("Patched %s at offset %d", field.name, field.value_offset)
        return True

    def _check_range(self, offset: int, size: int) -> None:
        if offset < 0 or offset + size > len(self.working):
            raise ValueError(
                f"Write of {size} bytes at offset {offset} falls outside "
                f"buffer of {len(self.working)} bytes"
            )

    def write_ascii(self, value_offset: int, count: int, text: str, name: str = '') -> bytes:
        """
        Write a NUL-terminated string into a ``count``-byte slot.

        Args:
            value_offset: Absolute offset of the slot
            count: Declared size of the slot, terminator included
            text: New value
            name: Field name used in the truncation warning

        Returns:
            The bytes actually stored (without padding)
        """
        self._check_range(value_offset, count)
        if count == 0:
            return b''

        encoded = text.encode(self.charset)
        limit = count - 1
        if len(encoded) > limit:
            # Never leave half of a multi-byte character behind
            kept = encoded[:limit].decode(self.charset, errors='ignore').encode(self.charset)
            message = (
                f"Value for {name or 'field'} is {len(encoded)} bytes, "
                f"truncated to {len(kept)} to fit {count}-byte slot"
            )
            self.warnings.append(message)
            if self.warn_on_truncate:
                logger.warning(message)
            encoded = kept

        slot = bytearray(count)
        slot[:len(encoded)] = encoded
        self.working[value_offset:value_offset + count] = slot
        return encoded

    def write_rational_triple(self, value_offset: int, count: int, components: Sequence[int]) -> None:
        """
        Write ``[hour, minute, second]`` as three integer rationals.

        Args:
            value_offset: Absolute offset of the first numerator
            count: Declared number of rationals (must be 3)
            components: Three non-negative integers
        """
        if len(components) != self.GPS_TIME_COMPONENTS or count != self.GPS_TIME_COMPONENTS:
            raise TypeError(
                f"GPS time needs {self.GPS_TIME_COMPONENTS} components for a "
                f"{self.GPS_TIME_COMPONENTS}-rational slot, got {len(components)} for {count}"
            )
        for component in components:
            if isinstance(component, bool) or not isinstance(component, int):
                raise TypeError(f"GPS time components must be integers, got {component!r}")
            if not 0 <= component <= self.MAX_LONG:
                raise ValueError(f"GPS time component out of range: {component}")

        size = self.GPS_TIME_COMPONENTS * self.RATIONAL_SIZE
        self._check_range(value_offset, size)

        words = []
        for component in components:
            words.extend((component, 1))
        self.working[value_offset:value_offset + size] = struct.pack(f'{self.endian}6I', *words)
