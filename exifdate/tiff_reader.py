# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
TIFF directory reader

This module parses the TIFF structure embedded in an EXIF APP1 segment.
It walks the 0th IFD, follows the Exif and GPS pointer tags into their
sub-directories, and reports every recognized date/time tag together with
the absolute position of its value bytes, so the value can later be
rewritten in place.

All offsets stored in the TIFF structure are relative to the TIFF header;
every offset this module returns is absolute (relative to the start of the
file data it was given).

Copyright 2025 DNAi inc.
"""

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from exifdate.exceptions import HeaderError
from exifdate.exif_tags import DATE_TAGS, IFD_0TH, SUBIFD_POINTERS

logger = logging.getLogger(__name__)


class ExifTagType(IntEnum):
    """TIFF field types this reader decodes"""
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5


@dataclass(frozen=True)
class AsciiValue:
    """NUL-terminated text value."""
    text: str


@dataclass(frozen=True)
class RationalValue:
    """Sequence of unsigned numerator/denominator pairs."""
    pairs: Tuple[Tuple[int, int], ...]

    def quotients(self) -> List[float]:
        return [num / den if den != 0 else 0 for num, den in self.pairs]

    def decoded(self) -> Union[float, List[float]]:
        """A single pair decodes to a number, several pairs to a list."""
        values = self.quotients()
        if len(values) == 1:
            return values[0]
        return values


@dataclass(frozen=True)
class DirectoryPointer:
    """Offset of a sub-IFD, relative to the TIFF header."""
    offset: int


EntryValue = Union[AsciiValue, RationalValue, DirectoryPointer]


@dataclass
class IFDEntry:
    """
    One 12-byte directory entry.

    ``value_offset`` is the absolute offset of the value bytes: the 4-byte
    slot inside the entry for inline values, otherwise the dereferenced
    pointer. ``value`` is None for tags this reader does not decode.
    """
    tag: int
    type: int
    count: int
    value_offset: int
    value: Optional[EntryValue] = None


@dataclass
class EXIFField:
    """An editable date/time value found in the image."""
    label: str
    name: str
    ifd: str
    tag: int
    count: int
    value_offset: int
    value: Union[str, float, List[float]]
    type: str

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the field descriptor handed to UI collaborators.

        Returns:
            Dictionary with keys label, name, ifd, tag, count, valueOffset,
            value and type
        """
        value = list(self.value) if isinstance(self.value, list) else self.value
        return {
            'label': self.label,
            'name': self.name,
            'ifd': self.ifd,
            'tag': self.tag,
            'count': self.count,
            'valueOffset': self.value_offset,
            'value': value,
            'type': self.type,
        }


class TiffDirectoryReader:
    """
    Reader for the TIFF header and the 0th, Exif and GPS directories.

    The "next IFD" link that ends each directory is read but never
    followed, so IFD1 (the thumbnail directory) is not visited.
    """

    BYTE_ORDERS = {
        b'II': '<',  # Little-endian (Intel)
        b'MM': '>',  # Big-endian (Motorola)
    }
    TIFF_MAGIC = 42
    ENTRY_SIZE = 12
    RATIONAL_SIZE = 8

    def __init__(self, file_data: bytes, tiff_offset: int, charset: str = 'utf-8'):
        """
        Initialize the reader.

        Args:
            file_data: Complete file data (the TIFF structure is embedded in it)
            tiff_offset: Absolute offset of the TIFF header byte-order mark
            charset: Encoding used to decode ASCII values
        """
        self.file_data = file_data
        self.tiff_offset = tiff_offset
        self.charset = charset
        self.endian: Optional[str] = None
        self.ifd0_offset: int = 0
        self.directories: Dict[str, Dict[str, Any]] = {}

    def _unpack(self, fmt: str, offset: int) -> Tuple[Any, ...]:
        size = struct.calcsize(f'<{fmt}')
        if offset < 0 or offset + size > len(self.file_data):
            raise HeaderError(
                f"Invalid TIFF structure: {size} bytes at offset {offset} "
                f"run past end of data ({len(self.file_data)} bytes)"
            )
        return struct.unpack(f'{self.endian}{fmt}', self.file_data[offset:offset + size])

    def read_header(self) -> int:
        """
        Parse the 8-byte TIFF header.

        Returns:
            Absolute offset of the 0th IFD

        Raises:
            HeaderError: If the byte order, magic number or length is invalid
        """
        start = self.tiff_offset
        if start < 0 or start + 8 > len(self.file_data):
            raise HeaderError("Invalid TIFF header: too short")

        byte_order = bytes(self.file_data[start:start + 2])
        if byte_order not in self.BYTE_ORDERS:
            raise HeaderError(f"Invalid TIFF header: bad byte order {byte_order!r}")
        self.endian = self.BYTE_ORDERS[byte_order]

        magic = self._unpack('H', start + 2)[0]
        if magic != self.TIFF_MAGIC:
            raise HeaderError(f"Invalid TIFF magic number: {magic}")

        self.ifd0_offset = start + self._unpack('I', start + 4)[0]
        return self.ifd0_offset

    def read_ifd(self, ifd_offset: int, ifd_name: str) -> Dict[str, Any]:
        """
        Parse one directory.

        Values are decoded only for the date/time tags recognized in
        ``ifd_name`` and for the Exif/GPS pointer tags; every other entry is
        kept with its structural fields only.

        Args:
            ifd_offset: Absolute offset of the directory's entry count
            ifd_name: Directory name ("0th", "Exif" or "GPS")

        Returns:
            Dictionary with 'offset', 'entries' (tag -> IFDEntry) and 'next_ifd'

        Raises:
            HeaderError: If the directory runs past the end of the data
        """
        num_entries = self._unpack('H', ifd_offset)[0]
        if ifd_offset + 2 + num_entries * self.ENTRY_SIZE + 4 > len(self.file_data):
            raise HeaderError(
                f"Invalid IFD at offset {ifd_offset}: {num_entries} entries "
                "run past end of data"
            )

        wanted = DATE_TAGS.get(ifd_name, {})
        entries: Dict[int, IFDEntry] = {}
        entry_offset = ifd_offset + 2

        for _ in range(num_entries):
            tag_id, tag_type, count = self._unpack('HHI', entry_offset)
            slot = entry_offset + 8

            if tag_id in wanted:
                entry = self._read_value(tag_id, tag_type, count, slot)
            elif tag_id in SUBIFD_POINTERS and tag_type in (ExifTagType.LONG, ExifTagType.SHORT):
                # TIFF left-justifies values shorter than 4 bytes in the slot, so a
                # SHORT offset is the first two bytes rather than the whole slot
                pointer_fmt = 'I' if tag_type == ExifTagType.LONG else 'H'
                pointer = self._unpack(pointer_fmt, slot)[0]
                entry = IFDEntry(tag_id, tag_type, count, slot, DirectoryPointer(pointer))
            else:
                entry = IFDEntry(tag_id, tag_type, count, slot)

            entries[tag_id] = entry
            entry_offset += self.ENTRY_SIZE

        next_ifd = self._unpack('I', entry_offset)[0]

        directory = {
            'offset': ifd_offset,
            'entries': entries,
            'next_ifd': next_ifd,
        }
        self.directories[ifd_name] = directory
        return directory

    def _read_value(self, tag_id: int, tag_type: int, count: int, slot: int) -> IFDEntry:
        """
        Decode the value of a recognized tag.

        Args:
            tag_id: Tag number
            tag_type: TIFF field type
            count: Number of values
            slot: Absolute offset of the entry's 4-byte value/offset slot

        Returns:
            IFDEntry with an absolute value_offset and a decoded value
        """
        if tag_type == ExifTagType.ASCII:
            if count <= 4:
                value_offset = slot
            else:
                value_offset = self.tiff_offset + self._unpack('I', slot)[0]
            if value_offset + count > len(self.file_data):
                raise HeaderError(
                    f"Invalid value offset for tag 0x{tag_id:04X}: "
                    f"{count} bytes at {value_offset} run past end of data"
                )
            raw = bytes(self.file_data[value_offset:value_offset + count])
            null_pos = raw.find(b'\x00')
            if null_pos >= 0:
                raw = raw[:null_pos]
            text = raw.decode(self.charset, errors='replace')
            return IFDEntry(tag_id, tag_type, count, value_offset, AsciiValue(text))

        if tag_type == ExifTagType.RATIONAL:
            # Always out of line, even for a single pair
            value_offset = self.tiff_offset + self._unpack('I', slot)[0]
            if value_offset + count * self.RATIONAL_SIZE > len(self.file_data):
                raise HeaderError(
                    f"Invalid value offset for tag 0x{tag_id:04X}: "
                    f"{count} rationals at {value_offset} run past end of data"
                )
            words = self._unpack(f'{count * 2}I', value_offset) if count else ()
            pairs = tuple(zip(words[0::2], words[1::2]))
            return IFDEntry(tag_id, tag_type, count, value_offset, RationalValue(pairs))

        logger.debug("Tag 0x%04X has unsupported type %d, not decoded", tag_id, tag_type)
        return IFDEntry(tag_id, tag_type, count, slot)

    def read_fields(self) -> List[EXIFField]:
        """
        Parse the whole structure and collect the editable date/time fields.

        Returns:
            Fields in directory order (0th, Exif, GPS)

        Raises:
            HeaderError: If any part of the structure is invalid; no partial
                result is returned
        """
        self.directories = {}
        ifd0_offset = self.read_header()
        fields: List[EXIFField] = []
        self._walk(IFD_0TH, ifd0_offset, set(), fields)
        logger.debug("Found %d date/time field(s)", len(fields))
        return fields

    def _walk(self, ifd_name: str, ifd_offset: int, visited: Set[int], fields: List[EXIFField]) -> None:
        visited.add(ifd_offset)
        directory = self.read_ifd(ifd_offset, ifd_name)
        entries = directory['entries']

        for tag_id, (name, label, field_type) in DATE_TAGS.get(ifd_name, {}).items():
            entry = entries.get(tag_id)
            if entry is None:
                continue
            field = self._make_field(ifd_name, name, label, field_type, entry)
            if field is not None:
                fields.append(field)

        # Sub-directories are only reached from the 0th IFD
        if ifd_name != IFD_0TH:
            return

        for pointer_tag, sub_name in SUBIFD_POINTERS.items():
            entry = entries.get(pointer_tag)
            if entry is None or not isinstance(entry.value, DirectoryPointer):
                continue
            if entry.value.offset == 0:
                continue
            sub_offset = self.tiff_offset + entry.value.offset
            if sub_offset in visited:
                logger.debug("Skipping already visited IFD at offset %d", sub_offset)
                continue
            self._walk(sub_name, sub_offset, visited, fields)

    @staticmethod
    def _make_field(ifd_name: str, name: str, label: str, field_type: str, entry: IFDEntry) -> Optional[EXIFField]:
        value = entry.value
        if field_type == 'time':
            if not isinstance(value, RationalValue) or entry.count != 3:
                logger.debug("%s is not a 3-element rational, skipped", name)
                return None
            decoded = value.decoded()
        else:
            if not isinstance(value, AsciiValue):
                logger.debug("%s is not stored as ASCII, skipped", name)
                return None
            decoded = value.text

        return EXIFField(
            label=label,
            name=name,
            ifd=ifd_name,
            tag=entry.tag,
            count=entry.count,
            value_offset=entry.value_offset,
            value=decoded,
            type=field_type,
        )


def read_date_fields(file_data: bytes, tiff_offset: int, charset: str = 'utf-8') -> List[EXIFField]:
    """Parse the TIFF structure at ``tiff_offset`` and return its date/time fields."""
    return TiffDirectoryReader(file_data, tiff_offset, charset).read_fields()
