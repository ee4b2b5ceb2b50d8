# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
exifdate - in-place EXIF date/time editing for JPEG files

Finds the DateTime, DateTimeOriginal, DateTimeDigitized, GPSDateStamp and
GPSTimeStamp values in a JPEG's EXIF block and rewrites them at their
original byte offsets. The file never changes size and no other byte is
modified.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from exifdate.exceptions import (
    ExifDateError,
    FormatError,
    HeaderError,
    InvalidTagError,
    MetadataReadError,
    MetadataWriteError,
    SegmentError,
)
from exifdate.field_patcher import FieldPatcher
from exifdate.jpeg_scanner import JpegSegmentScanner, find_tiff_header, is_jfif_jpeg
from exifdate.session import EditSession
from exifdate.tiff_reader import (
    AsciiValue,
    DirectoryPointer,
    EXIFField,
    IFDEntry,
    RationalValue,
    TiffDirectoryReader,
    read_date_fields,
)
from exifdate.timezone_normalizer import TimezoneNormalizer

__all__ = [
    "EditSession",
    "JpegSegmentScanner",
    "TiffDirectoryReader",
    "TimezoneNormalizer",
    "FieldPatcher",
    "EXIFField",
    "IFDEntry",
    "AsciiValue",
    "RationalValue",
    "DirectoryPointer",
    "find_tiff_header",
    "is_jfif_jpeg",
    "read_date_fields",
    "ExifDateError",
    "MetadataReadError",
    "MetadataWriteError",
    "FormatError",
    "SegmentError",
    "HeaderError",
    "InvalidTagError",
]
