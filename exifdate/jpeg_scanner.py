# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG segment scanner

This module walks the marker segments at the start of a JPEG file to find
the APP1 segment that carries EXIF data, and reports where the embedded
TIFF header begins. The file data is never modified.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import List, Tuple

from exifdate.exceptions import FormatError, SegmentError

logger = logging.getLogger(__name__)


class JpegSegmentScanner:
    """
    Locates the EXIF payload inside a JPEG file.

    Segments are visited in file order as ``marker, length`` pairs, where
    the length covers itself and the payload but not the marker. The scan
    stops at the first APP1 segment whose payload starts with
    ``Exif\\0\\0``; no later segment is examined.
    """

    # JPEG markers
    SOI = 0xFFD8  # Start of Image
    EOI = 0xFFD9  # End of Image
    APP0 = 0xFFE0  # APP0 (JFIF)
    APP1 = 0xFFE1  # APP1 (EXIF)

    MARKER_PREFIX = 0xFF00
    EXIF_HEADER = b'Exif\x00\x00'
    JFIF_IDENTIFIER = b'JFIF\x00'

    def __init__(self, file_data: bytes):
        """
        Initialize the scanner.

        Args:
            file_data: Complete JPEG file data
        """
        self.file_data = file_data
        self.segments: List[Tuple[int, int, int]] = []  # (marker, offset, length)

    def find_tiff_header(self) -> int:
        """
        Find the absolute offset of the TIFF header inside the EXIF APP1 segment.

        Returns:
            Offset of the first byte of the TIFF header (the byte-order mark)

        Raises:
            FormatError: If the data does not start with the SOI marker
            SegmentError: If no EXIF APP1 segment precedes EOI or the end of data
        """
        data = self.file_data
        if len(data) < 2 or struct.unpack('>H', data[0:2])[0] != self.SOI:
            raise FormatError("Invalid JPEG file: missing SOI marker")

        self.segments = []
        offset = 2

        while offset + 4 <= len(data):
            marker, length = struct.unpack('>HH', data[offset:offset + 4])

            if marker == self.EOI:
                break

            # Entropy-coded data or garbage: not a marker
            if marker & self.MARKER_PREFIX != self.MARKER_PREFIX:
                break

            self.segments.append((marker, offset, length))

            if marker == self.APP1:
                payload_start = offset + 4
                if data[payload_start:payload_start + 6] == self.EXIF_HEADER:
                    tiff_offset = payload_start + 6
                    logger.debug("EXIF APP1 segment at %d, TIFF header at %d", offset, tiff_offset)
                    return tiff_offset

            offset += 2 + length

        raise SegmentError("No EXIF APP1 segment found")


def find_tiff_header(file_data: bytes) -> int:
    """Shortcut for ``JpegSegmentScanner(file_data).find_tiff_header()``."""
    return JpegSegmentScanner(file_data).find_tiff_header()


def is_jfif_jpeg(file_data: bytes) -> bool:
    """
    Check whether data starts with SOI immediately followed by a JFIF APP0 segment.

    Camera files usually carry APP1 (EXIF) first and fail this check; it is
    only meant to tell a plain JFIF JPEG apart from a non-JPEG upload.

    Args:
        file_data: File data to probe

    Returns:
        True if the SOI, APP0 marker and ``JFIF\\0`` identifier are present
    """
    if len(file_data) < 11:
        return False
    soi, app0 = struct.unpack('>HH', file_data[0:4])
    if soi != JpegSegmentScanner.SOI or app0 != JpegSegmentScanner.APP0:
        return False
    return file_data[6:11] == JpegSegmentScanner.JFIF_IDENTIFIER
