# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for exifdate

Parsing failures are split by the layer that detected them: the JPEG
container, the APP1 segment search, or the TIFF structure inside it.
Any of them aborts the whole extraction.

Copyright 2025 DNAi inc.
"""


class ExifDateError(Exception):
    """
    Base exception for all exifdate errors.

    All exifdate exceptions inherit from this class, allowing
    catch-all error handling for any exifdate-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(ExifDateError):
    """
    Raised when date/time metadata cannot be extracted from a buffer.
    """
    pass


class FormatError(MetadataReadError):
    """
    Raised when the buffer does not start with the JPEG SOI marker.
    """
    pass


class SegmentError(MetadataReadError):
    """
    Raised when no APP1 segment carrying an ``Exif\\0\\0`` header is found
    before the marker scan reaches EOI or runs off the buffer.
    """
    pass


class HeaderError(MetadataReadError):
    """
    Raised when the TIFF structure is unusable.

    This exception is raised when:
    - The byte-order mark is neither ``II`` nor ``MM``
    - The magic number is not 42
    - A directory, entry or value offset points past the end of the buffer
    """
    pass


class MetadataWriteError(ExifDateError):
    """
    Raised when edited metadata cannot be saved.

    This exception is raised when:
    - The session was opened read-only
    - No file has been loaded into the session
    - The output file cannot be written
    """
    pass


class InvalidTagError(ExifDateError):
    """
    Raised when an edit names a field that was not found in the image.
    """
    pass
