# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Edit session

This module provides the main API: an EditSession owns the untouched
``original`` buffer and the ``working`` copy that edits are written into.
Fields are extracted once per load; saving patches the working copy and
writes it out. Nothing is kept in module-level state.

Copyright 2025 DNAi inc.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from exifdate.exceptions import InvalidTagError, MetadataReadError, MetadataWriteError
from exifdate.exif_tags import GPS_PARTNERS
from exifdate.field_patcher import FieldPatcher
from exifdate.jpeg_scanner import JpegSegmentScanner
from exifdate.tiff_reader import EXIFField, TiffDirectoryReader
from exifdate.timezone_normalizer import TimezoneNormalizer

logger = logging.getLogger(__name__)

NO_FIELDS_STATUS = "No editable EXIF date/time fields found."


class EditSession:
    """
    Date/time editing session for one JPEG file.

    Example:
        >>> with EditSession('photo.jpg') as session:
        ...     session.display_values()
        ...     session.apply_edits({'DateTimeOriginal': '2024-03-15T14:30:46'})
        ...     session.save('edited/')
    """

    def __init__(
        self,
        file_path: Optional[Union[str, Path]] = None,
        file_data: Optional[bytes] = None,
        read_only: bool = False
    ):
        """
        Initialize the session, loading a file if one is given.

        Args:
            file_path: Path to the JPEG file
            file_data: Raw file data (alternative to file_path)
            read_only: If True, edits and saving are refused

        Raises:
            FileNotFoundError: If file_path does not exist
        """
        self.read_only = read_only
        self.options: Dict[str, Any] = {}
        self._initialize_default_options()
        self.options['ReadOnly'] = read_only

        self.file_path: Optional[Path] = None
        self.file_name: str = ''
        self.original: Optional[bytes] = None
        self.working: Optional[bytearray] = None
        self.fields: List[EXIFField] = []
        self.endian: Optional[str] = None
        self.error: Optional[MetadataReadError] = None
        self.warnings: List[str] = []
        self.status = "No file loaded"

        if file_path is not None or file_data is not None:
            self.load(file_path=file_path, file_data=file_data)

    @staticmethod
    def available_options() -> Dict[str, Dict[str, Any]]:
        """
        Return a dictionary of available session options.

        Returns:
            Dictionary mapping option names to description, type and default
        """
        return {
            'NoWarning': {
                'description': 'Do not log a warning when an edited value is truncated',
                'type': 'bool',
                'default': False,
            },
            'Charset': {
                'description': 'Encoding used to read and write ASCII date/time values',
                'type': 'str',
                'default': 'utf-8',
            },
            'ReadOnly': {
                'description': 'Refuse edits and saving',
                'type': 'bool',
                'default': False,
            },
        }

    def _initialize_default_options(self) -> None:
        for option_name, option_info in self.available_options().items():
            self.options[option_name] = option_info['default']

    def set_option(self, option_name: str, value: Any) -> None:
        """
        Set a session option.

        Args:
            option_name: Name of the option (e.g., 'NoWarning', 'Charset')
            value: Value to set for the option

        Raises:
            ValueError: If the option name is not recognized
        """
        available = self.available_options()
        if option_name not in available:
            raise ValueError(f"Unknown option: {option_name}. Use available_options() to see valid options.")

        expected_type = available[option_name]['type']
        if expected_type == 'bool' and not isinstance(value, bool):
            if isinstance(value, str):
                value = value.lower() in ('true', '1', 'yes', 'on')
            else:
                value = bool(value)
        elif expected_type == 'str':
            value = str(value)

        self.options[option_name] = value
        if option_name == 'ReadOnly':
            self.read_only = value

    def get_option(self, option_name: str, default: Any = None) -> Any:
        """Get a session option value, or ``default`` if it is not set."""
        return self.options.get(option_name, default)

    def load(
        self,
        file_path: Optional[Union[str, Path]] = None,
        file_data: Optional[bytes] = None,
        file_name: Optional[str] = None
    ) -> List[EXIFField]:
        """
        Load a file and extract its date/time fields.

        Any previous session state is discarded first. A file without usable
        EXIF data is not an error here: the session ends up with no fields
        and the cause is kept in ``self.error``.

        Args:
            file_path: Path to the JPEG file
            file_data: Raw file data (alternative to file_path)
            file_name: Name used when saving into a directory

        Returns:
            The extracted fields

        Raises:
            FileNotFoundError: If file_path does not exist
            ValueError: If neither file_path nor file_data is given
        """
        self.clear()

        if file_path is not None:
            path = Path(file_path)
            if not path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")
            data = path.read_bytes()
            self.file_path = path
            self.file_name = file_name or path.name
        elif file_data is not None:
            data = file_data
            self.file_name = file_name or ''
        else:
            raise ValueError("No file path or file data provided")

        self.original = bytes(data)
        self.working = bytearray(self.original)

        try:
            tiff_offset = JpegSegmentScanner(self.original).find_tiff_header()
            reader = TiffDirectoryReader(self.original, tiff_offset, self.get_option('Charset'))
            self.fields = reader.read_fields()
            self.endian = reader.endian
        except MetadataReadError as e:
            logger.info("%s: %s", self.file_name or 'data', e.message)
            self.error = e
            self.fields = []

        if self.fields:
            self.status = f"Found {len(self.fields)} date/time field(s)."
        else:
            self.status = NO_FIELDS_STATUS
        return self.fields

    def clear(self) -> None:
        """Discard both buffers and all derived state."""
        self.file_path = None
        self.file_name = ''
        self.original = None
        self.working = None
        self.fields = []
        self.endian = None
        self.error = None
        self.warnings = []
        self.status = "No file loaded"

    def get_field(self, name: str) -> EXIFField:
        """
        Look up a field by name.

        Raises:
            InvalidTagError: If the image has no such field
        """
        for field in self.fields:
            if field.name == name:
                return field
        available = ', '.join(f.name for f in self.fields) or 'none'
        raise InvalidTagError(f"No editable field named {name!r} (available: {available})")

    def normalizer(self) -> TimezoneNormalizer:
        return TimezoneNormalizer(self.fields)

    def display_values(self) -> Dict[str, str]:
        """Local display value of every field, keyed by field name."""
        return self.normalizer().display_values()

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise MetadataWriteError(
                "Cannot edit: session is opened in read-only mode. "
                "Open it without read_only=True to enable writing."
            )
        if self.working is None or self.original is None:
            raise MetadataWriteError("Cannot edit: no file loaded")

    def _patcher(self) -> FieldPatcher:
        return FieldPatcher(
            self.working,
            endian=self.endian or '>',
            charset=self.get_option('Charset'),
            warn_on_truncate=not self.get_option('NoWarning'),
        )

    def _check_length(self) -> None:
        if len(self.working) != len(self.original):
            raise MetadataWriteError(
                f"Working buffer changed size ({len(self.working)} != {len(self.original)})"
            )

    def apply_edits(self, edits: Dict[str, str]) -> List[str]:
        """
        Apply edited display values to the working buffer.

        GPS values are converted from local time back to UTC first. Editing
        one of GPSDateStamp/GPSTimeStamp also rewrites the other from its
        displayed value. Fields whose edited value is empty are left
        untouched.

        Args:
            edits: Display-format values keyed by field name

        Returns:
            Names of the fields that were written

        Raises:
            MetadataWriteError: If the session is read-only or empty
            InvalidTagError: If an edit names a field the image does not have
            ValueError: If an edited value is malformed
        """
        self._ensure_writable()
        for name in edits:
            self.get_field(name)

        normalizer = self.normalizer()
        edits = self._with_gps_partners(edits, normalizer)
        stored = {
            field.name: normalizer.to_storage(field, edits[field.name], edits)
            for field in self.fields if field.name in edits
        }

        patcher = self._patcher()
        written = []
        for field in self.fields:
            if field.name in stored and patcher.patch(field, stored[field.name]):
                written.append(field.name)
        self.warnings.extend(patcher.warnings)
        self._check_length()
        return written

    def _with_gps_partners(self, edits: Dict[str, str], normalizer: TimezoneNormalizer) -> Dict[str, str]:
        """
        Add the displayed value of an unedited GPS partner to the batch.

        Moving the local GPS time across UTC midnight changes the stored
        UTC date as well, so both halves of the pair are re-encoded.
        """
        names = {field.name for field in self.fields}
        completed = dict(edits)
        for name, partner in GPS_PARTNERS.items():
            if edits.get(name) and partner not in edits and partner in names:
                completed[partner] = normalizer.to_display(self.get_field(partner))
                logger.debug("Re-encoding %s together with edited %s", partner, name)
        return completed

    def patch_field(self, name: str, value: Union[str, Sequence[int]]) -> bool:
        """
        Write a value that is already in stored form (EXIF string or GPS UTC components).

        Returns:
            True if bytes were written, False if the value was empty
        """
        self._ensure_writable()
        patcher = self._patcher()
        written = patcher.patch(self.get_field(name), value)
        self.warnings.extend(patcher.warnings)
        self._check_length()
        return written

    def read_working_fields(self) -> List[EXIFField]:
        """
        Parse the working buffer from scratch.

        Raises:
            MetadataReadError: If the working buffer cannot be parsed
        """
        if self.working is None:
            return []
        data = bytes(self.working)
        tiff_offset = JpegSegmentScanner(data).find_tiff_header()
        return TiffDirectoryReader(data, tiff_offset, self.get_option('Charset')).read_fields()

    def to_bytes(self) -> bytes:
        """Current contents of the working buffer."""
        if self.working is None:
            raise MetadataWriteError("Cannot export: no file loaded")
        return bytes(self.working)

    def save(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the working buffer to disk.

        Args:
            output_path: Target file, or a directory to write into under the
                original file name. If None, the loaded file is overwritten.

        Returns:
            Path that was written

        Raises:
            MetadataWriteError: If the session is read-only, has nothing
                loaded, or the file cannot be written
        """
        self._ensure_writable()

        if output_path is None:
            if self.file_path is None:
                raise MetadataWriteError("Cannot save: no output path given for in-memory data")
            target = self.file_path
        else:
            target = Path(output_path)
            if target.is_dir():
                if not self.file_name:
                    raise MetadataWriteError("Cannot save into a directory: file name unknown")
                target = target / self.file_name

        try:
            target.write_bytes(self.to_bytes())
        except OSError as e:
            raise MetadataWriteError(f"Failed to write {target}: {e}")

        logger.info("Saved %s", target)
        self.status = f"Modified image saved as {target.name}."
        return target

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit. Nothing is saved automatically."""
        self.clear()
