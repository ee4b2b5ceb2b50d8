# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for exifdate

Lists the editable date/time fields of a JPEG file and writes edited
values back in place.

    exifdate list photo.jpg [--json]
    exifdate set photo.jpg DateTimeOriginal=2024-03-15T14:30:46 -o out/

Values are given in the same local format that ``list`` prints.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from exifdate import __version__
from exifdate.exceptions import ExifDateError
from exifdate.session import EditSession


def format_output(session: EditSession, format_type: str = "text") -> str:
    """
    Format the fields of a loaded session.

    Args:
        session: Loaded session
        format_type: Output format ('text' or 'json')

    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps([field.to_dict() for field in session.fields], indent=2, ensure_ascii=False)

    if not session.fields:
        return session.status

    display = session.display_values()
    width = max(len(field.label) for field in session.fields)
    lines = [f"{field.label:<{width}} : {display[field.name]}" for field in session.fields]
    return "\n".join(lines)


def parse_tag_assignments(args: List[str]) -> Dict[str, str]:
    """
    Parse ``NAME=value`` assignments.

    Args:
        args: List of assignment strings

    Returns:
        Dictionary of field names to values

    Raises:
        ValueError: If an argument has no '='
    """
    tags = {}
    for arg in args:
        if '=' not in arg:
            raise ValueError(f"Expected NAME=VALUE, got {arg!r}")
        key, value = arg.split('=', 1)
        tags[key.strip()] = value.strip()
    return tags


def list_fields(file_path: Path, format_type: str = "text") -> str:
    """Load a file read-only and format its fields."""
    with EditSession(file_path, read_only=True) as session:
        return format_output(session, format_type)


def set_fields(
    file_path: Path,
    assignments: Dict[str, str],
    output_path: Optional[Path] = None,
    no_warning: bool = False
) -> str:
    """
    Apply edits to a file and save it.

    Args:
        file_path: Path to the JPEG file
        assignments: Display-format values keyed by field name
        output_path: Output file or directory; None overwrites the input
        no_warning: Suppress truncation warnings

    Returns:
        Status message
    """
    with EditSession(file_path) as session:
        session.set_option('NoWarning', no_warning)
        if not session.fields:
            raise ExifDateError(f"{file_path}: {session.status}")
        written = session.apply_edits(assignments)
        target = session.save(output_path)
        return f"Updated {len(written)} field(s) in {target}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='exifdate',
        description='View and edit EXIF date/time values in JPEG files without re-encoding them.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    list_parser = subparsers.add_parser('list', help='Show the editable date/time fields')
    list_parser.add_argument('file', type=Path, help='JPEG file')
    list_parser.add_argument('-j', '--json', action='store_true', help='Print field descriptors as JSON')

    set_parser = subparsers.add_parser('set', help='Change date/time fields')
    set_parser.add_argument('file', type=Path, help='JPEG file')
    set_parser.add_argument(
        'assignments', nargs='+', metavar='NAME=VALUE',
        help='Field name and new value (YYYY-MM-DDTHH:MM:SS, YYYY-MM-DD or HH:MM:SS)',
    )
    target = set_parser.add_mutually_exclusive_group(required=True)
    target.add_argument('-o', '--output', type=Path, help='Output file, or directory to keep the file name')
    target.add_argument('--overwrite', action='store_true', help='Overwrite the input file')
    set_parser.add_argument('--no-warning', action='store_true', help='Do not warn when a value is truncated')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
    )

    try:
        if args.command == 'list':
            print(list_fields(args.file, 'json' if args.json else 'text'))
        else:
            assignments = parse_tag_assignments(args.assignments)
            output = None if args.overwrite else args.output
            print(set_fields(args.file, assignments, output, args.no_warning))
    except (ExifDateError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
