"""Byte-level builders for the JPEG/TIFF fixtures used across the tests."""

import struct

ASCII = 2
SHORT = 3
LONG = 4
RATIONAL = 5

EXIF_POINTER = 0x8769
GPS_POINTER = 0x8825

SOI = b'\xff\xd8'
EOI = b'\xff\xd9'
JFIF_APP0 = b'\xff\xe0' + struct.pack('>H', 16) + b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'


def ascii_entry(tag, text, count=None):
    data = text.encode('ascii') + b'\x00'
    if count is not None:
        data = data[:count].ljust(count, b'\x00')
    return (tag, ASCII, len(data), data)


def rational_entry(tag, pairs, endian='>'):
    words = [word for pair in pairs for word in pair]
    return (tag, RATIONAL, len(pairs), struct.pack(f'{endian}{len(words)}I', *words))


def short_entry(tag, value, endian='>'):
    return (tag, SHORT, 1, struct.pack(f'{endian}H', value))


def long_entry(tag, value, endian='>'):
    return (tag, LONG, 1, struct.pack(f'{endian}I', value))


def build_tiff(ifd0, exif=None, gps=None, endian='>', next_ifd=0):
    """
    Lay out a TIFF structure: header, 0th IFD, Exif IFD, GPS IFD, then a
    data area holding every value longer than 4 bytes.

    Entries are ``(tag, type, count, value_bytes)`` tuples.
    """
    byte_order = b'MM' if endian == '>' else b'II'
    sub_dirs = [entries for entries in (exif, gps) if entries is not None]
    n0 = len(ifd0) + len(sub_dirs)

    def dir_size(n):
        return 2 + 12 * n + 4

    offset = 8 + dir_size(n0)
    pointers = []
    if exif is not None:
        pointers.append(long_entry(EXIF_POINTER, offset, endian))
        offset += dir_size(len(exif))
    if gps is not None:
        pointers.append(long_entry(GPS_POINTER, offset, endian))
        offset += dir_size(len(gps))
    data_start = offset

    directories = [list(ifd0) + pointers] + sub_dirs
    data_area = bytearray()
    body = bytearray()
    for index, entries in enumerate(directories):
        body += struct.pack(f'{endian}H', len(entries))
        for tag, type_, count, value in sorted(entries, key=lambda e: e[0]):
            if len(value) <= 4:
                slot = value.ljust(4, b'\x00')
            else:
                slot = struct.pack(f'{endian}I', data_start + len(data_area))
                data_area += value
                if len(data_area) % 2:
                    data_area += b'\x00'
            body += struct.pack(f'{endian}HHI', tag, type_, count) + slot
        body += struct.pack(f'{endian}I', next_ifd if index == 0 else 0)

    header = byte_order + struct.pack(f'{endian}HI', 42, 8)
    return header + bytes(body) + bytes(data_area)


def wrap_jpeg(tiff, app0=True):
    """Embed a TIFF structure in a minimal JPEG: SOI, [APP0], APP1, COM, EOI."""
    payload = b'Exif\x00\x00' + tiff
    app1 = b'\xff\xe1' + struct.pack('>H', len(payload) + 2) + payload
    comment = b'\xff\xfe' + struct.pack('>H', 6) + b'test'
    return SOI + (JFIF_APP0 if app0 else b'') + app1 + comment + EOI


def standard_tiff(endian='>', gps_date='2024:03:15', gps_time=((12, 1), (30, 1), (0, 1))):
    ifd0 = [
        ascii_entry(0x010F, 'TestMaker'),
        ascii_entry(0x0110, 'TestCam'),
        short_entry(0x0112, 1, endian),
        ascii_entry(0x0132, '2024:03:15 14:30:45'),
    ]
    exif = [
        ascii_entry(0x9003, '2024:03:14 09:15:00'),
        ascii_entry(0x9004, '2024:03:14 09:15:01'),
        rational_entry(0x829A, [(1, 250)], endian),
    ]
    gps = [ascii_entry(0x0001, 'N')]
    if gps_date is not None:
        gps.append(ascii_entry(0x001D, gps_date))
    if gps_time is not None:
        gps.append(rational_entry(0x0007, gps_time, endian))
    return build_tiff(ifd0, exif, gps, endian)


