import logging
import struct

import pytest

from exifdate.field_patcher import FieldPatcher
from exifdate.jpeg_scanner import find_tiff_header
from exifdate.tiff_reader import EXIFField, read_date_fields


def _fields(data):
    return {f.name: f for f in read_date_fields(bytes(data), find_tiff_header(bytes(data)))}


def test_datetime_rewritten_in_place(jpeg_bytes):
    working = bytearray(jpeg_bytes)
    field = _fields(working)['DateTime']
    start, end = field.value_offset, field.value_offset + field.count

    assert FieldPatcher(working).patch(field, '2024:03:15 14:30:46')

    assert len(working) == len(jpeg_bytes)
    assert working[start:end] == b'2024:03:15 14:30:46\x00'
    assert working[:start] == jpeg_bytes[:start]
    assert working[end:] == jpeg_bytes[end:]
    assert _fields(working)['DateTime'].value == '2024:03:15 14:30:46'


def test_only_the_changed_bytes_differ(jpeg_bytes):
    working = bytearray(jpeg_bytes)
    field = _fields(working)['DateTimeOriginal']
    FieldPatcher(working).patch(field, '2025:01:01 00:00:00')

    changed = [i for i in range(len(working)) if working[i] != jpeg_bytes[i]]
    assert changed
    assert min(changed) >= field.value_offset
    assert max(changed) < field.value_offset + field.count


def test_shorter_value_is_zero_padded():
    working = bytearray(b'\xaa' * 32)
    stored = FieldPatcher(working).write_ascii(4, 20, '2024:01:02')
    assert stored == b'2024:01:02'
    assert working[4:24] == b'2024:01:02' + b'\x00' * 10
    assert working[:4] == b'\xaa' * 4
    assert working[24:] == b'\xaa' * 8


def test_long_value_is_truncated_with_warning(jpeg_bytes, caplog):
    working = bytearray(jpeg_bytes)
    field = _fields(working)['DateTime']
    patcher = FieldPatcher(working)

    with caplog.at_level(logging.WARNING, logger='exifdate.field_patcher'):
        patcher.patch(field, '2024:03:15 14:30:46 +01:00')

    end = field.value_offset + field.count
    assert working[field.value_offset:end] == b'2024:03:15 14:30:46\x00'
    assert working[end:] == jpeg_bytes[end:]
    assert len(patcher.warnings) == 1
    assert 'DateTime' in patcher.warnings[0]
    assert any('truncated' in record.getMessage() for record in caplog.records)


def test_truncation_warning_can_be_silenced(caplog):
    working = bytearray(8)
    patcher = FieldPatcher(working, warn_on_truncate=False)
    with caplog.at_level(logging.WARNING, logger='exifdate.field_patcher'):
        patcher.write_ascii(0, 4, 'abcdef')
    assert working[:4] == b'abc\x00'
    assert patcher.warnings
    assert not caplog.records


def test_truncation_keeps_whole_characters():
    working = bytearray(8)
    # 'a' + 2-byte + 3-byte character; only 4 bytes fit before the terminator
    stored = FieldPatcher(working, warn_on_truncate=False).write_ascii(0, 5, 'aé€')
    assert stored == 'aé'.encode('utf-8')
    assert working[:5] == b'a\xc3\xa9\x00\x00'


def test_zero_count_writes_nothing():
    working = bytearray(b'xyz')
    assert FieldPatcher(working).write_ascii(1, 0, 'abc') == b''
    assert working == bytearray(b'xyz')


def test_gps_time_written_in_file_byte_order(jpeg_bytes, endian):
    working = bytearray(jpeg_bytes)
    field = _fields(working)['GPSTimeStamp']

    assert FieldPatcher(working, endian=endian).patch(field, [13, 0, 0])

    raw = working[field.value_offset:field.value_offset + 24]
    assert struct.unpack(f'{endian}6I', raw) == (13, 1, 0, 1, 0, 1)
    assert working[:field.value_offset] == jpeg_bytes[:field.value_offset]
    assert working[field.value_offset + 24:] == jpeg_bytes[field.value_offset + 24:]
    assert _fields(working)['GPSTimeStamp'].value == [13, 0, 0]


def test_gps_date_is_ascii(jpeg_bytes):
    working = bytearray(jpeg_bytes)
    field = _fields(working)['GPSDateStamp']
    FieldPatcher(working).patch(field, '2023:12:31')
    assert _fields(working)['GPSDateStamp'].value == '2023:12:31'


@pytest.mark.parametrize('value', [None, '', []])
def test_empty_edit_is_skipped(jpeg_bytes, value):
    working = bytearray(jpeg_bytes)
    fields = _fields(working)
    patcher = FieldPatcher(working)
    assert not patcher.patch(fields['DateTime'], value)
    assert not patcher.patch(fields['GPSTimeStamp'], value)
    assert working == bytearray(jpeg_bytes)


def test_value_shape_must_match_field_type(jpeg_bytes):
    working = bytearray(jpeg_bytes)
    fields = _fields(working)
    patcher = FieldPatcher(working)
    with pytest.raises(TypeError):
        patcher.patch(fields['GPSTimeStamp'], '13:00:00')
    with pytest.raises(TypeError):
        patcher.patch(fields['DateTime'], [2024, 3, 15])
    assert working == bytearray(jpeg_bytes)


@pytest.mark.parametrize('components, count, error', [
    ([13, 0], 3, TypeError),
    ([13, 0, 0], 2, TypeError),
    ([13, 0, 1.5], 3, TypeError),
    ([True, 0, 0], 3, TypeError),
    ([13, -1, 0], 3, ValueError),
    ([0x100000000, 0, 0], 3, ValueError),
])
def test_rejects_bad_gps_components(components, count, error):
    working = bytearray(32)
    with pytest.raises(error):
        FieldPatcher(working).write_rational_triple(0, count, components)
    assert working == bytearray(32)


def test_writes_outside_buffer_are_refused():
    working = bytearray(10)
    patcher = FieldPatcher(working)
    with pytest.raises(ValueError):
        patcher.write_ascii(8, 4, 'x')
    with pytest.raises(ValueError):
        patcher.write_ascii(-1, 4, 'x')
    with pytest.raises(ValueError):
        patcher.write_rational_triple(0, 3, [1, 2, 3])
    assert working == bytearray(10)


def test_empty_ascii_slot_reports_nothing_written():
    working = bytearray(b'\xaa' * 16)
    field = EXIFField('Image DateTime (0th IFD)', 'DateTime', '0th', 0x0132, 0, 4, '', 'datetime')
    assert not FieldPatcher(working).patch(field, '2024:03:15 14:30:46')
    assert working == bytearray(b'\xaa' * 16)
