import time

import pytest

from builders import standard_tiff, wrap_jpeg


@pytest.fixture(params=['>', '<'], ids=['big-endian', 'little-endian'])
def endian(request):
    return request.param


@pytest.fixture
def jpeg_bytes(endian):
    return wrap_jpeg(standard_tiff(endian))


@pytest.fixture
def local_timezone(monkeypatch):
    """Switch the process timezone using a POSIX TZ rule (no tz database needed)."""
    if not hasattr(time, 'tzset'):
        pytest.skip("time.tzset() is not available on this platform")

    def _set(tz):
        monkeypatch.setenv('TZ', tz)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()
