import os
import zlib

import pytest

from fuserpak.common.crc import CHUNK_SIZE, ChecksumChunker, compute


def test_crc_check_value():
    # the check value of CRC-32/ISO-HDLC
    assert compute(b'123456789') == [0xcbf43926]


def test_crc_empty():
    assert compute(b'') == []


def test_crc_windows():
    data = os.urandom(130000)

    chunker = ChecksumChunker()
    windows = list(chunker.windows(data))

    assert len(windows) == 2
    assert len(windows[0]) == CHUNK_SIZE
    assert len(windows[1]) == 64464

    assert chunker.compute(data) == [
        zlib.crc32(data[:CHUNK_SIZE]),
        zlib.crc32(data[CHUNK_SIZE:]),
    ]

    # pure function
    assert chunker.compute(data) == compute(data)


def test_crc_exact_multiple():
    data = b'\xaa' * (2 * CHUNK_SIZE)

    assert len(compute(data)) == 2


def test_crc_window_size():
    assert compute(b'abcdef', window_size=2) == [zlib.crc32(b'ab'), zlib.crc32(b'cd'), zlib.crc32(b'ef')]

    with pytest.raises(ValueError):
        ChecksumChunker(0)
