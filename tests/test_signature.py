import os
import struct
import zlib

import pytest

from fuserpak.common.crc import CHUNK_SIZE
from fuserpak.exceptions import TruncatedInput, UnpackException
from fuserpak.pak.signature import SIGNATURE_HASH_SIZE, SignatureFile, SignaturePackager


def test_signature_layout():
    data = os.urandom(130000)

    signature = SignaturePackager().build(data)
    raw = signature.pack()

    assert len(raw) == SIGNATURE_HASH_SIZE + 4 + 2 * 4
    assert raw[:SIGNATURE_HASH_SIZE] == b'\x00' * SIGNATURE_HASH_SIZE
    assert raw[SIGNATURE_HASH_SIZE:] == struct.pack(
        '<III', 2, zlib.crc32(data[:CHUNK_SIZE]), zlib.crc32(data[CHUNK_SIZE:]))


def test_signature_empty_package():
    raw = SignaturePackager().build(b'').pack()

    assert raw == b'\x00' * (SIGNATURE_HASH_SIZE + 4)


def test_signature_hash_provider():
    packager = SignaturePackager(hash_provider=lambda buffer: bytes([len(buffer) & 0xff]) * SIGNATURE_HASH_SIZE)

    raw = packager.build(b'abc').pack()

    assert raw[:SIGNATURE_HASH_SIZE] == b'\x03' * SIGNATURE_HASH_SIZE

    with pytest.raises(ValueError):
        SignaturePackager(hash_provider=lambda buffer: b'short').build(b'abc')


def test_signature_load():
    data = b'\x42' * (CHUNK_SIZE + 1)
    raw = SignaturePackager().build(data).pack()

    signature = SignatureFile(raw)

    assert len(signature) == 2
    assert signature.crcs == [zlib.crc32(data[:CHUNK_SIZE]), zlib.crc32(b'\x42')]
    assert signature.mismatches(data) == []

    changed = data[:-1] + b'\x43'

    assert signature.mismatches(changed) == [1]
    assert signature.mismatches(data[:CHUNK_SIZE]) == [1]

    assert signature.pack() == raw


def test_signature_count_mismatch():
    raw = SignaturePackager().build(b'abc').pack()

    with pytest.raises(UnpackException):
        SignatureFile(raw + b'\x00' * 4)

    with pytest.raises(TruncatedInput):
        SignatureFile(raw[:-1])
