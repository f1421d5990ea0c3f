import logging
import struct

import pytest

from fuserpak.exceptions import TruncatedInput, UnknownVariant
from fuserpak.pak import PakEntryKind, PakFile
from fuserpak.uasset import ASSET_MAGIC, AssetFile
from fuserpak.uasset.enum import PropertyTag


def raw_entry(fstring, path, data):
    return fstring(path) + b'\x00' + struct.pack('<I', len(data)) + data


def asset_payload(fstring):
    return (
        struct.pack('<II', ASSET_MAGIC, 1) +
        fstring('Cls') + fstring('obj') +
        struct.pack('<I', 1) +
        fstring('N') + b'\x01' + struct.pack('<i', -5)
    )


def asset_entry(fstring, path):
    payload = asset_payload(fstring)

    return fstring(path) + b'\x01' + struct.pack('<I', len(payload)) + payload


def test_pak_empty():
    pak = PakFile()

    assert len(pak) == 0
    assert pak.pack() == b'\x00\x00\x00\x00'

    assert len(PakFile(b'\x00\x00\x00\x00')) == 0


def test_pak_load(fstring):
    data = struct.pack('<I', 2) + raw_entry(fstring, 'a.bin', b'abc') + asset_entry(fstring, 'b.uexp')

    pak = PakFile(data)

    assert pak.paths() == ['a.bin', 'b.uexp']

    raw, asset = pak.entries

    assert raw.kind.value == PakEntryKind.RAW
    assert not raw.is_asset
    assert raw.asset is None
    assert raw.payload.value == b'abc'

    assert asset.is_asset
    assert isinstance(asset.asset, AssetFile)
    export = asset.asset.exports[0]
    assert export.class_name.value == 'Cls'
    assert export.object_name.value == 'obj'
    assert export.properties['N'].value == -5

    assert pak.pack() == data


def test_pak_find_by_path(fstring, caplog):
    data = (
        struct.pack('<I', 3) +
        raw_entry(fstring, 'a.bin', b'first') +
        raw_entry(fstring, 'b.bin', b'other') +
        raw_entry(fstring, 'a.bin', b'second')
    )

    with caplog.at_level(logging.WARNING):
        pak = PakFile(data)

    assert 'duplicated' in caplog.text
    # duplicates are accepted, they don't make the package invalid
    assert 'validation for' not in caplog.text

    assert len(pak) == 3
    assert pak.find_by_path('a.bin').payload.value == b'first'
    assert pak.find_by_path('b.bin').payload.value == b'other'
    assert pak.find_by_path('A.bin') is None
    assert pak.find_by_path('missing') is None

    # the duplicates are kept
    assert pak.pack() == data


def test_pak_payload_size_follows_asset(fstring):
    data = struct.pack('<I', 1) + asset_entry(fstring, 'b.uexp')
    pak = PakFile(data)

    entry = pak.entries[0]
    entry.asset.exports[0].properties.set('Name', PropertyTag.STR, 'a longer string than before')

    out = pak.pack()
    asset = entry.asset.pack()

    assert entry.payload_size.value == len(asset)
    assert len(out) == len(data) + len(fstring('Name')) + 1 + len(fstring('a longer string than before'))

    reloaded = PakFile(out)

    assert reloaded.entries[0].asset.exports[0].properties['Name'].value == 'a longer string than before'
    assert reloaded.entries[0].payload_size.value == len(asset)


def test_pak_add():
    pak = PakFile()
    pak.add('raw.bin', b'\x01\x02')
    asset = AssetFile()
    pak.add('asset.uexp', asset)

    assert [_.kind.value for _ in pak] == [PakEntryKind.RAW, PakEntryKind.ASSET]
    assert pak.find_by_path('asset.uexp').asset is asset

    reloaded = PakFile(pak.pack())

    assert reloaded.paths() == ['raw.bin', 'asset.uexp']
    assert reloaded.entries[0].payload.value == b'\x01\x02'
    assert len(reloaded.entries[1].asset.exports) == 0


def test_pak_unknown_kind(fstring):
    data = struct.pack('<I', 1) + fstring('a.bin') + b'\x07' + struct.pack('<I', 1) + b'x'

    with pytest.raises(UnknownVariant) as e:
        PakFile(data)

    assert e.value.tag == 7
    assert e.value.path == 'entries.0.payload'


def test_pak_truncated(fstring):
    data = struct.pack('<I', 1) + raw_entry(fstring, 'a.bin', b'abc')

    with pytest.raises(TruncatedInput):
        PakFile(data[:-1])

    with pytest.raises(TruncatedInput):
        PakFile(data[:2])


def test_pak_asset_trailing_bytes(fstring):
    payload = asset_payload(fstring) + b'\xde\xad'
    data = struct.pack('<I', 1) + fstring('b.uexp') + b'\x01' + struct.pack('<I', len(payload)) + payload

    pak = PakFile(data)

    assert pak.entries[0].payload.field.trailing == b'\xde\xad'
    assert pak.pack() == data
