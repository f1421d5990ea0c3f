import struct

import pytest

from fuserpak.exceptions import AssetSchemaError, MagicException, UnknownVariant
from fuserpak.uasset import (
    ASSET_MAGIC,
    ArrayValue,
    AssetFile,
    EnumValue,
    Export,
    Property,
    PropertyTable,
    StructValue,
)
from fuserpak.uasset.enum import PropertyTag


def asset_bytes(fstring, properties, count=None):
    return (
        struct.pack('<II', ASSET_MAGIC, 1) +
        fstring('Cls') + fstring('obj') +
        struct.pack('<I', len(properties) if count is None else count) +
        b''.join(properties)
    )


def test_asset_scalar_properties(fstring):
    properties = [
        fstring('Flag') + b'\x00' + b'\x01',
        fstring('Int') + b'\x01' + struct.pack('<i', -1),
        fstring('UInt') + b'\x02' + struct.pack('<I', 0xffffffff),
        fstring('Int64') + b'\x03' + struct.pack('<q', -2 ** 40),
        fstring('Float') + b'\x04' + struct.pack('<f', 1.5),
        fstring('Str') + b'\x05' + fstring('hello'),
        fstring('Wide') + b'\x05' + fstring('ciao', wide=True),
        fstring('Enum') + b'\x06' + fstring('EKey') + fstring('Eb'),
        fstring('Object') + b'\x07' + struct.pack('<i', 1),
        fstring('Bytes') + b'\x0a' + struct.pack('<I', 3) + b'\x0b\x01\x02',
    ]
    data = asset_bytes(fstring, properties)

    asset = AssetFile(data)
    table = asset.exports[0].properties

    assert table.keys() == ['Flag', 'Int', 'UInt', 'Int64', 'Float', 'Str', 'Wide', 'Enum', 'Object', 'Bytes']

    assert table['Flag'].value == 1
    assert table['Int'].value == -1
    assert table['UInt'].value == 0xffffffff
    assert table['Int64'].value == -2 ** 40
    assert table['Float'].value == 1.5
    assert table['Str'].value == 'hello'
    assert table['Wide'].value == 'ciao'
    assert table['Enum'].value == 'Eb'
    assert table['Enum'].payload.field.enum_type.value == 'EKey'
    assert table['Object'].value == 1
    assert table['Bytes'].value == b'\x0b\x01\x02'

    assert [_.tag.value for _ in table] == [
        PropertyTag.BOOL, PropertyTag.INT, PropertyTag.UINT, PropertyTag.INT64, PropertyTag.FLOAT,
        PropertyTag.STR, PropertyTag.STR, PropertyTag.ENUM, PropertyTag.OBJECT, PropertyTag.BYTES,
    ]

    assert asset.resolve(table['Object'].value) is asset.exports[0]

    assert asset.pack() == data


@pytest.mark.parametrize('bits', [0x7f800001, 0xffbfffff, 0x7fc00001, 0x80000000, 0x00000001])
def test_asset_float_bits(fstring, bits):
    properties = [
        fstring('Float') + b'\x04' + struct.pack('<I', bits),
        fstring('Floats') + b'\x09' + b'\x04' + struct.pack('<I', 2) + struct.pack('<II', bits, bits),
    ]
    data = asset_bytes(fstring, properties)

    asset = AssetFile(data)
    table = asset.exports[0].properties

    assert table['Float'].payload.field.bits == bits
    assert asset.pack() == data

    table['Float'].value = 0.25

    assert asset.pack() == data.replace(
        struct.pack('<I', bits) + fstring('Floats'), struct.pack('<f', 0.25) + fstring('Floats'))


def test_asset_nested_properties(fstring):
    inner = fstring('Rate') + b'\x02' + struct.pack('<I', 48000)
    struct_payload = fstring('Header') + struct.pack('<I', 1) + inner
    properties = [
        fstring('Header') + b'\x08' + struct_payload,
        fstring('Structs') + b'\x09' + b'\x08' + struct.pack('<I', 2) + struct_payload + struct_payload,
        fstring('Tokens') + b'\x09' + b'\x06' + struct.pack('<I', 2) +
        fstring('EType') + fstring('A') + fstring('EType') + fstring('B'),
        fstring('Empty') + b'\x09' + b'\x01' + struct.pack('<I', 0),
    ]
    data = asset_bytes(fstring, properties)

    asset = AssetFile(data)
    table = asset.exports[0].properties

    header = table['Header'].value
    assert isinstance(header, StructValue)
    assert header.struct_type.value == 'Header'
    assert header.properties['Rate'].value == 48000

    structs = table['Structs'].value
    assert isinstance(structs, ArrayValue)
    assert structs.inner_tag.value == PropertyTag.STRUCT
    assert len(structs) == 2
    assert structs[1].properties['Rate'].value == 48000

    assert list(table['Tokens'].value) == ['A', 'B']
    assert len(table['Empty'].value) == 0

    assert asset.pack() == data

    # editing a nested value keeps everything else untouched
    structs[1].properties['Rate'].value = 44100

    assert asset.pack() == data.replace(
        struct.pack('<I', 48000) + fstring('Tokens'), struct.pack('<I', 44100) + fstring('Tokens'))


def test_asset_unknown_tag(fstring):
    data = asset_bytes(fstring, [fstring('What') + b'\x2a' + b'\x00' * 4])

    with pytest.raises(UnknownVariant) as e:
        AssetFile(data)

    assert e.value.tag == 0x2a
    assert e.value.path == 'exports.0.properties.items.0.tag'


def test_asset_unknown_inner_tag(fstring):
    data = asset_bytes(fstring, [fstring('What') + b'\x09' + b'\x2a' + struct.pack('<I', 0)])

    with pytest.raises(UnknownVariant):
        AssetFile(data)


def test_asset_bad_magic(fstring):
    data = asset_bytes(fstring, [])

    with pytest.raises(MagicException):
        AssetFile(b'\x00\x00\x00\x00' + data[4:])


def test_asset_resolve():
    asset = AssetFile()
    first = Export.build('First', 'first')
    reference = asset.add_export(first)
    asset.add_export(Export.build('Second', 'second'))

    assert reference == 1
    assert asset.reference_of(first) == 1
    assert asset.resolve(0) is None
    assert asset.resolve(1) is first
    assert asset.resolve(2).class_name.value == 'Second'
    assert asset.find_export('Second') is asset.resolve(2)
    assert asset.find_export('Third') is None

    with pytest.raises(AssetSchemaError):
        asset.resolve(3)

    with pytest.raises(AssetSchemaError):
        asset.resolve(-1)

    with pytest.raises(AssetSchemaError):
        asset.reference_of(Export.build('Other', 'other'))


def test_property_table():
    table = PropertyTable()
    table.set('Name', PropertyTag.STR, 'a')
    table.set('Count', PropertyTag.INT, 1)

    assert 'Name' in table
    assert 'Other' not in table
    assert table.get('Other') is None

    with pytest.raises(KeyError):
        table['Other']

    # same kind: only the value changes
    prop = table['Count']
    assert table.set('Count', PropertyTag.INT, 2) is prop
    assert prop.value == 2

    # another kind: the payload is replaced together with the tag
    table.set('Count', PropertyTag.STR, 'two')

    assert table['Count'].tag.value == PropertyTag.STR
    assert table.keys() == ['Name', 'Count']

    reloaded = PropertyTable(table.pack())

    assert reloaded['Count'].value == 'two'
    assert reloaded['Name'].value == 'a'


def test_asset_built_from_scratch():
    header = StructValue.build('Header', [Property.build('Rate', PropertyTag.UINT, 48000)])
    asset = AssetFile()
    asset.add_export(Export.build('Cls', 'obj', [
        Property.build('Key', PropertyTag.ENUM, EnumValue.build('EKey', 'C')),
        Property.build('Headers', PropertyTag.ARRAY, ArrayValue.build(PropertyTag.STRUCT, [header])),
        Property.build('Flags', PropertyTag.ARRAY, ArrayValue.build(PropertyTag.BOOL, [1, 0, 1])),
    ]))

    data = asset.pack()
    reloaded = AssetFile(data)
    table = reloaded.exports[0].properties

    assert reloaded.export_count.value == 1
    assert table['Key'].value == 'C'
    assert table['Headers'].value[0].properties['Rate'].value == 48000
    assert list(table['Flags'].value) == [1, 0, 1]
    assert table['Flags'].value.count.value == 3

    assert reloaded.pack() == data
