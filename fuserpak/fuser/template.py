'''
Package used as a starting point for a new custom song: the metadata and one
cel for each cel type, with placeholder audio.
'''
import struct

from ..pak import PakFile
from ..uasset import (
    ASSET_MAGIC,
    ArrayValue,
    AssetFile,
    EnumValue,
    Export,
    Property,
    StructValue,
)
from ..uasset.enum import PropertyTag
from .enum import CelType, Instrument, Key
from .song import CelData, MOGG_ENCRYPTED_MAGIC, SongMeta


DEFAULT_SHORT_NAME = 'custom_song'
DEFAULT_SAMPLE_RATE = 48000

META_PATH_TEMPLATE = 'DLC/Songs/{0}/Meta_{0}.uexp'
CEL_PATH_TEMPLATE = 'DLC/Songs/{0}/{1}/{0}_{1}.uexp'

CEL_INSTRUMENTS = {
    CelType.Beat: Instrument.Drums,
    CelType.Bass: Instrument.Bass,
    CelType.Loop: Instrument.Keys,
    CelType.Lead: Instrument.Guitar,
}

PLACEHOLDER_AUDIO = bytes([MOGG_ENCRYPTED_MAGIC]) + bytes(0x1f)


def _enum(enum_cls, member):
    return EnumValue.build(enum_cls.type_name(), member.value)


def build_meta(short_name: str) -> AssetFile:
    asset = AssetFile()
    asset.add_export(Export.build(SongMeta.CLASS_NAME, f'Meta_{short_name}', [
        Property.build('SongName', PropertyTag.STR, 'Custom Song'),
        Property.build('ArtistName', PropertyTag.STR, 'Unknown Artist'),
        Property.build('BPM', PropertyTag.INT, 120),
        Property.build('Key', PropertyTag.ENUM, _enum(Key, Key.C)),
    ]))

    return asset


def build_cel(short_name: str, cel_type: CelType) -> AssetFile:
    label = f'{short_name}_{cel_type.value}'

    asset = AssetFile()
    cel = Export.build(CelData.CLASS_NAME, label, [
        Property.build('Type', PropertyTag.ENUM, _enum(CelType, cel_type)),
        Property.build('Instrument', PropertyTag.ENUM, _enum(Instrument, CEL_INSTRUMENTS[cel_type])),
    ])
    asset.add_export(cel)

    header = StructValue.build('MoggSampleResourceHeader', [
        Property.build('SampleRate', PropertyTag.UINT, DEFAULT_SAMPLE_RATE),
    ])
    package_file = StructValue.build('PackageFile', [
        Property.build('ResourceHeader', PropertyTag.STRUCT, header),
        Property.build('FileData', PropertyTag.BYTES, PLACEHOLDER_AUDIO),
    ])
    audio = StructValue.build('HmxAudio', [
        Property.build('AudioFiles', PropertyTag.ARRAY, ArrayValue.build(PropertyTag.STRUCT, [package_file])),
    ])
    reference = asset.add_export(Export.build(CelData.AUDIO_CLASS_NAME, f'{label}_fusion', [
        Property.build('Audio', PropertyTag.STRUCT, audio),
    ]))

    major_asset = StructValue.build('MajorAsset', [
        Property.build('FusionFile', PropertyTag.OBJECT, reference),
    ])
    cel.properties.append(
        Property.build('MajorAssets', PropertyTag.ARRAY, ArrayValue.build(PropertyTag.STRUCT, [major_asset])))

    return asset


def build_template(short_name: str = DEFAULT_SHORT_NAME) -> PakFile:
    pak = PakFile()

    # the package summary is kept opaque
    pak.add(f'DLC/Songs/{short_name}/Meta_{short_name}.uasset', struct.pack('<II', ASSET_MAGIC, 0))
    pak.add(META_PATH_TEMPLATE.format(short_name), build_meta(short_name))

    for cel_type in CelType:
        pak.add(CEL_PATH_TEMPLATE.format(short_name, cel_type.value), build_cel(short_name, cel_type))

    return pak
