'''
# Song

The pieces of a custom song the game cares about, read and written directly
in the asset graph of the package:

 - the metadata (name, artist, tempo and key) are the properties of the first
   export of "DLC/Songs/<short name>/Meta_<short name>.uexp"
 - each cel (a playable part of the song) is an asset whose first export has
   class CelData; its audio is reached following the references

        CelData.MajorAssets[0].FusionFile -> HmxAssetFile
        HmxAssetFile.Audio.AudioFiles[0]  -> PackageFile
        PackageFile.ResourceHeader.SampleRate
        PackageFile.FileData

The views don't copy anything: a change is immediately part of the package.
'''
import logging

from ..exceptions import AssetSchemaError, InvalidAudioFormat
from ..uasset import EnumValue
from ..uasset.enum import PropertyTag
from .enum import Instrument, Key


logger = logging.getLogger(__name__)

# encrypted moggs start with the version of the format
MOGG_ENCRYPTED_MAGIC = 0x0b


def _require(table, key, tag):
    '''Return the property "key" of "table" checking that it's of kind "tag".'''
    prop = table.get(key)

    if prop is None:
        raise AssetSchemaError(f'missing property \'{key}\'')

    if prop.tag.value != tag:
        raise AssetSchemaError(f'property \'{key}\' is {prop.tag} instead of {tag.name}')

    return prop


def _first_struct(array_prop, struct_type=None):
    array = array_prop.value

    if array.inner_tag.value != PropertyTag.STRUCT:
        raise AssetSchemaError(f'\'{array_prop.key.value}\' doesn\'t contain structures')

    if not len(array):
        raise AssetSchemaError(f'\'{array_prop.key.value}\' is empty')

    value = array[0]

    if struct_type is not None and value.struct_type.value != struct_type:
        raise AssetSchemaError(f'expected {struct_type} in \'{array_prop.key.value}\', found {value.struct_type.value}')

    return value


def _first_export(entry, class_name):
    asset = entry.asset

    if asset is None or not len(asset.exports):
        raise AssetSchemaError(f'\'{entry.path.value}\' has no exports')

    export = asset.exports[0]

    if export.class_name.value != class_name:
        raise AssetSchemaError(f'\'{entry.path.value}\' starts with {export.class_name.value} instead of {class_name}')

    return export


def _set_token(prop, enum_cls, token):
    member = enum_cls.from_token(token)

    prop.payload.select(PropertyTag.ENUM, EnumValue.build(enum_cls.type_name(), member.value))


class SongMeta(object):
    CLASS_NAME = 'FuserSongMeta'

    def __init__(self, entry):
        self.entry = entry
        self.export = _first_export(entry, self.CLASS_NAME)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.entry.path.value})>'

    @property
    def properties(self):
        return self.export.properties

    @property
    def song_name(self) -> str:
        return _require(self.properties, 'SongName', PropertyTag.STR).value

    @song_name.setter
    def song_name(self, value: str):
        _require(self.properties, 'SongName', PropertyTag.STR).value = value

    @property
    def artist_name(self) -> str:
        return _require(self.properties, 'ArtistName', PropertyTag.STR).value

    @artist_name.setter
    def artist_name(self, value: str):
        _require(self.properties, 'ArtistName', PropertyTag.STR).value = value

    @property
    def bpm(self) -> int:
        return _require(self.properties, 'BPM', PropertyTag.INT).value

    @bpm.setter
    def bpm(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f'the BPM must be an integer, not {value!r}')

        _require(self.properties, 'BPM', PropertyTag.INT).value = value

    @property
    def song_key(self) -> str:
        return _require(self.properties, 'Key', PropertyTag.ENUM).value

    @song_key.setter
    def song_key(self, value):
        _set_token(_require(self.properties, 'Key', PropertyTag.ENUM), Key, value)


class CelData(object):
    '''A cel of the song: its kind, the instrument playing it and its audio.'''
    CLASS_NAME = 'CelData'
    AUDIO_CLASS_NAME = 'HmxAssetFile'

    def __init__(self, entry):
        self.entry = entry
        self.export = _first_export(entry, self.CLASS_NAME)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.entry.path.value})>'

    @property
    def label(self) -> str:
        return self.export.object_name.value

    @property
    def properties(self):
        return self.export.properties

    @property
    def cel_type(self) -> str:
        return _require(self.properties, 'Type', PropertyTag.ENUM).value

    @property
    def instrument(self) -> str:
        return _require(self.properties, 'Instrument', PropertyTag.ENUM).value

    @instrument.setter
    def instrument(self, value):
        _set_token(_require(self.properties, 'Instrument', PropertyTag.ENUM), Instrument, value)

    def _audio_export(self):
        major_asset = _first_struct(_require(self.properties, 'MajorAssets', PropertyTag.ARRAY))
        reference = _require(major_asset.properties, 'FusionFile', PropertyTag.OBJECT).value

        export = self.entry.asset.resolve(reference)

        if export is None or export.class_name.value != self.AUDIO_CLASS_NAME:
            raise AssetSchemaError(f'the fusion file of {self.label} is not a {self.AUDIO_CLASS_NAME}')

        return export

    def _package_file(self):
        audio = _require(self._audio_export().properties, 'Audio', PropertyTag.STRUCT).value

        return _first_struct(_require(audio.properties, 'AudioFiles', PropertyTag.ARRAY), 'PackageFile')

    def _resource_header(self):
        header = _require(self._package_file().properties, 'ResourceHeader', PropertyTag.STRUCT).value

        if header.struct_type.value != 'MoggSampleResourceHeader':
            raise AssetSchemaError(f'the audio of {self.label} has a {header.struct_type.value} resource header')

        return header

    @property
    def sample_rate(self) -> int:
        return _require(self._resource_header().properties, 'SampleRate', PropertyTag.UINT).value

    @sample_rate.setter
    def sample_rate(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f'the sample rate must be an integer, not {value!r}')

        _require(self._resource_header().properties, 'SampleRate', PropertyTag.UINT).value = value

    @property
    def file_data(self) -> bytes:
        return _require(self._package_file().properties, 'FileData', PropertyTag.BYTES).value

    @file_data.setter
    def file_data(self, data: bytes):
        data = bytes(data)

        if not data or data[0] != MOGG_ENCRYPTED_MAGIC:
            raise InvalidAudioFormat(
                'Invalid mogg file! The mogg was probably un-encrypted, make sure to run it through MoggcryptCpp first!')

        _require(self._package_file().properties, 'FileData', PropertyTag.BYTES).value = data

        logger.debug('replaced the audio of %s with %d bytes', self.label, len(data))


def is_cel(entry) -> bool:
    '''True if the entry contains an asset starting with a CelData export.'''
    asset = entry.asset

    return asset is not None and len(asset.exports) > 0 and asset.exports[0].class_name.value == CelData.CLASS_NAME
