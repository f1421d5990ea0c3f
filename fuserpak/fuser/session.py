'''
# Edit session

Everything needed to edit a custom song: the package loaded from its bytes,
the song metadata and the cels found in it, plus the rendering of the final
package and of its signature.

    session = EditSession.open(data)
    session.bpm = 128
    session.replace_audio(0, mogg)
    files = session.save('custom_song_P.pak')

A session owns its package: more sessions can be open at the same time
without interfering with each other.
'''
import logging
import posixpath
import re
from pathlib import PureWindowsPath
from typing import Dict, List, Optional, Tuple

from ..exceptions import FileNameMismatch, InvalidShortName, NoShortNameFound
from ..pak import PakEntry, PakFile
from ..pak.signature import HashProvider, SignaturePackager
from .song import CelData, SongMeta, is_cel
from .template import DEFAULT_SHORT_NAME, build_template


logger = logging.getLogger(__name__)

SONGS_ROOT = 'DLC/Songs/'
META_PATH = re.compile(r'DLC/Songs/([^/]+)/Meta_\1\.uexp')
SHORT_NAME = re.compile(r'[A-Za-z0-9_]+')


def find_short_name(pak: PakFile) -> Tuple[str, PakEntry]:
    '''Return the short name of the song and the entry with its metadata: it's the
    first structured entry named "DLC/Songs/<name>/Meta_<name>.uexp".'''
    found = []

    for entry in pak:
        match = META_PATH.fullmatch(entry.path.value)
        if match and entry.is_asset:
            found.append((match.group(1), entry))

    if not found:
        raise NoShortNameFound('No short name detected! the package doesn\'t contain the metadata of a song')

    if len(found) > 1:
        logger.warning('the package contains the metadata of %d songs, using \'%s\'', len(found), found[0][0])

    return found[0]


def _rename_stem(stem: str, old: str, new: str) -> str:
    '''Rename a name following the convention of the song files, that is
    "Meta_<name>", "<name>" or "<name>_<something>"; other names stay as they are.'''
    if stem == f'Meta_{old}':
        return f'Meta_{new}'

    if stem == old:
        return new

    if stem.startswith(f'{old}_'):
        return new + stem[len(old):]

    return stem


def _rename_file(basename: str, old: str, new: str) -> str:
    # the extension is never part of the name
    stem, extension = posixpath.splitext(basename)

    return _rename_stem(stem, old, new) + extension


class EditSession(object):

    def __init__(self, pak: PakFile, hash_provider: Optional[HashProvider] = None):
        self.pak = pak
        self.packager = SignaturePackager(hash_provider)

        self._short_name, entry = find_short_name(pak)
        self.meta = SongMeta(entry)

        prefix = self._song_prefix
        self._cels = [CelData(_) for _ in pak if _.path.value.startswith(prefix) and is_cel(_)]

        logger.info('opened song \'%s\' with %d cels', self._short_name, len(self._cels))

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._short_name}, cels={len(self._cels)})>'

    @classmethod
    def open(cls, data, hash_provider: Optional[HashProvider] = None) -> 'EditSession':
        return cls(PakFile(data), hash_provider=hash_provider)

    @classmethod
    def new(cls, short_name: str = DEFAULT_SHORT_NAME, hash_provider: Optional[HashProvider] = None) -> 'EditSession':
        '''Start from the template package.'''
        cls.check_short_name(short_name)

        return cls(build_template(short_name), hash_provider=hash_provider)

    @staticmethod
    def check_short_name(value):
        if not isinstance(value, str) or not SHORT_NAME.fullmatch(value):
            raise InvalidShortName(
                f'{value!r} is not valid: short name can only contain alphanumeric characters and \'_\'')

    @property
    def _song_prefix(self) -> str:
        return f'{SONGS_ROOT}{self._short_name}/'

    @property
    def short_name(self) -> str:
        return self._short_name

    @short_name.setter
    def short_name(self, value: str):
        # the entries under the song directory and the exports named after
        # the song follow the new name, otherwise the game doesn't find them
        self.check_short_name(value)

        old = self._short_name
        if value == old:
            return

        prefix = self._song_prefix

        for entry in self.pak:
            path = entry.path.value
            if not path.startswith(prefix):
                continue

            directory, basename = posixpath.split(path[len(prefix):])
            entry.path.value = posixpath.join(
                f'{SONGS_ROOT}{value}', directory, _rename_file(basename, old, value))

            if entry.is_asset:
                for export in entry.asset:
                    export.object_name.value = _rename_stem(export.object_name.value, old, value)

        self._short_name = value

        logger.info('renamed song \'%s\' to \'%s\'', old, value)

    @property
    def song_name(self) -> str:
        return self.meta.song_name

    @song_name.setter
    def song_name(self, value: str):
        self.meta.song_name = value

    @property
    def artist_name(self) -> str:
        return self.meta.artist_name

    @artist_name.setter
    def artist_name(self, value: str):
        self.meta.artist_name = value

    @property
    def bpm(self) -> int:
        return self.meta.bpm

    @bpm.setter
    def bpm(self, value: int):
        self.meta.bpm = value

    @property
    def song_key(self) -> str:
        return self.meta.song_key

    @song_key.setter
    def song_key(self, value):
        self.meta.song_key = value

    @property
    def cels(self) -> List[CelData]:
        return list(self._cels)

    @property
    def cel_count(self) -> int:
        return len(self._cels)

    def cel(self, index: int) -> CelData:
        return self._cels[index]

    def replace_audio(self, index: int, data: bytes) -> None:
        self.cel(index).file_data = data

    @property
    def package_file_name(self) -> str:
        return f'{self._short_name}_P.pak'

    @property
    def signature_file_name(self) -> str:
        return f'{self._short_name}_P.sig'

    def render(self) -> Tuple[bytes, bytes]:
        '''Serialize the package and build its signature, from scratch each time.'''
        package = self.pak.pack()
        signature = self.packager.build(package).pack()

        logger.debug('rendered %d bytes of package and %d bytes of signature', len(package), len(signature))

        return package, signature

    def save(self, file_name: str) -> Dict[str, bytes]:
        '''Return the content of the files to write, by name; "file_name" is where
        the user wants to save the package and must have the name the game expects.'''
        # accept both kinds of separators
        name = PureWindowsPath(file_name).name

        if name != self.package_file_name:
            raise FileNameMismatch(self.package_file_name, name)

        package, signature = self.render()

        return {
            self.package_file_name: package,
            self.signature_file_name: signature,
        }
