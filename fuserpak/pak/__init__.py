'''
# Package

The package (pak) is an ordered list of named entries

  .------------------------------.
  | number of entries (u32)      |
  | entry 1                      |
  |   path           (FString)   |
  |   kind           (u8)        |
  |   payload size   (u32)       |
  |   payload                    |
  ...
  | entry N                      |
  '------------------------------'

The payload of a RAW entry is kept as it is, the payload of an ASSET entry
is an asset (see fuserpak.uasset) and its size is recomputed each time the
package is saved.

The paths are slash separated, like "DLC/Songs/foo/Meta_foo.uexp"; the format
doesn't prevent two entries from having the same path.
'''
import logging
from collections import Counter
from enum import Enum
from typing import Iterator, List, Optional, Union

from ..core import Chunk
from .. import fields
from ..properties import Dependency
from ..uasset import AssetFile


logger = logging.getLogger(__name__)


class PakEntryKind(Enum):
    RAW   = 0
    ASSET = 1


class PakEntry(Chunk):
    path         = fields.FStringField()
    kind         = fields.StructField('B', enum=PakEntryKind)
    payload_size = fields.StructField('I')
    payload      = fields.SelectField('kind', {
        PakEntryKind.RAW: fields.BytesField(Dependency('.payload_size')),
        PakEntryKind.ASSET: fields.SizedChunkField(AssetFile, Dependency('.payload_size')),
    })

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.path.value!r}, {self.kind})>'

    @property
    def is_asset(self) -> bool:
        return self.kind.value == PakEntryKind.ASSET

    @property
    def asset(self) -> Optional[AssetFile]:
        return self.payload.value if self.is_asset else None

    @classmethod
    def build(cls, path: str, data: Union[bytes, AssetFile]) -> 'PakEntry':
        entry = cls()
        entry.path.value = path
        entry.payload.select(PakEntryKind.ASSET if isinstance(data, AssetFile) else PakEntryKind.RAW, data)

        return entry


class PakFile(Chunk):
    count   = fields.StructField('I')
    entries = fields.ArrayField(PakEntry, n=Dependency('.count'))

    def __len__(self):
        return len(self.entries)

    def __iter__(self) -> Iterator[PakEntry]:
        return iter(self.entries)

    def paths(self) -> List[str]:
        return [_.path.value for _ in self.entries]

    def validate(self) -> bool:
        # duplicates are legal, they are only hidden from find_by_path()
        duplicates = [path for path, count in Counter(self.paths()).items() if count > 1]

        if duplicates:
            logger.warning('duplicated entries %s: only the first one of each is reachable by path', duplicates)

        return True

    def find_by_path(self, path: str) -> Optional[PakEntry]:
        for entry in self.entries:
            if entry.path.value == path:
                return entry

        return None

    def add(self, path: str, data: Union[bytes, AssetFile]) -> PakEntry:
        entry = PakEntry.build(path, data)
        self.entries.append(entry)

        return entry
