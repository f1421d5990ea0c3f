'''
# Signature

Companion file of a package, checked by the game loader before using it:

  .------------------------------------.
  | encrypted total hash (512 bytes)   |
  | number of windows (u32)            |
  | CRC of window 1 (u32)              |
  ...
  | CRC of window N (u32)              |
  '------------------------------------'

A window is 64KiB of the package, the last one can be shorter.

Nothing here knows how the total hash is built: it's zero filled unless a
hash provider (a callable taking the package and returning 512 bytes)
is indicated.
'''
import logging
from typing import Callable, List, Optional

from ..core import Chunk
from .. import fields
from ..common.crc import ChecksumChunker
from ..exceptions import UnpackException
from ..properties import Dependency


logger = logging.getLogger(__name__)

SIGNATURE_HASH_SIZE = 512

HashProvider = Callable[[bytes], bytes]


class SignatureFile(Chunk):
    encrypted_total_hash = fields.BytesField(SIGNATURE_HASH_SIZE)
    count                = fields.StructField('I')
    chunks               = fields.ArrayField(fields.StructField('I'), n=Dependency('.count'))

    def __len__(self):
        return len(self.chunks)

    @property
    def crcs(self) -> List[int]:
        return [_.value for _ in self.chunks]

    @crcs.setter
    def crcs(self, values):
        self.chunks.clear()
        for value in values:
            element = self.chunks.instance_element()
            element.value = value
            self.chunks.append(element)

    def serialize(self, cursor):
        super().serialize(cursor)

        # the file ends with the last CRC
        if cursor.loading and cursor.remaining:
            raise UnpackException(
                f'the signature declares {len(self)} windows but {cursor.remaining} bytes follow them')

    def mismatches(self, buffer, chunker: Optional[ChecksumChunker] = None) -> List[int]:
        '''Return the indexes of the windows of "buffer" that don't match the signature.'''
        actual = (chunker or ChecksumChunker()).compute(buffer)
        expected = self.crcs

        return [index for index in range(max(len(actual), len(expected)))
                if index >= len(actual) or index >= len(expected) or actual[index] != expected[index]]


class SignaturePackager(object):
    '''Build the signature of a package from its final bytes'''

    def __init__(self, hash_provider: Optional[HashProvider] = None, chunker: Optional[ChecksumChunker] = None):
        self.hash_provider = hash_provider
        self.chunker = chunker or ChecksumChunker()

    def _total_hash(self, buffer) -> bytes:
        if self.hash_provider is None:
            return b'\x00' * SIGNATURE_HASH_SIZE

        value = bytes(self.hash_provider(buffer))

        if len(value) != SIGNATURE_HASH_SIZE:
            raise ValueError(f'the hash provider returned {len(value)} bytes instead of {SIGNATURE_HASH_SIZE}')

        return value

    def build(self, buffer) -> SignatureFile:
        signature = SignatureFile()
        signature.encrypted_total_hash.value = self._total_hash(buffer)
        signature.crcs = self.chunker.compute(buffer)

        logger.debug('signature with %d windows for %d bytes', len(signature), len(buffer))

        return signature
