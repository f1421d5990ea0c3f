'''
CRC calculation over fixed size windows of a buffer.

The CRC is the standard one with pre and post conditioning, as defined by ISO 3309 [ISO-3309]
or ITU-T V.42 [ITU-V42], i.e. what the engine computes with MemCrc32() and zlib with crc32().
The CRC polynomial employed is

  x^32+x^26+x^23+x^22+x^16+x^12+x^11+x^10+x^8+x^7+x^5+x^4+x^2+x+1
'''
import logging
from typing import List
from zlib import crc32


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ChecksumChunker(object):
    '''Split a buffer in windows of "window_size" bytes (the last one can be shorter,
    it's not padded) and calculate a CRC for each of them, in buffer order.'''

    def __init__(self, window_size: int = CHUNK_SIZE):
        if window_size <= 0:
            raise ValueError(f'the window size must be positive, not {window_size}')

        self.window_size = window_size

    def __repr__(self):
        return f'<{self.__class__.__name__}(window_size=0x{self.window_size:x})>'

    def windows(self, buffer):
        view = memoryview(buffer)

        for start in range(0, len(view), self.window_size):
            yield view[start:start + self.window_size]

    def compute(self, buffer) -> List[int]:
        chunks = [crc32(window) & 0xffffffff for window in self.windows(buffer)]

        logger.debug('computed %d CRCs over %d bytes', len(chunks), len(buffer))

        return chunks


def compute(buffer, window_size: int = CHUNK_SIZE) -> List[int]:
    return ChecksumChunker(window_size).compute(buffer)
