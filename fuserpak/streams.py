import logging
import struct
from enum import Enum, auto
from functools import lru_cache

from .exceptions import TruncatedInput


logger = logging.getLogger(__name__)


class Mode(Enum):
    LOAD = auto()
    SAVE = auto()


@lru_cache(maxsize=None)
def _get_struct(fmt: str) -> struct.Struct:
    if fmt[0] not in '<>!=@':
        fmt = '<' + fmt  # the format is little endian unless told otherwise

    return struct.Struct(fmt)


class BinaryCursor(object):
    '''Byte buffer with a position that works in exactly one of two modes.

    In LOAD mode it wraps the data to decode and each read advances the offset;
    in SAVE mode it starts empty and each write appends at the end.

    The methods scalar() and raw() are the same in both modes: they read and
    return in LOAD mode, write and return the value passed in SAVE mode, so
    that a single traversal can serve both directions.
    '''
    INITIAL_CAPACITY = 0x100

    def __init__(self, data=None, mode=None):
        if mode is None:
            mode = Mode.LOAD if data is not None else Mode.SAVE

        self.mode = mode
        self._offset = 0

        if mode == Mode.LOAD:
            if data is None:
                raise ValueError('a cursor in LOAD mode needs some data')
            self._buffer = memoryview(bytes(data))
            self._length = len(self._buffer)
        else:
            self._buffer = bytearray(self.INITIAL_CAPACITY)
            self._length = 0
            if data:
                self.write_bytes(data)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.mode.name}, offset=0x{self._offset:x}, length=0x{self._length:x})>'

    def __len__(self):
        return self._length

    @property
    def loading(self) -> bool:
        return self.mode == Mode.LOAD

    @property
    def saving(self) -> bool:
        return self.mode == Mode.SAVE

    @property
    def remaining(self) -> int:
        return self._length - self._offset

    def tell(self) -> int:
        return self._offset

    def _check_mode(self, mode):
        if self.mode != mode:
            raise ValueError(f'operation not permitted on a cursor in {self.mode.name} mode')

    def _take(self, size: int) -> memoryview:
        if size < 0 or size > self.remaining:
            raise TruncatedInput(size, self.remaining, self._offset)

        start = self._offset
        self._offset += size

        return self._buffer[start:self._offset]

    def _put(self, data) -> None:
        end = self._offset + len(data)

        if end > len(self._buffer):
            # geometric growth so that appending is linear overall
            capacity = max(end, 2 * len(self._buffer))
            logger.debug('growing buffer to 0x%x bytes', capacity)
            self._buffer.extend(bytes(capacity - len(self._buffer)))

        self._buffer[self._offset:end] = data
        self._offset = end
        self._length = end

    def read_scalar(self, fmt: str):
        self._check_mode(Mode.LOAD)
        st = _get_struct(fmt)

        return st.unpack(self._take(st.size))[0]

    def write_scalar(self, fmt: str, value) -> None:
        self._check_mode(Mode.SAVE)
        self._put(_get_struct(fmt).pack(value))

    def read_bytes(self, size: int) -> bytes:
        self._check_mode(Mode.LOAD)

        return bytes(self._take(size))

    def write_bytes(self, data) -> None:
        self._check_mode(Mode.SAVE)
        self._put(data)

    def scalar(self, fmt: str, value=None):
        if self.loading:
            return self.read_scalar(fmt)

        self.write_scalar(fmt, value)

        return value

    def raw(self, size: int, value=None) -> bytes:
        '''Read "size" bytes or write "value" (that must be "size" bytes long).'''
        if self.loading:
            return self.read_bytes(size)

        if len(value) != size:
            raise ValueError(f'trying to write {len(value)} bytes where {size} are expected')

        self.write_bytes(value)

        return value

    def finalize(self) -> bytes:
        '''Trim the scratch space and return the data written so far.'''
        self._check_mode(Mode.SAVE)
        del self._buffer[self._length:]

        return bytes(self._buffer)
