"""
A Field is "fundamental" datatype from the format point of view: it owns a value
and knows how to move it from/to a BinaryCursor.

There is a single serialize(cursor) for each field: what happens depends
on the mode of the cursor, so the same list of fields describes both
the loading and the saving of a structure.
"""
import logging
import struct
from enum import Enum, Flag, auto

from .enum import Compliant
from .meta import FieldBase, Endianess
from .properties import Dependency
from .streams import BinaryCursor, Mode
from .exceptions import (
    FuserPakException,
    MagicException,
    TruncatedInput,
    UnknownVariant,
)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *, name=None, father=None, default=None,
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = None
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def is_compliant(self, level):
        '''Returns True if this field or the fathers it inherits from are compliant to "level"'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    def _get_size(self):
        return len(self.raw)

    size = property(
        fget=lambda self: self._get_size(),
    )

    raw = property(
        fget=lambda self: self.pack(),
    )

    def update_dependencies(self):
        '''Before saving, write the values derived from this field (lengths, counts, tags)
        into the fields they are stored in.'''
        pass

    def serialize(self, cursor: BinaryCursor):
        raise NotImplementedError(f"method {self.__class__.__name__}.serialize() not implemented")

    def pack(self) -> bytes:
        cursor = BinaryCursor(mode=Mode.SAVE)
        self.serialize(cursor)

        return cursor.finalize()

    def unpack(self, data):
        '''Build the representation from raw data (or a cursor in LOAD mode).'''
        cursor = data if isinstance(data, BinaryCursor) else BinaryCursor(data)
        self.serialize(cursor)

        if cursor.remaining:
            self.logger.warning('%d bytes left after unpacking %s', cursor.remaining, self.__class__.__name__)

        return self


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, hex(self.value) if isinstance(self.value, int) else self.value)

        return f'<{self.__class__.__name__}({self.value!r})>'

    def __str__(self):
        if isinstance(self.value, Enum):
            return self.value.name

        return str(self.value)

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _to_raw(self, value):
        return value.value if isinstance(value, Enum) else value

    def _set_value(self, value) -> None:
        try:
            struct.pack(self.get_format(), self._to_raw(value))
        except struct.error as e:
            raise ValueError(f'{value!r} is not a valid value for the format \'{self.format}\'') from e

        self._value = value

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise UnknownVariant(value)

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def serialize(self, cursor):
        raw = cursor.scalar(self.get_format(), self._to_raw(self._value))

        if cursor.saving:
            return

        value = self._unpack_enum(raw) if self.enum else raw

        if self.is_magic and value != self.value_from_default():
            self.logger.warning(f'the magic doesn\'t correspond: 0x{raw:x}')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(f'wrong magic 0x{raw:x}')

        self._value = value


class FloatField(StructField):
    """A 32 bits float stored as its bit pattern: converting back and forth from a python
    float would change the payload of the NaNs, so a value read and not modified must
    be written back from the original bits."""

    def __init__(self, default=0.0, **kw):
        super().__init__('I', default=default, **kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    @property
    def bits(self) -> int:
        return self._value

    def _get_value(self) -> float:
        return struct.unpack('<f', struct.pack('<I', self._value))[0]

    def _set_value(self, value) -> None:
        try:
            self._value = struct.unpack('<I', struct.pack('<f', value))[0]
        except (struct.error, OverflowError) as e:
            raise ValueError(f'{value!r} is not a valid 32 bits float') from e


class FStringField(Field):
    """Text as the Unreal engine stores it (FString): a signed 32 bits length followed by
    the characters NUL terminator included. A negative length indicates that the characters
    are UTF-16 and the length counts code units.

    How the text was encoded is remembered so that unmodified strings are written back
    exactly as they were read."""

    def __init__(self, default='', **kw):
        self.wide = False
        self.terminated = True
        self.zero_length = True
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def _set_value(self, value) -> None:
        if not isinstance(value, str):
            raise ValueError(f'{self.__class__.__name__} can contain only str, not {value.__class__.__name__}')

        self._value = value

    def _encode(self):
        text = self._value

        if not text and self.zero_length:
            return 0, b''

        text += '\x00' if self.terminated else ''

        if not self.wide:
            try:
                raw = text.encode('latin-1')
                return len(raw), raw
            except UnicodeEncodeError:
                pass

        raw = text.encode('utf-16-le', 'surrogatepass')

        return -(len(raw) // 2), raw

    def _decode(self, length, raw):
        self.zero_length = length == 0
        self.wide = length < 0
        text = raw.decode('utf-16-le', 'surrogatepass') if self.wide else raw.decode('latin-1')
        # an empty string says nothing about the terminator: keep the usual one
        self.terminated = self.zero_length or text.endswith('\x00')

        self._value = text[:-1] if text.endswith('\x00') else text

    def serialize(self, cursor):
        length, raw = self._encode() if cursor.saving else (None, None)

        length = cursor.scalar('i', length)
        raw = cursor.raw(-2 * length if length < 0 else length, raw)

        if cursor.loading:
            self._decode(length, raw)


class BytesField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency: in the latter case the length is read
    from the field indicated and it's written back when saving."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"BytesField must have 'n' or 'default' indicated!")

        self._n = n if n is not None else len(kw['default'])

        if 'default' not in kw:
            kw['default'] = b'\x00' * n if isinstance(n, int) else b''

        super().__init__(**kw)

    def __repr__(self):
        value = self.value
        return '<%s(%s)>' % (self.__class__.__name__, repr(value if len(value) <= 0x10 else value[:0x10] + b'...'))

    def __len__(self):
        return len(self.value)

    @property
    def length(self) -> int:
        if isinstance(self._n, Dependency):
            if self.father is None:
                return len(self._value)

            return self._n.resolve(self)

        return self._n

    def _set_value(self, value) -> None:
        value = bytes(value)

        if not isinstance(self._n, Dependency) and len(value) != self._n:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self._n} bytes)')

        self._value = value

    def update_dependencies(self):
        if isinstance(self._n, Dependency) and self.father is not None:
            self._n.resolve_and_set(self, len(self._value))

    def serialize(self, cursor):
        data = cursor.raw(self.length if cursor.loading else len(self._value), self._value)

        if cursor.loading:
            self._value = data


class ArrayField(Field):
    '''Un/Pack an array of fields.

    The element can be indicated as a class or as an instance used as prototype;
    the number of elements as an explicit integer or as a Dependency.

    This class must behave like a list in python.
    '''

    def __init__(self, field_cls, n=0, **kw):
        if not isinstance(n, (int, Dependency)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.field_cls = field_cls
        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return [self.instance_element() for _ in range(self._n if isinstance(self._n, int) else 0)]

    def _set_value(self, value):
        for element in value:
            element.father = self

        self._value = list(value)

    @property
    def n(self) -> int:
        if isinstance(self._n, Dependency) and self.father is not None:
            return self._n.resolve(self)

        return len(self._value)

    def instance_element(self):
        if isinstance(self.field_cls, type):
            element = self.field_cls()
            element.father = self
            return element

        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self._value.append(element)

    def clear(self):
        self._value.clear()

    def update_dependencies(self):
        if isinstance(self._n, Dependency) and self.father is not None:
            self._n.resolve_and_set(self, len(self._value))

        for element in self._value:
            element.update_dependencies()

    def serialize(self, cursor):
        if cursor.loading:
            n = self.n
            # every element takes at least one byte
            if n > cursor.remaining:
                raise TruncatedInput(n, cursor.remaining, cursor.tell())

            self.logger.debug('unpacking %d elements for \'%s\'', n, self.name)
            self._value = [self.instance_element() for _ in range(n)]

        for index, element in enumerate(self._value):
            element.offset = cursor.tell()
            try:
                element.serialize(cursor)
            except FuserPakException as e:
                e.chain.append(str(index))
                raise


class SelectField(Field):
    """Allow to select the kind of final field based on the value of a tag: you need
    to pass the name of the sibling field containing the tag (or a Dependency
    to it) and a dictionary with the mapping between tag and field. You can use
    Type.DEFAULT as a default, otherwise an unknown tag raises UnknownVariant.

    When saving, the tag is derived from the variant currently held.

    Like in the following example we have a format that uses the first 4 bytes
    to indicate what follows: for value zero you have another 4 bytes, otherwise
    you have a sixteen bytes string

        class DummyType(Enum):
            FIRST = 0
            SECOND = 1

        type2field = {
            DummyType.FIRST: fields.StructField('I'),
            DummyType.SECOND: fields.BytesField(0x10),
        }

        class DummyChunk(Chunk):
            type = fields.StructField('I', enum=DummyType)
            data = fields.SelectField('type', type2field)
    """
    class Type(Flag):
        DEFAULT = auto()

    def __init__(self, key, mapping, **kw):
        self._key = key
        self._mapping = mapping
        self._field = None
        self._selected = None

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}{self._field!r}>'

    @property
    def father(self):
        return self._father

    @father.setter
    def father(self, value):
        self._father = value
        # the variant stands in the place of the select
        if self._field is not None:
            self._field.father = value

    @property
    def selected(self):
        return self._selected

    @property
    def field(self):
        return self._field

    def init(self):
        key = self.default if self.default in self._mapping else SelectField.Type.DEFAULT

        self._field = self._instance_field(key) if key in self._mapping else None
        self._selected = key if key in self._mapping and key != SelectField.Type.DEFAULT else None

    def _instance_field(self, key):
        prototype = self._mapping[key]
        field = prototype() if isinstance(prototype, type) else prototype.create(father=self.father)
        field.father = self.father
        field.name = self.name

        return field

    def _key_field(self):
        if isinstance(self._key, Dependency):
            return self._key.resolve_field(self)

        return getattr(self.father, self._key)

    def _get_value(self):
        return self._field.value if self._field is not None else None

    def _set_value(self, value):
        if self._field is None:
            raise ValueError(f'no variant selected for field \'{self.name}\'')

        self._field.value = value

    def _get_size(self) -> int:
        return self._field.size

    def select(self, key, value=None):
        '''Switch to the variant indicated by "key"; "value" can be the field itself
        or a value for it.'''
        if key not in self._mapping:
            raise UnknownVariant(key)

        prototype = self._mapping[key]

        if isinstance(value, prototype if isinstance(prototype, type) else prototype.__class__):
            field = value
            field.father = self.father
            field.name = self.name
        else:
            field = self._instance_field(key)
            if value is not None:
                field.value = value

        self._field = field
        self._selected = key

        if self.father is not None:
            self._key_field().value = key

        return field

    def update_dependencies(self):
        if self._field is None:
            return

        if self._selected is not None:
            self._key_field().value = self._selected

        self._field.update_dependencies()

    def serialize(self, cursor):
        if cursor.loading:
            key = self._key_field().value
            self.logger.debug('resolving key \'%s\' to %r', self._key, key)

            if key in self._mapping:
                self._field = self._instance_field(key)
            elif SelectField.Type.DEFAULT in self._mapping:
                self._field = self._instance_field(SelectField.Type.DEFAULT)
            else:
                raise UnknownVariant(key)

            self._selected = key

        if self._field is None:
            raise ValueError(f'no variant selected for field \'{self.name}\'')

        self._field.offset = cursor.tell()
        self._field.serialize(cursor)


class SizedChunkField(Field):
    '''A chunk stored inside a region whose length is indicated by another field.

    When saving the length is recomputed from the chunk, so it follows any change
    made to it; bytes of the region that follow the chunk are kept as they are.'''

    def __init__(self, chunk_cls, n, **kw):
        if not isinstance(n, (int, Dependency)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.chunk_cls = chunk_cls
        self._n = n
        self._packed = None
        self.trailing = b''

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._value!r})>'

    def value_from_default(self):
        return self.chunk_cls()

    def _set_value(self, value):
        if not isinstance(value, self.chunk_cls):
            raise TypeError(f'{self.__class__.__name__} can contain only {self.chunk_cls.__name__}')

        value.father = self
        self._value = value
        self._packed = None

    @property
    def length(self) -> int:
        if isinstance(self._n, Dependency):
            return self._n.resolve(self)

        return self._n

    def _pack_region(self) -> bytes:
        return self._value.pack() + self.trailing

    def update_dependencies(self):
        self._packed = self._pack_region()

        if isinstance(self._n, Dependency) and self.father is not None:
            self._n.resolve_and_set(self, len(self._packed))

    def serialize(self, cursor):
        if cursor.loading:
            region = BinaryCursor(cursor.read_bytes(self.length))

            chunk = self.chunk_cls()
            chunk.father = self
            chunk.serialize(region)

            self.trailing = region.read_bytes(region.remaining)
            if self.trailing:
                self.logger.debug('keeping %d trailing bytes after %s', len(self.trailing), self.chunk_cls.__name__)

            self._value = chunk
            return

        packed = self._packed if self._packed is not None else self._pack_region()
        self._packed = None

        if isinstance(self._n, int) and len(packed) != self._n:
            raise ValueError(f'{self.chunk_cls.__name__} takes {len(packed)} bytes instead of {self._n}')

        cursor.write_bytes(packed)
