"""
Core module for the abstraction of a file format

"""
from typing import Dict, List, Tuple

from .fields import Field
from .enum import Compliant
from .meta import MetaChunk
from .exceptions import (
    FuserPakException,
    MagicException,
)
from .properties import get_root_from_chunk


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: a Chunk is
    a node kind described by the ordered list of fields declared in the
    class body

        class Entry(Chunk):
            length = fields.StructField('I')
            data   = fields.BytesField(Dependency('.length'))

    serialize() walks that list once, reading or writing depending on the mode
    of the cursor: the list being unique, loading and saving can't drift apart.

    A Chunk can contain sub-chunks: an instance in the class body is used as
    the prototype for the field.
    """

    def __init__(self, data=None, **kwargs):
        super().__init__(**kwargs)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if data is not None:
            self.logger.debug('unpacking \'%s\' from %d bytes', self.__class__.__name__, len(data))
            self.unpack(data)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    def _set_value(self, value):
        raise TypeError(f'assign a {self.__class__.__name__} instance to replace the chunk')

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    @property
    def is_root(self):
        return self.root is self

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        self.pack()  # refresh the offsets

        return {name: (field.offset, field.size) for name, field in self.get_fields()}

    def validate(self) -> bool:
        '''Called after unpacking, override it to check the chunk makes sense.'''
        return True

    def serialize(self, cursor):
        if cursor.saving:
            for _, field in self.get_fields():
                field.update_dependencies()

        for field_name, field in self.get_fields():
            self.logger.debug('%s %s.%s at offset 0x%x',
                              'unpacking' if cursor.loading else 'packing',
                              self.__class__.__name__, field_name, cursor.tell())

            field.offset = cursor.tell()
            try:
                field.serialize(cursor)
            except FuserPakException as e:
                e.chain.append(field_name)
                raise

        if cursor.loading and not self.validate():
            self.logger.warning(f'validation for \'{self.__class__.__name__}\' failed')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(f'validation for {self.__class__.__name__} failed')
