import copy
import logging
from enum import Enum, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """Wrapper around field access of a Field related class.

    The field declared in the class body is a prototype: the first access from
    an instance creates a private copy of it having the instance as father.
    """

    def __init__(self, field_instance: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            self.logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        # if the value is a field of the same type then it replaces the old one
        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            instance.__dict__[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if getattr(cls, name, None) is not None:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):
    '''Collect the fields declared in the class body keeping their order, that
    is the order they have in the binary representation.'''

    logger = logging.getLogger(__name__)

    def __new__(cls, names, bases, attrs):
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaChunk, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        for parent in [_ for _ in bases if isinstance(_, MetaChunk)]:
            for obj_name in parent._meta.fields:
                new_cls._meta.fields.append(obj_name)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        '''Fields can be attached after the class creation too: useful for
        recursive formats where a field needs the class itself.'''
        if isinstance(value, FieldBase):
            cls.logger.debug('adding field \'%s\' to %s', name, cls.__name__)
            value.contribute_to_chunk(cls, name)
            cls._meta.fields.append(name)
        else:
            setattr(cls, name, value)
