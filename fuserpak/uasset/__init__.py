'''
# Asset

The structured entries of a package contain an asset: a list of exports, each
one an object with a class, a name and a table of properties.

  .-----------------------------.
  | magic            (u32)      |
  | number of exports (u32)     |
  | export 1                    |
  |   class name     (FString)  |
  |   object name    (FString)  |
  |   property table            |
  |     count        (u32)      |
  |     property 1              |
  |     ...                     |
  ...
  | export N                    |
  '-----------------------------'

A property is a key, a one byte tag and the payload indicated by the tag
(see PropertyTag); structures contain a property table of their own and
arrays contain payloads all of the same kind, so the graph is recursive.

The objects referencing other objects (OBJECT payloads) store the position
of the export in the asset plus one, zero meaning no object.
'''
import logging
from typing import Iterator, List, Optional

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import AssetSchemaError
from ..properties import Dependency
from .enum import PropertyTag


logger = logging.getLogger(__name__)

ASSET_MAGIC = 0x9E2A83C1


class EnumValue(Chunk):
    '''A token of an enumeration, together with the name of the enumeration itself'''
    enum_type = fields.FStringField()
    token     = fields.FStringField()

    def _get_value(self):
        return self.token.value

    def _set_value(self, value):
        self.token.value = value

    @classmethod
    def build(cls, enum_type: str, token: str) -> 'EnumValue':
        value = cls()
        value.enum_type.value = enum_type
        value.token.value = token

        return value


class BytesValue(Chunk):
    length = fields.StructField('I')
    data   = fields.BytesField(Dependency('.length'))

    def _get_value(self):
        return self.data.value

    def _set_value(self, value):
        self.data.value = value


class Property(Chunk):
    key = fields.FStringField()
    tag = fields.StructField('B', enum=PropertyTag, compliant=Compliant.ENUM)
    # the payload is attached below, the kinds of value referring back to this class

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.key.value}:{self.tag}={self.payload.field!r})>'

    def _get_value(self):
        return self.payload.value

    def _set_value(self, value):
        self.payload.value = value

    @classmethod
    def build(cls, key: str, tag: PropertyTag, value) -> 'Property':
        prop = cls()
        prop.key.value = key
        prop.payload.select(tag, value)

        return prop


class PropertyTable(Chunk):
    '''Ordered properties of an object: the order is kept as it is.'''
    count = fields.StructField('I')
    items = fields.ArrayField(Property, n=Dependency('.count'))

    def __len__(self):
        return len(self.items)

    def __iter__(self) -> Iterator[Property]:
        return iter(self.items)

    def __contains__(self, key):
        return self.get(key) is not None

    def __getitem__(self, key) -> Property:
        prop = self.get(key)

        if prop is None:
            raise KeyError(key)

        return prop

    def keys(self) -> List[str]:
        return [_.key.value for _ in self.items]

    def get(self, key: str) -> Optional[Property]:
        '''Return the first property named "key"'''
        for prop in self.items:
            if prop.key.value == key:
                return prop

        return None

    def append(self, prop: Property) -> Property:
        self.items.append(prop)

        return prop

    def set(self, key: str, tag: PropertyTag, value) -> Property:
        '''Change the value of the property named "key", creating it if needed.'''
        prop = self.get(key)

        if prop is None:
            return self.append(Property.build(key, tag, value))

        if prop.tag.value == tag and not isinstance(value, fields.Field):
            prop.value = value
        else:
            prop.payload.select(tag, value)

        return prop


class StructValue(Chunk):
    struct_type = fields.FStringField()
    properties  = PropertyTable()

    @classmethod
    def build(cls, struct_type: str, properties=()) -> 'StructValue':
        value = cls()
        value.struct_type.value = struct_type

        for prop in properties:
            value.properties.append(prop)

        return value


class ArrayValue(Chunk):
    '''The elements are all of the kind indicated by inner_tag'''
    inner_tag = fields.StructField('B', enum=PropertyTag, compliant=Compliant.ENUM)
    count     = fields.StructField('I')
    # the elements are attached below

    def __len__(self):
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index].value

    def __iter__(self):
        return (_.value for _ in self.items)

    def append(self, value):
        element = self.items.instance_element()
        element.select(self.inner_tag.value, value)
        self.items.append(element)

    @classmethod
    def build(cls, inner_tag: PropertyTag, values=()) -> 'ArrayValue':
        value = cls()
        value.inner_tag.value = inner_tag

        for _ in values:
            value.append(_)

        return value


VALUE_FIELDS = {
    PropertyTag.BOOL:   fields.StructField('B'),
    PropertyTag.INT:    fields.StructField('i'),
    PropertyTag.UINT:   fields.StructField('I'),
    PropertyTag.INT64:  fields.StructField('q'),
    PropertyTag.FLOAT:  fields.FloatField(),
    PropertyTag.STR:    fields.FStringField(),
    PropertyTag.ENUM:   EnumValue,
    PropertyTag.OBJECT: fields.StructField('i'),
    PropertyTag.STRUCT: StructValue,
    PropertyTag.ARRAY:  ArrayValue,
    PropertyTag.BYTES:  BytesValue,
}

Property.add_to_class('payload', fields.SelectField('tag', VALUE_FIELDS))
ArrayValue.add_to_class('items', fields.ArrayField(
    fields.SelectField(Dependency('..inner_tag'), VALUE_FIELDS), n=Dependency('.count')))


class Export(Chunk):
    class_name  = fields.FStringField()
    object_name = fields.FStringField()
    properties  = PropertyTable()

    @classmethod
    def build(cls, class_name: str, object_name: str, properties=()) -> 'Export':
        export = cls()
        export.class_name.value = class_name
        export.object_name.value = object_name

        for prop in properties:
            export.properties.append(prop)

        return export


class AssetFile(Chunk):
    magic        = fields.StructField('I', default=ASSET_MAGIC, is_magic=True, compliant=Compliant.MAGIC)
    export_count = fields.StructField('I')
    exports      = fields.ArrayField(Export, n=Dependency('.export_count'))

    def __iter__(self) -> Iterator[Export]:
        return iter(self.exports)

    def find_export(self, class_name: str) -> Optional[Export]:
        for export in self.exports:
            if export.class_name.value == class_name:
                return export

        return None

    def add_export(self, export: Export) -> int:
        '''Append the export and return the reference to it'''
        self.exports.append(export)

        logger.debug('added export %s \'%s\' as #%d',
                     export.class_name.value, export.object_name.value, len(self.exports))

        return len(self.exports)

    def reference_of(self, export: Export) -> int:
        for index, _ in enumerate(self.exports):
            if _ is export:
                return index + 1

        raise AssetSchemaError(f'{export!r} is not an export of this asset')

    def resolve(self, reference: int) -> Optional[Export]:
        '''Return the export a reference points to (None for the null reference).'''
        if reference == 0:
            return None

        if reference < 0 or reference > len(self.exports):
            raise AssetSchemaError(f'reference {reference} is outside the {len(self.exports)} exports of the asset')

        return self.exports[reference - 1]
