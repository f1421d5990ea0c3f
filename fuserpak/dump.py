'''
Human readable rendering of packages, assets and songs on a rich console.

The functions take the console to print to (a new one on stdout otherwise),
so the output can be captured passing Console(file=StringIO()).
'''
import logging

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .exceptions import AssetSchemaError
from .uasset import ArrayValue, AssetFile, BytesValue, EnumValue, PropertyTable, StructValue
from .uasset.enum import PropertyTag


logger = logging.getLogger(__name__)

def _console(console):
    return console if console is not None else Console()


def _describe(value) -> str:
    if isinstance(value, EnumValue):
        return f'{value.enum_type.value}::{value.token.value}'

    if isinstance(value, bytes):
        return f'{len(value)} bytes ({value[:8].hex()}{"..." if len(value) > 8 else ""})'

    return repr(value)


def _add_properties(tree: Tree, table: PropertyTable):
    for prop in table:
        tag = prop.tag.value
        label = f'[bold]{escape(prop.key.value)}[/bold] [dim]{tag.name}[/dim]'
        value = prop.payload.field if tag in (PropertyTag.BYTES, PropertyTag.ENUM) else prop.value

        if isinstance(value, StructValue):
            _add_properties(tree.add(f'{label} {escape(value.struct_type.value)}'), value.properties)
        elif isinstance(value, ArrayValue):
            _add_array(tree.add(f'{label} of {value.inner_tag.value.name}'), value)
        elif isinstance(value, BytesValue):
            tree.add(f'{label} {escape(_describe(value.value))}')
        else:
            tree.add(f'{label} {escape(_describe(value))}')


def _add_array(tree: Tree, array: ArrayValue):
    for index, element in enumerate(array.items):
        value = element.field if array.inner_tag.value == PropertyTag.ENUM else element.value

        if isinstance(value, StructValue):
            _add_properties(tree.add(f'[{index}] {escape(value.struct_type.value)}'), value.properties)
        elif isinstance(value, ArrayValue):
            _add_array(tree.add(f'[{index}] of {value.inner_tag.value.name}'), value)
        else:
            tree.add(f'[{index}] {escape(_describe(value))}')


def asset_tree(asset: AssetFile, title='asset') -> Tree:
    tree = Tree(escape(title))

    for reference, export in enumerate(asset, start=1):
        node = tree.add(
            f'#{reference} [bold cyan]{escape(export.class_name.value)}[/bold cyan] {escape(export.object_name.value)}')
        _add_properties(node, export.properties)

    return tree


def pak_table(pak) -> Table:
    table = Table(title=f'{len(pak)} entries')
    table.add_column('#', justify='right')
    table.add_column('path')
    table.add_column('kind')
    table.add_column('size', justify='right')
    table.add_column('exports')

    for index, entry in enumerate(pak):
        if entry.is_asset:
            size = len(entry.payload.field.raw)
            exports = ', '.join(_.class_name.value for _ in entry.asset)
        else:
            size = len(entry.payload.value)
            exports = ''

        table.add_row(str(index), escape(entry.path.value), entry.kind.value.name, str(size), escape(exports))

    return table


def dump_pak(pak, console=None, assets=False):
    '''Print the entries of the package and, with "assets", the graph of each asset.'''
    console = _console(console)
    console.print(pak_table(pak))

    if not assets:
        return

    for entry in pak:
        if entry.is_asset:
            console.print(asset_tree(entry.asset, entry.path.value))


def _cel_field(cel, getter) -> str:
    # a cel not following the usual structure is still listed
    try:
        return getter(cel)
    except AssetSchemaError as e:
        logger.warning('%s: %s', cel.label, e)
        return '-'


def dump_song(session, console=None):
    console = _console(console)

    song = Table(title=f'song [bold]{escape(session.short_name)}[/bold]', show_header=False)
    song.add_column('field')
    song.add_column('value')
    song.add_row('song name', escape(session.song_name))
    song.add_row('artist', escape(session.artist_name))
    song.add_row('BPM', str(session.bpm))
    song.add_row('key', escape(session.song_key))
    song.add_row('files', f'{session.package_file_name}, {session.signature_file_name}')

    console.print(song)

    cels = Table(title=f'{session.cel_count} cels')
    cels.add_column('#', justify='right')
    cels.add_column('label')
    cels.add_column('type')
    cels.add_column('instrument')
    cels.add_column('sample rate', justify='right')
    cels.add_column('audio', justify='right')

    for index, cel in enumerate(session.cels):
        cels.add_row(
            str(index),
            escape(cel.label),
            _cel_field(cel, lambda _: escape(_.cel_type)),
            _cel_field(cel, lambda _: escape(_.instrument)),
            _cel_field(cel, lambda _: str(_.sample_rate)),
            _cel_field(cel, lambda _: f'{len(_.file_data)} bytes'),
        )

    console.print(cels)
