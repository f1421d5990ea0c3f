#!/usr/bin/env python3
'''
Print the entries of a package and, if it contains a custom song, its
metadata and cels.

With "-a" the property graph of each asset is printed too.
'''
import os
import sys
import logging

from rich.console import Console

from fuserpak.dump import dump_pak, dump_song
from fuserpak.exceptions import FuserPakException, NoShortNameFound
from fuserpak.fuser import EditSession
from fuserpak.pak import PakFile


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} [-a] <pak file>')
    sys.exit(1)


if __name__ == '__main__':
    args = sys.argv[1:]
    show_assets = '-a' in args
    args = [_ for _ in args if _ != '-a']

    if len(args) != 1:
        usage(sys.argv[0])

    path = args[0]

    with open(path, 'rb') as f:
        data = f.read()

    console = Console()

    try:
        pak = PakFile(data)
    except FuserPakException as e:
        logger.error(f'failed to parse \'{path}\': {e}')
        sys.exit(2)

    dump_pak(pak, console=console, assets=show_assets)

    try:
        session = EditSession(pak)
    except NoShortNameFound:
        logger.info('the package doesn\'t contain a custom song')
        sys.exit(0)

    dump_song(session, console=console)
