#!/usr/bin/env python3
'''
Edit a custom song from the command line and write the package together with
its signature, named as the game expects them (<short name>_P.pak and
<short name>_P.sig):

 $ songpatch.py custom_song_P.pak --short-name my_song --bpm 128 --audio 0=beat.mogg -o out/

The cels are indicated by their position, as listed by pakinfo.py. Without an
input package (--new NAME) the song starts from the template.
'''
import os
import sys
import logging
import argparse

from rich.console import Console

from fuserpak.dump import dump_song
from fuserpak.exceptions import FuserPakException, ValidationException
from fuserpak.fuser import EditSession


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def indexed(value):
    '''Parse "INDEX=VALUE" into a couple.'''
    index, sep, rest = value.partition('=')

    if not sep or not index.isdigit():
        raise argparse.ArgumentTypeError(f'\'{value}\' must be in the form INDEX=VALUE')

    return int(index), rest


def get_parser():
    parser = argparse.ArgumentParser(description='edit a Fuser custom song')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('pak', nargs='?', help='package to edit')
    source.add_argument('--new', metavar='NAME', help='start from the template with the given short name')

    parser.add_argument('--short-name')
    parser.add_argument('--song-name')
    parser.add_argument('--artist')
    parser.add_argument('--bpm', type=int)
    parser.add_argument('--key')
    parser.add_argument('--instrument', type=indexed, action='append', default=[], metavar='I=TOKEN')
    parser.add_argument('--sample-rate', type=indexed, action='append', default=[], metavar='I=N')
    parser.add_argument('--audio', type=indexed, action='append', default=[], metavar='I=FILE',
                        help='encrypted mogg to use as audio of the cel')
    parser.add_argument('-o', '--output', default='.', metavar='DIR', help='directory where to write the files')

    return parser


def apply(session, args):
    if args.short_name is not None:
        session.short_name = args.short_name
    if args.song_name is not None:
        session.song_name = args.song_name
    if args.artist is not None:
        session.artist_name = args.artist
    if args.bpm is not None:
        session.bpm = args.bpm
    if args.key is not None:
        session.song_key = args.key

    for index, token in args.instrument:
        session.cel(index).instrument = token

    for index, rate in args.sample_rate:
        session.cel(index).sample_rate = int(rate)

    for index, path in args.audio:
        with open(path, 'rb') as f:
            session.replace_audio(index, f.read())


if __name__ == '__main__':
    args = get_parser().parse_args()

    try:
        if args.new is not None:
            session = EditSession.new(args.new)
        else:
            with open(args.pak, 'rb') as f:
                session = EditSession.open(f.read())

        apply(session, args)
        files = session.save(os.path.join(args.output, session.package_file_name))
    except ValidationException as e:
        logger.error(str(e))
        sys.exit(1)
    except (FuserPakException, IndexError, ValueError) as e:
        logger.error(f'failed to edit the song: {e}')
        sys.exit(2)

    dump_song(session, console=Console())

    os.makedirs(args.output, exist_ok=True)

    for name, data in files.items():
        path = os.path.join(args.output, name)
        with open(path, 'wb') as f:
            f.write(data)

        logger.info(f'written {len(data)} bytes to \'{path}\'')
