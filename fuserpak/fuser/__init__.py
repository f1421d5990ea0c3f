'''
# Fuser custom songs

The song specific layer above the package: where the metadata and the cels
are, and the session to edit them.
'''
from .enum import CelType, Instrument, Key
from .session import EditSession, find_short_name
from .song import CelData, SongMeta
from .template import build_template
