import struct

import pytest

from fuserpak.fuser import EditSession, build_template


def encode_fstring(text, wide=False):
    '''FString as the engine writes it: length with the terminator, negative for UTF-16.'''
    if wide:
        raw = (text + '\x00').encode('utf-16-le')
        return struct.pack('<i', -(len(raw) // 2)) + raw

    raw = (text + '\x00').encode('latin-1')
    return struct.pack('<i', len(raw)) + raw


@pytest.fixture
def fstring():
    return encode_fstring


@pytest.fixture
def template_data():
    return build_template().pack()


@pytest.fixture
def session():
    return EditSession.new()


@pytest.fixture
def mogg():
    return b'\x0b' + b'encrypted mogg data' * 10
