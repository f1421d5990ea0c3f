from enum import Enum


class PropertyTag(Enum):
    '''Kind of payload that follows the tag of a property'''
    BOOL   = 0x00
    INT    = 0x01
    UINT   = 0x02
    INT64  = 0x03
    FLOAT  = 0x04
    STR    = 0x05
    ENUM   = 0x06
    OBJECT = 0x07  # reference to an export of the same asset
    STRUCT = 0x08
    ARRAY  = 0x09
    BYTES  = 0x0a
