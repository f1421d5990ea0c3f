from enum import Enum


class FuserEnum(Enum):
    '''The values are the tokens stored in the ENUM properties; "type_name"
    is the name of the enumeration the asset stores beside them.'''

    @classmethod
    def from_token(cls, token):
        if isinstance(token, cls):
            return token

        try:
            return cls(token)
        except ValueError:
            raise ValueError(f'\'{token}\' is not a token of {cls.type_name()}, '
                             f'choose one of {", ".join(_.value for _ in cls)}') from None

    @classmethod
    def type_name(cls):
        return 'E' + cls.__name__


class Key(FuserEnum):
    C  = 'C'
    Db = 'Db'
    D  = 'D'
    Eb = 'Eb'
    E  = 'E'
    F  = 'F'
    Gb = 'Gb'
    G  = 'G'
    Ab = 'Ab'
    A  = 'A'
    Bb = 'Bb'
    B  = 'B'


class Instrument(FuserEnum):
    Guitar         = 'Guitar'
    AcousticGuitar = 'AcousticGuitar'
    Bass           = 'Bass'
    Drums          = 'Drums'
    Percussion     = 'Percussion'
    Keys           = 'Keys'
    Piano          = 'Piano'
    Synth          = 'Synth'
    Sampler        = 'Sampler'
    Strings        = 'Strings'
    Horns          = 'Horns'
    Vocals         = 'Vocals'
    Turntable      = 'Turntable'


class CelType(FuserEnum):
    Beat = 'Beat'
    Bass = 'Bass'
    Loop = 'Loop'
    Lead = 'Lead'
