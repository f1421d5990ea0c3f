class FuserPakException(Exception):
    '''Base class to extend in order to throw exception in fuserpak.

    Other than the message it takes a chain that represents the layers
    (field names or array indices) the exception went through; it is
    extended while the exception unwinds, so the innermost name comes first.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    @property
    def path(self):
        return '.'.join(reversed(self.chain))

    def __str__(self):
        if not self.chain:
            return self.message

        return f'{self.message} (at {self.path})'


class UnpackException(FuserPakException):
    '''The data doesn't follow the format: there is no way to go on with the load.'''
    pass


class TruncatedInput(UnpackException):

    def __init__(self, requested, available, offset, chain=None):
        self.requested = requested
        self.available = available
        self.offset = offset
        super().__init__(
            f'requested {requested} bytes at offset 0x{offset:x} but only {available} are available',
            chain=chain,
        )


class UnknownVariant(UnpackException):
    '''This is raised when a tag has no field associated: it's not possible
    to let an unknown value slip through the parsing.'''

    def __init__(self, tag, chain=None):
        self.tag = tag
        super().__init__(f'unknown variant tag {tag!r}', chain=chain)


class MagicException(FuserPakException):
    pass


class NoShortNameFound(FuserPakException):
    pass


class AssetSchemaError(FuserPakException):
    '''The asset graph doesn't contain a node with the expected kind.'''
    pass


class ValidationException(FuserPakException):
    '''User input refused; the state before the action is untouched.'''
    pass


class InvalidAudioFormat(ValidationException):
    pass


class FileNameMismatch(ValidationException):

    def __init__(self, expected, got):
        self.expected = expected
        self.got = got
        super().__init__(
            f'your file must be named as {expected} (not {got}), otherwise the song loader won\'t unlock it!')


class InvalidShortName(ValidationException):
    pass
