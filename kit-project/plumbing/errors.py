# What it does: Defines every error the plumbing layer can raise
# How it does: A single KitError base so commands can catch everything from the core in one place, with narrower subclasses for each kind of corruption
# What data structure it uses: A class hierarchy (tree) of exception types


class KitError(Exception):
    """Base class for all errors raised by the plumbing layer."""


class KitIOError(KitError):
    # Filesystem failures and short reads
    pass


class NotFoundError(KitError):
    pass


class ObjectNotFoundError(NotFoundError):
    pass


class RefNotFoundError(NotFoundError):
    pass


class CorruptObjectError(KitError):
    # Bad type tag, bad length token or undecompressable object data
    pass


class CorruptIndexError(CorruptObjectError):
    """The index file does not follow the DIRC version 2 layout."""


class BadSignatureError(CorruptIndexError):
    pass


class BadEntryModeError(CorruptIndexError):
    pass


class UnsupportedExtensionError(CorruptIndexError):
    pass


class CorruptPaddingError(CorruptIndexError):
    pass


class CorruptNameError(CorruptIndexError):
    pass


class ChecksumMismatchError(CorruptIndexError):
    pass


class IndexLockedError(KitError):
    """Another process holds index.lock."""


class MalformedTreeError(KitError):
    pass


class MalformedCommitError(KitError):
    pass


class InvalidHexError(KitError):
    pass


class InvalidUtf8Error(KitError):
    pass


class ParseIntError(KitError):
    pass


class UnexpectedError(KitError):
    # Internal invariant violations, e.g. flushing an empty tree stack
    pass
