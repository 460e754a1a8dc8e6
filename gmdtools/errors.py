"""Exceptions raised while reading or writing .gmd files."""

__all__ = (
    'GMDError',
    'StreamOpenError',
    'StreamError',
    'FormatError',
    )

class GMDError(Exception):
    """Base class for everything the gmd codec raises."""

class StreamOpenError(GMDError, OSError):
    """A file could not be opened for reading or writing."""

class StreamError(GMDError, OSError):
    """A read or write failed part way through a stream (short read, closed
    file, I/O fault)."""

class FormatError(GMDError, ValueError):
    """The data is not a valid .gmd file: bad magic, wrong version, counts
    that disagree, or a model that cannot be encoded."""
