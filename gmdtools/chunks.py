"""Chunks: named, sized, entry-counted regions of a .gmd file.

On disk a chunk is:

    name     LString
    size     uint32   bytes of payload following the entries field
    entries  uint32
    payload  `size` bytes

The writer does not know the payload size up front, so it writes a zero,
remembers where, and patches it once the payload is done. A reader that does
not recognise a chunk name can skip it by seeking over `size` bytes.
"""

__all__ = (
    'ChunkHeader',
    'ChunkWriter',
    'start_chunk',
    'finish_chunk',
    'read_chunk_header',
    'skip_chunk',
    )

import io
import logging
from dataclasses import dataclass

from .binstruct import LString, uint32

logger = logging.getLogger(__name__)

# Bytes of the size and entries fields, which the size field does not count.
CHUNK_FIELDS_SIZE = 8

def start_chunk(f, name, entries):
    """Write a chunk header with a placeholder size. Returns the position to
    hand to finish_chunk()."""
    LString(name).write(f)
    size_pos = f.tell()
    uint32(0).write(f)
    uint32(entries).write(f)
    return size_pos

def finish_chunk(f, size_pos):
    cur_pos = f.tell()
    f.seek(size_pos, io.SEEK_SET)
    uint32(cur_pos-size_pos-CHUNK_FIELDS_SIZE).write(f)
    f.seek(cur_pos, io.SEEK_SET)

class ChunkWriter:
    """Context manager around start_chunk()/finish_chunk():

        with ChunkWriter(f, "Bones", len(bones)):
            write_bones(f, bones)

    If the body raises, the size is left unpatched and the error propagates.
    """

    def __init__(self, f, name, entries):
        self.f = f
        self.name = name
        self.entries = entries
        self.size_pos = None

    def __enter__(self):
        self.size_pos = start_chunk(self.f, self.name, self.entries)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            finish_chunk(self.f, self.size_pos)
        return False

@dataclass
class ChunkHeader:
    name: str
    size: int
    entries: int
    data_start: int = 0

    def matches(self, name):
        return self.name.lower()==name.lower()

def read_chunk_header(f):
    name = LString.read(f)
    size = uint32.read(f)
    entries = uint32.read(f)
    return ChunkHeader(str(name), int(size), int(entries), f.tell())

def skip_chunk(f, header):
    logger.debug("Skipping unknown chunk %r (%d bytes, %d entries)",
        header.name, header.size, header.entries)
    f.seek(header.size, io.SEEK_CUR)
