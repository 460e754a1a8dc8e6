"""File access used by the model loader and saver.

The codec never opens files itself. It asks a `FileSystem` for a `File`, so
hosts can serve models out of archives, memory, or the disk. One provider is
installed for the whole process with `set_file_system()`, and individual
calls can pass their own with `fs=`.

Providers must allow independent callers to open and use separate files from
several threads at once.
"""

__all__ = (
    'File',
    'FileSystem',
    'DiskFileSystem',
    'MemoryFileSystem',
    'set_file_system',
    'get_file_system',
    'open_stream',
    )

import io
import logging
import os
import threading

from .errors import StreamError, StreamOpenError

logger = logging.getLogger(__name__)

class File:
    """A seekable binary stream. Errors from the wrapped object are raised as
    StreamError."""

    def __init__(self, raw, name='', on_close=None):
        self.raw = raw
        self.name = name
        self._on_close = on_close

    @property
    def closed(self):
        return self.raw is None

    def _check_open(self):
        if self.raw is None:
            raise StreamError(f"I/O on closed file {self.name!r}")

    def read(self, count=-1):
        self._check_open()
        try:
            return self.raw.read(count)
        except (OSError, ValueError) as e:
            raise StreamError(f"Read failed on {self.name!r}: {e}") from e

    def write(self, data):
        self._check_open()
        try:
            written = self.raw.write(data)
        except (OSError, ValueError) as e:
            raise StreamError(f"Write failed on {self.name!r}: {e}") from e
        if written is not None and written!=len(data):
            raise StreamError(f"Short write on {self.name!r}: {written} of {len(data)} bytes")
        return written

    def seek(self, offset, whence=io.SEEK_SET):
        self._check_open()
        try:
            return self.raw.seek(offset, whence)
        except (OSError, ValueError) as e:
            raise StreamError(f"Seek failed on {self.name!r}: {e}") from e

    def tell(self):
        self._check_open()
        try:
            return self.raw.tell()
        except (OSError, ValueError) as e:
            raise StreamError(f"Tell failed on {self.name!r}: {e}") from e

    def close(self):
        if self.raw is None:
            return
        raw, self.raw = self.raw, None
        try:
            if self._on_close:
                self._on_close(raw)
            raw.close()
        except (OSError, ValueError) as e:
            raise StreamError(f"Close failed on {self.name!r}: {e}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        state = "closed" if self.closed else "open"
        return f"<File {self.name!r} ({state})>"

class FileSystem:
    """Interface for stream providers. Both methods return None when the file
    cannot be opened."""

    def open_read(self, path):
        raise NotImplementedError

    def open_write(self, path):
        raise NotImplementedError

class DiskFileSystem(FileSystem):
    """Files on disk. Relative paths are looked up in `base_path` and then in
    each of `search_paths`; files are always written under `base_path`."""

    def __init__(self, base_path='', search_paths=()):
        self.base_path = base_path
        self.search_paths = list(search_paths)

    def resolve(self, path):
        if os.path.isabs(path):
            return path if os.path.exists(path) else None
        for root in [self.base_path, *self.search_paths]:
            candidate = os.path.join(root, path)
            if os.path.exists(candidate):
                return candidate
        return None

    def open_read(self, path):
        full_path = self.resolve(path)
        if full_path is None:
            logger.debug("%r not found (base %r, search paths %r)",
                path, self.base_path, self.search_paths)
            return None
        try:
            raw = open(full_path, 'rb')
        except OSError as e:
            logger.debug("Cannot open %r for reading: %s", full_path, e)
            return None
        return File(raw, name=full_path)

    def open_write(self, path):
        full_path = os.path.join(self.base_path, path)
        try:
            dirname = os.path.dirname(full_path)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            raw = open(full_path, 'wb')
        except OSError as e:
            logger.debug("Cannot open %r for writing: %s", full_path, e)
            return None
        return File(raw, name=full_path)

class MemoryFileSystem(FileSystem):
    """Files held in a dict of path -> bytes. Written files become visible
    when they are closed."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self._lock = threading.Lock()

    def open_read(self, path):
        with self._lock:
            data = self.files.get(path)
        if data is None:
            return None
        return File(io.BytesIO(data), name=path)

    def open_write(self, path):
        def commit(raw):
            with self._lock:
                self.files[path] = raw.getvalue()
        return File(io.BytesIO(), name=path, on_close=commit)

    def __contains__(self, path):
        return path in self.files

    def __getitem__(self, path):
        return self.files[path]

    def __setitem__(self, path, data):
        with self._lock:
            self.files[path] = bytes(data)

_file_system = None

def set_file_system(fs):
    """Install the provider used when load/save are not given one. Do this
    once at startup, before any model is loaded or saved."""
    global _file_system
    _file_system = fs

def get_file_system():
    return _file_system

def open_stream(fs, path, mode='r'):
    """Open `path` through `fs` for reading ('r') or writing ('w'), raising
    StreamOpenError instead of returning None."""
    if mode=='r':
        f = fs.open_read(path)
        if f is None:
            raise StreamOpenError(f"Can't open file: '{path}'")
    elif mode=='w':
        f = fs.open_write(path)
        if f is None:
            raise StreamOpenError(f"Can't open file for writing: '{path}'")
    else:
        raise ValueError(f"mode must be 'r' or 'w', not {mode!r}")
    return f
