"""Reader and writer for .gmd skinned model files."""

__version__ = '0.1.0'

from . import binstruct
from . import chunks
from . import filesystem
from . import gmdtypes
from . import bones
from . import meshes
from . import model
from . import prefs

from .errors import FormatError, GMDError, StreamError, StreamOpenError
from .filesystem import (DiskFileSystem, File, FileSystem, MemoryFileSystem,
    get_file_system, set_file_system)
from .gmdtypes import (AnimatedMesh, Bone, Mesh, MeshKind, Quaternion,
    StaticMesh, Vector3, Vertex, VertexWeight)
from .model import GMA_VERSION, GMD_MAGIC, GMD_VERSION, Model
from .prefs import GMDPreferences, get_preferences, set_preferences

__all__ = [
    # Errors
    'GMDError',
    'StreamOpenError',
    'StreamError',
    'FormatError',

    # Streams
    'File',
    'FileSystem',
    'DiskFileSystem',
    'MemoryFileSystem',
    'set_file_system',
    'get_file_system',

    # Data
    'Vector3',
    'Quaternion',
    'Bone',
    'VertexWeight',
    'Vertex',
    'MeshKind',
    'Mesh',
    'StaticMesh',
    'AnimatedMesh',

    # Documents
    'Model',
    'GMD_MAGIC',
    'GMD_VERSION',
    'GMA_VERSION',

    # Preferences
    'GMDPreferences',
    'get_preferences',
    'set_preferences',
]


def load(filename, fs=None, report_fn=None, strict=None):
    return Model.load(filename, fs=fs, report_fn=report_fn, strict=strict)


def save(model, filename, fs=None, report_fn=None):
    return Model.save(model, filename, fs=fs, report_fn=report_fn)
