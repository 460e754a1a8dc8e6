"""Skinned models and the .gmd file format.

A .gmd file is a header followed by chunks:

    magic       4 bytes, b'GMD\\0'
    version     int32, must be GMD_VERSION
    name        LString
    author      LString
    app_name    LString
    bones       uint32
    meshes      uint32
    chunks      uint32
    chunk * chunks      (see chunks.py)

This version writes two chunks, "Bones" and "Meshes". Readers skip chunks
with other names.

Model.read() and Model.write() work on an open stream and raise GMDError
subclasses. Model.load() and Model.save() open the file through a FileSystem,
report any failure, and return None / False instead of raising.
"""

__all__ = (
    'GMD_MAGIC',
    'GMD_VERSION',
    'GMA_VERSION',
    'Model',
    )

import logging
import os

from .binstruct import *
from .bones import BONES_CHUNK, read_bones, write_bones
from .chunks import ChunkWriter, read_chunk_header, skip_chunk
from .errors import FormatError, GMDError, StreamOpenError
from .filesystem import get_file_system, open_stream
from .gmdtypes import MeshKind
from .meshes import MESHES_CHUNK, read_meshes, write_meshes
from .prefs import get_preferences

logger = logging.getLogger(__name__)

GMD_MAGIC = b'GMD\x00'
GMD_VERSION = 1     # model files
GMA_VERSION = 1     # animation files (not handled here)

GMDMagic = ByteString(4)

def _report(report_fn, level, message):
    if report_fn:
        report_fn({level}, message)

class Model:
    """An ordered bone table and an ordered list of meshes. A bone's index in
    `bones` is how parents and vertex weights refer to it."""

    def __init__(self, name='', bones=None, meshes=None, author='', app_name=''):
        self.name = str(name)
        self.author = str(author)
        self.app_name = str(app_name)
        self.bones = list(bones or [])
        self.meshes = list(meshes or [])

    @property
    def num_bones(self):
        return len(self.bones)

    @property
    def num_meshes(self):
        return len(self.meshes)

    def add_bone(self, bone):
        """Append a bone and return its index."""
        self.bones.append(bone)
        return len(self.bones)-1

    def add_mesh(self, mesh):
        self.meshes.append(mesh)

    def get_bone_index(self, name):
        for i, bone in enumerate(self.bones):
            if bone.name==name:
                return i
        return -1

    def get_mesh_by_name(self, name):
        for mesh in self.meshes:
            if mesh.name==name:
                return mesh
        return None

    def __eq__(self, other):
        # Header strings are not compared: save() rewrites them.
        if not isinstance(other, Model):
            return NotImplemented
        return self.bones==other.bones and self.meshes==other.meshes

    def __repr__(self):
        return f"<Model {self.name!r}: {self.num_bones} bones, {self.num_meshes} meshes>"

    #-----------------------------------------------------------------------#
    # Validation

    def check(self):
        """Return a list of problems that the file format itself does not
        prevent: bad parent indices, weights naming missing bones, indices
        past the end of a mesh, and texcoord counts that do not match."""
        problems = []
        num_bones = len(self.bones)
        for i, bone in enumerate(self.bones):
            p = bone.parent_index
            if p<0:
                continue
            if p>=num_bones:
                problems.append(f"bone {i} ({bone.name}) has parent {p}, but there are only {num_bones} bones")
            elif p>=i:
                problems.append(f"bone {i} ({bone.name}) has parent {p}, which does not come before it")
        for mi, mesh in enumerate(self.meshes):
            num_verts = mesh.num_verts
            if len(mesh.tex_coords)!=num_verts:
                problems.append(f"mesh {mi} ({mesh.name}) has {num_verts} vertices but {len(mesh.tex_coords)} texcoords")
            bad = (mesh.indices<0)|(mesh.indices>=num_verts)
            if bad.any():
                first = int(bad.argmax())
                problems.append(f"mesh {mi} ({mesh.name}) has {int(bad.sum())} indices outside 0..{num_verts-1}, "
                    f"first is indices[{first}] = {int(mesh.indices[first])}")
            if mesh.kind is not MeshKind.ANIMATED:
                continue
            bad_weights = [(vi, w.bone_id)
                for vi, v in enumerate(mesh.vertices)
                for w in v.weights
                if not (0<=w.bone_id<num_bones)]
            if bad_weights:
                vi, bone_id = bad_weights[0]
                problems.append(f"mesh {mi} ({mesh.name}) has {len(bad_weights)} weights with unknown bones, "
                    f"first is vertex {vi} bone {bone_id}")
        return problems

    #-----------------------------------------------------------------------#
    # Stream level

    @classmethod
    def read(cls, f, strict=False):
        magic = GMDMagic.read(f)
        if magic!=GMD_MAGIC:
            raise FormatError("File is not a model file (GMD)")
        version = int32.read(f)
        if version!=GMD_VERSION:
            raise FormatError(f"Wrong version ({version}), should be ({GMD_VERSION})")
        name = LString.read(f)
        author = LString.read(f)
        app_name = LString.read(f)
        num_bones = uint32.read(f)
        num_meshes = uint32.read(f)
        num_chunks = uint32.read(f)

        model = cls(name, author=author, app_name=app_name)
        for i in range(num_chunks):
            chunk = read_chunk_header(f)
            if chunk.matches(BONES_CHUNK):
                if chunk.entries!=num_bones:
                    raise FormatError(f"numBones({num_bones}) does not match the chunk's numEntries({chunk.entries})")
                model.bones.extend(read_bones(f, chunk.entries))
            elif chunk.matches(MESHES_CHUNK):
                if chunk.entries!=num_meshes:
                    raise FormatError(f"numMeshes({num_meshes}) does not match the chunk's numEntries({chunk.entries})")
                model.meshes.extend(read_meshes(f, chunk.entries))
            else:
                skip_chunk(f, chunk)
                continue
            used = f.tell()-chunk.data_start
            if used!=chunk.size:
                logger.warning("Chunk %r declares %d bytes but %d were read",
                    chunk.name, chunk.size, used)

        if len(model.bones)!=num_bones or len(model.meshes)!=num_meshes:
            logger.warning("Header declares %d bones and %d meshes, file has %d and %d",
                num_bones, num_meshes, len(model.bones), len(model.meshes))
        if strict:
            problems = model.check()
            if problems:
                raise FormatError("; ".join(problems))
        return model

    def write(self, f, name=None):
        prefs = get_preferences()
        GMDMagic(GMD_MAGIC).write(f)
        int32(GMD_VERSION).write(f)
        LString(self.name if name is None else name).write(f)
        LString(prefs.author).write(f)
        LString(prefs.app_name).write(f)
        uint32(len(self.bones)).write(f)
        uint32(len(self.meshes)).write(f)
        uint32(2).write(f)  # number of chunks we write
        with ChunkWriter(f, BONES_CHUNK, len(self.bones)):
            write_bones(f, self.bones)
        with ChunkWriter(f, MESHES_CHUNK, len(self.meshes)):
            write_meshes(f, self.meshes)

    #-----------------------------------------------------------------------#
    # File level

    @classmethod
    def load(cls, filename, fs=None, report_fn=None, strict=None):
        """Load a model, or return None if it cannot be opened or parsed."""
        if fs is None:
            fs = get_file_system()
        if fs is None:
            message = "No file system set; call set_file_system() first"
            logger.error(message)
            _report(report_fn, 'ERROR', message)
            return None
        if strict is None:
            strict = get_preferences().strict

        try:
            f = open_stream(fs, filename, 'r')
        except StreamOpenError as e:
            logger.warning(str(e))
            _report(report_fn, 'WARNING', str(e))
            return None

        try:
            try:
                model = cls.read(f, strict=strict)
            finally:
                f.close()
        except GMDError as e:
            message = f"GMD: {e}"
            logger.error("%s (%s)", message, filename)
            _report(report_fn, 'ERROR', f"{message} ({filename})")
            return None
        logger.debug("Loaded %r: %d bones, %d meshes", filename, model.num_bones, model.num_meshes)
        return model

    @staticmethod
    def save(model, filename, fs=None, report_fn=None):
        """Save a model. The name in the header is taken from `filename`.
        Returns True on success. A failed save can leave a partial file."""
        if fs is None:
            fs = get_file_system()
        if fs is None:
            message = "No file system set; call set_file_system() first"
            logger.error(message)
            _report(report_fn, 'ERROR', message)
            return False

        try:
            f = open_stream(fs, filename, 'w')
        except StreamOpenError as e:
            logger.warning(str(e))
            _report(report_fn, 'WARNING', str(e))
            return False

        model_name = os.path.splitext(os.path.basename(filename))[0]
        try:
            try:
                model.write(f, name=model_name)
            finally:
                f.close()
        except GMDError as e:
            message = f"GMD: {e}"
            logger.error("%s (%s)", message, filename)
            _report(report_fn, 'ERROR', f"{message} ({filename})")
            return False
        logger.debug("Saved %r: %d bones, %d meshes", filename, model.num_bones, model.num_meshes)
        return True
