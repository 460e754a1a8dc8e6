__all__ = (
    'Vector3',
    'Quaternion',
    'Bone',
    'VertexWeight',
    'Vertex',
    'MeshKind',
    'Mesh',
    'StaticMesh',
    'AnimatedMesh',
    'INDEX_DTYPE',
    'FLOAT_DTYPE',
    )

from enum import Enum

import numpy as np

from .binstruct import *

INDEX_DTYPE = np.dtype('<i4')
FLOAT_DTYPE = np.dtype('<f4')

#---------------------------------------------------------------------------#
# Math records

class Vector3(Struct):
    x: float32
    y: float32
    z: float32
    def __len__(self):
        return 3
    def __getitem__(self, i):
        return getattr(self, ['x','y','z'][i])
    def __iter__(self):
        return iter((self.x, self.y, self.z))
    def __str__(self):
        return f"({self.x},{self.y},{self.z})"

    @classmethod
    def default_values(cls):
        return (0.0,0.0,0.0)

class Quaternion(Struct):
    x: float32
    y: float32
    z: float32
    w: float32
    def __len__(self):
        return 4
    def __getitem__(self, i):
        return getattr(self, ['x','y','z','w'][i])
    def __iter__(self):
        return iter((self.x, self.y, self.z, self.w))
    def __str__(self):
        return f"({self.x},{self.y},{self.z},{self.w})"

    @classmethod
    def default_values(cls):
        return (0.0,0.0,0.0,1.0)   # identity

#---------------------------------------------------------------------------#
# Skeleton

class Bone(Struct):
    name: LString
    parent_index: int32     # -1 (or any negative value) for a root bone
    origin: Vector3         # rest pose position
    orientation: Quaternion # rest pose rotation

    @property
    def is_root(self):
        return self.parent_index<0

    @classmethod
    def default_values(cls):
        return (
            '',                 # name
            -1,                 # parent_index
            (0.0,0.0,0.0),      # origin
            (0.0,0.0,0.0,1.0),  # orientation
            )

#---------------------------------------------------------------------------#
# Skinned vertices

class VertexWeight(Struct):
    bone_id: int32      # index into the model's bones
    origin: Vector3     # position relative to the bone
    normal: Vector3     # normal relative to the bone
    influence: float32  # a vertex's influences usually sum to 1.0

    @classmethod
    def default_values(cls):
        return (
            0,              # bone_id
            (0.0,0.0,0.0),  # origin
            (0.0,0.0,0.0),  # normal
            1.0,            # influence
            )

class Vertex:
    """A skinned vertex. Its position is the sum of its weights' origins, each
    carried by its bone and scaled by its influence. A vertex with no weights
    is valid; what that means is up to the renderer."""

    def __init__(self, weights=()):
        self.weights = [w if isinstance(w, VertexWeight) else VertexWeight(w)
            for w in weights]

    @property
    def num_weights(self):
        return len(self.weights)

    def total_influence(self):
        return sum(w.influence for w in self.weights)

    def __eq__(self, other):
        if not isinstance(other, Vertex):
            return NotImplemented
        return self.weights==other.weights

    def __repr__(self):
        return f"Vertex({self.weights!r})"

#---------------------------------------------------------------------------#
# Meshes

class MeshKind(Enum):
    STATIC = 'static'
    ANIMATED = 'animated'

def _as_array(values, dtype, width=None):
    if values is None:
        values = ()
    a = np.array(values, dtype=dtype)
    if width is None:
        return a.reshape(-1)
    return a.reshape(-1, width)

class Mesh:
    """Fields shared by every kind of mesh. Use StaticMesh or AnimatedMesh."""
    kind = None

    def __init__(self, name='', material='', flags=0, detail_level=0,
        indices=None, tex_coords=None):
        if self.__class__==Mesh:
            raise TypeError("Cannot instantiate Mesh itself, only subclasses")
        self.name = str(name)
        self.material = str(material)
        self.flags = int(flags)                 # opaque to the codec
        self.detail_level = int(detail_level)   # opaque to the codec
        self.indices = _as_array(indices, INDEX_DTYPE)
        self.tex_coords = _as_array(tex_coords, FLOAT_DTYPE, 2)

    @property
    def num_indices(self):
        return len(self.indices)

    @property
    def num_verts(self):
        raise NotImplementedError

    def _same_fields(self, other):
        return (self.__class__ is other.__class__
            and self.name==other.name
            and self.material==other.material
            and self.flags==other.flags
            and self.detail_level==other.detail_level
            and np.array_equal(self.indices, other.indices)
            and np.array_equal(self.tex_coords, other.tex_coords))

    def __repr__(self):
        return (f"<{self.__class__.__name__} {self.name!r} material={self.material!r} "
            f"verts={self.num_verts} indices={self.num_indices}>")

class StaticMesh(Mesh):
    """A rigid mesh with positions and normals stored directly. No .gmd
    decoder produces these: the file format has no field saying which kind of
    mesh a record is, and every record is read as an AnimatedMesh."""
    kind = MeshKind.STATIC

    def __init__(self, name='', material='', flags=0, detail_level=0,
        indices=None, tex_coords=None, vertices=None, normals=None):
        super().__init__(name, material, flags, detail_level, indices, tex_coords)
        self.vertices = _as_array(vertices, FLOAT_DTYPE, 3)
        self.normals = _as_array(normals, FLOAT_DTYPE, 3)

    @property
    def num_verts(self):
        return len(self.vertices)

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return (self._same_fields(other)
            and np.array_equal(self.vertices, other.vertices)
            and np.array_equal(self.normals, other.normals))

class AnimatedMesh(Mesh):
    """A mesh whose vertices are built from bone weights."""
    kind = MeshKind.ANIMATED

    def __init__(self, name='', material='', flags=0, detail_level=0,
        indices=None, tex_coords=None, vertices=()):
        super().__init__(name, material, flags, detail_level, indices, tex_coords)
        self.vertices = [v if isinstance(v, Vertex) else Vertex(v)
            for v in vertices]

    @property
    def num_verts(self):
        return len(self.vertices)

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return self._same_fields(other) and self.vertices==other.vertices
