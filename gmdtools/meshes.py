"""Mesh codec: the payload of a "Meshes" chunk.

Per mesh:

    name, material          LString
    flags, detail_level     int32
    num_verts, num_indices  uint32
    indices                 int32 x num_indices
    tex_coords              float32 x 2*num_verts
    then per vertex:
        num_weights         uint32
        weights             VertexWeight x num_weights

The weight count is written from each vertex's current weight list on every
save; it is not a fixed capacity.
"""

__all__ = (
    'MESHES_CHUNK',
    'read_mesh',
    'write_mesh',
    'read_meshes',
    'write_meshes',
    )

import logging

from .binstruct import *
from .errors import FormatError
from .gmdtypes import (AnimatedMesh, MeshKind, Vertex, VertexWeight,
    INDEX_DTYPE, FLOAT_DTYPE)

logger = logging.getLogger(__name__)

MESHES_CHUNK = "Meshes"

def read_vertex(f):
    num_weights = uint32.read(f)
    weights = []
    for i in range(num_weights):
        weights.append(VertexWeight.read(f))
    return Vertex(weights)

def write_vertex(f, vertex):
    uint32(vertex.num_weights).write(f)
    for weight in vertex.weights:
        weight.write(f)

def read_mesh(f):
    # TODO: read a mesh kind field once the format has one; until then every
    # mesh is animated.
    name = LString.read(f)
    material = LString.read(f)
    flags = int32.read(f)
    detail_level = int32.read(f)
    num_verts = uint32.read(f)
    num_indices = uint32.read(f)
    indices = read_array(f, INDEX_DTYPE, num_indices)
    tex_coords = read_array(f, FLOAT_DTYPE, 2*num_verts).reshape(num_verts, 2)
    vertices = []
    for i in range(num_verts):
        vertices.append(read_vertex(f))
    mesh = AnimatedMesh(name, material, flags, detail_level)
    mesh.indices = indices
    mesh.tex_coords = tex_coords
    mesh.vertices = vertices
    return mesh

def write_mesh(f, mesh):
    if mesh.kind is not MeshKind.ANIMATED:
        raise FormatError(f"Mesh {mesh.name!r}: {mesh.kind.value} meshes cannot be written to a .gmd file")
    num_verts = mesh.num_verts
    tex_coords = mesh.tex_coords.reshape(-1, 2)
    if len(tex_coords)!=num_verts:
        raise FormatError(f"Mesh {mesh.name!r} has {num_verts} vertices "
            f"but {len(tex_coords)} texture coordinates")
    LString(mesh.name).write(f)
    LString(mesh.material).write(f)
    int32(mesh.flags).write(f)
    int32(mesh.detail_level).write(f)
    uint32(num_verts).write(f)
    uint32(mesh.num_indices).write(f)
    write_array(f, mesh.indices, INDEX_DTYPE)
    write_array(f, tex_coords, FLOAT_DTYPE)
    for vertex in mesh.vertices:
        write_vertex(f, vertex)

def read_meshes(f, entries):
    meshes = []
    for i in range(entries):
        mesh = read_mesh(f)
        logger.debug("Read mesh %d %r: %d verts, %d indices",
            i, mesh.name, mesh.num_verts, mesh.num_indices)
        meshes.append(mesh)
    return meshes

def write_meshes(f, meshes):
    for mesh in meshes:
        write_mesh(f, mesh)
