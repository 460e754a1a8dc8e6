import io

import pytest

from gmdtools import (AnimatedMesh, Bone, GMDPreferences, MemoryFileSystem,
    Model, Vertex, VertexWeight, set_file_system, set_preferences)
from gmdtools.binstruct import ByteString, LString, int32, uint32
from gmdtools.chunks import ChunkWriter
from gmdtools.model import GMD_MAGIC, GMD_VERSION


@pytest.fixture(autouse=True)
def reset_globals():
    set_file_system(None)
    set_preferences(GMDPreferences())
    yield
    set_file_system(None)
    set_preferences(GMDPreferences())


@pytest.fixture
def fs():
    return MemoryFileSystem()


def make_skeleton():
    return [
        Bone(name="root", parent_index=-1, origin=(0.0, 0.0, 0.0),
            orientation=(0.0, 0.0, 0.0, 1.0)),
        Bone(name="child", parent_index=0, origin=(0.0, 1.5, 0.0),
            orientation=(0.0, 0.7071068, 0.0, 0.7071068)),
    ]


def make_mesh():
    return AnimatedMesh(
        name="body",
        material="textures/body.tga",
        flags=0x5,
        detail_level=2,
        indices=[0, 2],
        tex_coords=[(0.0, 0.0), (1.0, 0.0), (0.5, 1.0)],
        vertices=[
            Vertex([]),
            Vertex([VertexWeight(bone_id=0, origin=(1.0, 2.0, 3.0),
                normal=(0.0, 0.0, 1.0), influence=1.0)]),
            Vertex([
                VertexWeight(bone_id=0, origin=(0.1, 0.2, 0.3),
                    normal=(1.0, 0.0, 0.0), influence=0.6),
                VertexWeight(bone_id=1, origin=(-0.1, -0.2, -0.3),
                    normal=(0.0, 1.0, 0.0), influence=0.4),
            ]),
        ])


@pytest.fixture
def model():
    """Two bones (root and child) and one mesh whose three vertices have
    zero, one and two weights."""
    return Model("spider", bones=make_skeleton(), meshes=[make_mesh()])


def build_file(chunks, num_bones, num_meshes, version=GMD_VERSION, magic=GMD_MAGIC):
    """Hand-assemble a .gmd file. `chunks` is a list of
    (name, entries, write_payload) where write_payload(f) writes the body."""
    f = io.BytesIO()
    ByteString(4)(magic).write(f)
    int32(version).write(f)
    LString("handmade").write(f)
    LString("tests").write(f)
    LString("pytest").write(f)
    uint32(num_bones).write(f)
    uint32(num_meshes).write(f)
    uint32(len(chunks)).write(f)
    for name, entries, write_payload in chunks:
        with ChunkWriter(f, name, entries):
            write_payload(f)
    return f.getvalue()
