"""Bone table codec: the payload of a "Bones" chunk.

Each entry is a Bone record (name, parent index, origin, orientation), in
table order. Parent indices are not range checked here; see Model.check().
"""

__all__ = (
    'BONES_CHUNK',
    'read_bones',
    'write_bones',
    )

from .gmdtypes import Bone

BONES_CHUNK = "Bones"

def read_bones(f, entries):
    bones = []
    for i in range(entries):
        bones.append(Bone.read(f))
    return bones

def write_bones(f, bones):
    for bone in bones:
        bone.write(f)
