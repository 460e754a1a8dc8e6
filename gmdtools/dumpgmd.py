import argparse
import logging
import sys

from .filesystem import DiskFileSystem
from .gmdtypes import MeshKind
from .logging_config import setup_logging
from .model import Model
from .prefs import get_preferences

def vec_fmt(a):
    return "(" + ",".join(f"{v:0.6f}" for v in a) + ")"

def dump_model(model, f=None):
    if f is None:
        f = sys.stdout
    print("GMD:", file=f)
    print(f"  name: {model.name}", file=f)
    print(f"  author: {model.author}", file=f)
    print(f"  app_name: {model.app_name}", file=f)
    print(f"  bones: {model.num_bones}", file=f)
    print(f"  meshes: {model.num_meshes}", file=f)
    for i, bone in enumerate(model.bones):
        print(f"bone {i}:", file=f)
        print(f"  name: {bone.name}", file=f)
        print(f"  parent: {bone.parent_index}", file=f)
        print(f"  origin: {vec_fmt(bone.origin)}", file=f)
        print(f"  orientation: {vec_fmt(bone.orientation)}", file=f)
    for i, mesh in enumerate(model.meshes):
        print(f"mesh {i}:", file=f)
        print(f"  name: {mesh.name}", file=f)
        print(f"  material: {mesh.material}", file=f)
        print(f"  flags: {mesh.flags:08x}", file=f)
        print(f"  detail_level: {mesh.detail_level}", file=f)
        print(f"  verts: {mesh.num_verts}", file=f)
        print(f"  indices: {mesh.num_indices}", file=f)
        print(f"  index list:", file=f)
        for j in range(0, mesh.num_indices, 3):
            print("    " + " ".join(str(int(x)) for x in mesh.indices[j:j+3]), file=f)
        print(f"  texcoords:", file=f)
        for j, (u, v) in enumerate(mesh.tex_coords):
            print(f"    {j}: {u:0.6f},{v:0.6f}", file=f)
        if mesh.kind is not MeshKind.ANIMATED:
            continue
        print(f"  weights:", file=f)
        for j, vertex in enumerate(mesh.vertices):
            print(f"    vertex {j}: {vertex.num_weights} weights", file=f)
            for w in vertex.weights:
                print(f"      bone {w.bone_id}: influence {w.influence:0.6f}; "
                    f"origin {vec_fmt(w.origin)}; normal {vec_fmt(w.normal)}", file=f)
    print(file=f)

def main(argv=None):
    parser = argparse.ArgumentParser(prog='gmd-dump',
        description='Print the contents of a .gmd model file')
    parser.add_argument('filename', help='Path to the .gmd file')
    parser.add_argument('--log-file', default=None,
        help='Also write log messages to this file')
    parser.add_argument('-v', '--verbose', action='store_true',
        help='Log debug messages')
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    fs = DiskFileSystem(search_paths=get_preferences().resource_paths())
    model = Model.load(args.filename, fs=fs)
    if model is None:
        return 1
    dump_model(model)
    return 0

if __name__=='__main__':
    sys.exit(main())
