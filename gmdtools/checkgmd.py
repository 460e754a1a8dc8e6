import argparse
import glob
import os
import sys

from .filesystem import DiskFileSystem
from .logging_config import setup_logging
from .model import Model
from .prefs import get_preferences

def find_files(paths):
    for path in paths:
        if os.path.isdir(path):
            yield from sorted(glob.glob(os.path.join(path, "*.gmd")))
        else:
            yield path

def check_file(filename, fs, out=None):
    """Load and check one file. Returns True if it is clean."""
    if out is None:
        out = sys.stdout
    errors = []
    def report(level, message):
        errors.append(message)
    model = Model.load(filename, fs=fs, report_fn=report, strict=False)
    if model is None:
        for message in errors:
            print("(FAIL)", message, " - ", filename, file=out)
        return False
    problems = model.check()
    for message in problems:
        print("(FAIL)", message, " - ", filename, file=out)
    return not problems

def main(argv=None):
    parser = argparse.ArgumentParser(prog='gmd-check',
        description='Load and validate .gmd model files')
    parser.add_argument('paths', nargs='+',
        help='.gmd files, or directories to search for them')
    parser.add_argument('--log-file', default=None,
        help='Also write log messages to this file')
    args = parser.parse_args(argv)

    setup_logging(log_file=args.log_file)
    fs = DiskFileSystem(search_paths=get_preferences().resource_paths())
    checked = 0
    failed = 0
    for filename in find_files(args.paths):
        checked += 1
        if not check_file(filename, fs):
            failed += 1
    print(f"{checked} files checked, {failed} failed")
    return 1 if failed else 0

if __name__=='__main__':
    sys.exit(main())
