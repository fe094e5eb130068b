# The command: kit hash-object [-w] [-t <type>] [<file>]
# What it does: Computes the object name of a file's content (or of stdin), optionally storing it in the object store
# How it does: It reads the bytes and hands them to `hash_object`, which prepends the "<type> <size>\0" header and takes the SHA-1
# What data structure it uses: None beyond the content-addressed object store itself

import sys
from plumbing import repository, objects
from plumbing.errors import KitError

def run(args):
    repo_root = None
    if args.write:
        repo_root = repository.find_repo_root()
        if not repo_root:
            print("fatal: not a kit repository", file=sys.stderr)
            sys.exit(1)

    try:
        if args.file:
            with open(args.file, 'rb') as f:
                content = f.read()
        else:
            content = sys.stdin.buffer.read()
        print(objects.hash_object(repo_root, content, args.type, write=args.write))
    except (KitError, OSError, ValueError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)
