# The command: kit cat-file [-t | -s] <object>
# What it does: Prints the raw content of an object from the object store, or just its type or size
# How it does: It resolves the name (a full hash or a ref), lets the object store decompress and split the header, and writes the payload bytes to stdout unchanged
# What data structure it uses: Hash Table / Dictionary (a single lookup in the content-addressed object store)

import sys
from plumbing import repository, objects
from plumbing.errors import KitError

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    try:
        sha1 = repository.resolve_ref(repo_root, args.object)
        obj_type, content = objects.read_object(repo_root, sha1)
    except KitError as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)

    if args.type:
        print(obj_type)
    elif args.size:
        print(len(content))
    else:
        sys.stdout.buffer.write(content)
        sys.stdout.flush()
