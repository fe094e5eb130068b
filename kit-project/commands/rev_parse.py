# The command: kit rev-parse <name>...
# What it does: Prints the object name each ref name (or full hash) refers to
# How it does: It tries the name under .kit/, refs/, refs/tags/, refs/heads/ and refs/remotes/ in that order, following symbolic refs
# What data structure it uses: Pointers (refs) into the commit graph

import sys
from plumbing import repository
from plumbing.errors import KitError

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    for name in args.names:
        try:
            print(repository.resolve_ref(repo_root, name))
        except KitError as e:
            print(f"fatal: {e}", file=sys.stderr)
            sys.exit(1)
