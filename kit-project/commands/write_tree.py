# The command: kit write-tree
# What it does: Writes the current index as a hierarchy of tree objects and prints the root tree hash
# How it does: It reads the binary index and passes it to `build_tree_from_index`, which walks the sorted paths with a stack of open directories
# What data structure it uses: Stack and Merkle Tree (see `plumbing/tree.py`)

import sys
from plumbing import repository, index as index_utils, tree
from plumbing.errors import KitError

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    try:
        index = index_utils.read_index(repo_root)
        print(tree.build_tree_from_index(repo_root, index))
    except KitError as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)
