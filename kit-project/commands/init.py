# The command: kit init
# What it does: Initializes a new, empty repository by creating the hidden `.kit` directory and its internal structure
# How it does: It creates the `objects`, `refs/heads` and `refs/tags` subdirectories. It then creates the `HEAD` file and writes a symbolic reference pointing to the default 'master' branch
# What data structure it uses: Tree (the file system directory structure is a tree). It also lays the foundation for a Hash Table (the object database) and a Directed Acyclic Graph (the commit history)

import os
import sys
from plumbing import repository

def run(args):
    path = os.path.abspath(getattr(args, 'path', None) or os.getcwd())
    kit_dir = os.path.join(path, '.kit')

    if os.path.exists(kit_dir):
        print(f"Reinitialized existing Kit repository in {kit_dir}/")
        return

    try:
        repository.init_repo(path)
    except OSError as e:
        print(f"fatal: could not initialize repository: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Initialized empty Kit repository in {kit_dir}/")
