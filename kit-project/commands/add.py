# The command: kit add <file>...
# What it does: Takes a snapshot of files from the working directory and stages them for the next commit by updating the index
# How it does: It reads the binary index into an in-memory dictionary. Then, for each file, it stores the content as a "blob" object and records the path, the blob hash and the file's stat data. Finally, it writes the index back through index.lock
# What data structure it uses: Hash Table / Dictionary (the index in memory), List (the files to add), and a Tree Traversal (os.walk when a directory is given)

import os
import sys
from plumbing import repository, index as index_utils, ignore
from plumbing.errors import KitError

def run(args):
    repo_root = repository.find_repo_root() #Finding the root of the repository
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    if not args.files:
        print("Nothing specified, nothing added.")
        return

    ignore_patterns = ignore.get_ignored_patterns(repo_root) # Load ignore patterns from .kitignore

    try:
        index = index_utils.read_index(repo_root)

        for file_path in _expand_files(args.files, repo_root, ignore_patterns):
            entry = index_utils.add_path(repo_root, index, file_path)
            print(f"Added '{os.fsdecode(entry.path)}' to the index.")

        index_utils.write_index(repo_root, index)
    except KitError as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)

def _expand_files(file_args, repo_root, ignore_patterns):
    """
    Expands file arguments into files to stage: directories are walked recursively,
    ignored paths are skipped, and a path that does not exist is an error.
    """
    expanded_files = []
    for arg in file_args:
        full_path = os.path.abspath(arg)
        if not os.path.lexists(full_path):
            raise KitError(f"pathspec '{arg}' did not match any files")

        if os.path.isdir(full_path) and not os.path.islink(full_path):
            for root, dirs, files in os.walk(full_path):
                dirs[:] = sorted(d for d in dirs
                                 if not ignore.is_ignored(os.path.relpath(os.path.join(root, d), repo_root), ignore_patterns))
                for file in sorted(files):
                    path = os.path.join(root, file)
                    if not ignore.is_ignored(os.path.relpath(path, repo_root), ignore_patterns):
                        expanded_files.append(path)
        elif not ignore.is_ignored(os.path.relpath(full_path, repo_root), ignore_patterns):
            expanded_files.append(full_path)

    return expanded_files
