# The command: kit ls-tree [-r] <tree-ish>
# What it does: Lists the entries of a tree object; given a commit, lists the commit's tree
# How it does: It parses the tree object with the tree codec and prints one "<mode> <type> <hash>\t<name>" line per entry, recursing into subtrees with -r
# What data structure it uses: Tree (a directory listing), with a recursive traversal for -r

import sys
from plumbing import repository, objects, tree, commit as commit_utils
from plumbing.errors import KitError

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    try:
        sha1 = repository.resolve_ref(repo_root, args.tree)
        obj_type, _ = objects.read_object(repo_root, sha1)
        if obj_type == 'commit':
            sha1 = commit_utils.read_commit(repo_root, sha1).tree
        if args.recursive:
            for path, (mode, entry_sha1) in sorted(tree.walk_tree(repo_root, sha1).items()):
                print(format_entry(mode, entry_sha1, path))
        else:
            for entry in tree.read_tree(repo_root, sha1):
                print(format_entry(entry.mode, entry.sha1, entry.name))
    except (KitError, TypeError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)

def format_entry(mode, sha1, name):
    kind = 'tree' if mode == tree.MODE_TREE else 'blob'
    return f"{mode.zfill(6)} {kind} {sha1}\t{tree.display_name(name)}"
