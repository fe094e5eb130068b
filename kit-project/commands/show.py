# The command: kit show <commit>
# What it does: Shows one commit: its hash, author, date and message
# How it does: It resolves the name, parses the commit object with the commit codec and prints it the same way `kit log` does
# What data structure it uses: A single commit record

import sys
from plumbing import repository, commit as commit_utils
from plumbing.errors import KitError
from commands.log import print_commit

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    try:
        sha1 = repository.resolve_ref(repo_root, args.commit)
        commit = commit_utils.read_commit(repo_root, sha1)
    except (KitError, TypeError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)

    print_commit(sha1, commit)
