# The command: kit log
# What it does: Displays the commit history by starting at the current HEAD and walking backward through the parent links
# How it does: It keeps a stack of commits still to show. It pops a commit, parses it with the commit codec, prints it, and pushes its parents. A visited set makes sure a commit reachable through two parents is printed once
# What data structure it uses: It performs a Graph Traversal (depth-first) on the Directed Acyclic Graph (DAG) formed by the commits

import sys
from plumbing import repository, commit as commit_utils
from plumbing.errors import KitError

DATE_FORMAT = '%a %b %d %H:%M:%S %Y %z'

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root: #Check if inside a kit repository
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    commit_hash = repository.get_head_commit(repo_root)
    if not commit_hash: # Check if there are any commits
        current_branch = repository.get_current_branch(repo_root) or 'master'
        print(f"fatal: your current branch '{current_branch}' does not have any commits yet")
        return

    visited = set()
    stack = [commit_hash]

    while stack:
        current_hash = stack.pop()
        if current_hash in visited:
            continue
        visited.add(current_hash)

        try:
            commit = commit_utils.read_commit(repo_root, current_hash)
        except (KitError, TypeError) as e:
            print(f"fatal: could not read commit {current_hash}: {e}", file=sys.stderr)
            sys.exit(1)

        print_commit(current_hash, commit)

        # Parents pushed in reverse so the first parent is shown next
        for parent in reversed(commit.parents):
            if parent not in visited:
                stack.append(parent)

def print_commit(commit_hash, commit):
    print(f"commit {commit_hash}")
    if len(commit.parents) > 1:
        print("Merge: " + " ".join(parent[:7] for parent in commit.parents))
    print(f"Author: {commit.author}")
    print(f"Date:   {commit.author_date.strftime(DATE_FORMAT)}")
    print()
    for line in commit.message.splitlines():
        print(f"    {line}")
    print()
