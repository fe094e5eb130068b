# The command: kit commit [-m "<message>"]
# What it does: Creates a permanent, uniquely identified snapshot (a commit object) of the currently staged changes.
# How it does: It folds the flat index into a hierarchy of tree objects to get a single root hash for the project's state. It then finds the parent commit, gathers metadata (author, date, message), and writes them as a "commit" object. Finally, it moves the current branch to the new commit.
# What data structure it uses: Merkle Tree (the project's file structure), Directed Acyclic Graph (DAG) (each commit links to its parents), Hash Table / Dictionary (the underlying object store)

import os
import shlex
import subprocess
import sys
from datetime import datetime
from plumbing import repository, index as index_utils, tree, config
from plumbing.commit import Commit, write_commit
from plumbing.errors import KitError

COMMIT_TEMPLATE = """
# Please enter the commit message for your changes. Lines starting
# with '#' will be ignored, and an empty message aborts the commit.
"""

def run(args):
    repo_root = repository.find_repo_root()
    if not repo_root:
        print("fatal: not a kit repository", file=sys.stderr)
        sys.exit(1)

    parent_commit = repository.get_head_commit(repo_root) # Get the current HEAD commit hash
    parents = [parent_commit] if parent_commit else [] # List of parent commits (empty for initial commit)

    try:
        message = args.message
        if message is None:
            message = prompt_commit_message(repo_root)
            if message is None:
                print("Aborting commit due to empty commit message.")
                return
        create_commit(repo_root, message, parents)
    except (KitError, OSError) as e:
        print(f"fatal: {e}", file=sys.stderr)
        sys.exit(1)

def create_commit(repo_root, message, parents, date=None): # Creates a commit object and updates the current branch
    index = index_utils.read_index(repo_root)
    if not index:
        raise KitError("nothing to commit, index is empty")

    tree_hash = tree.build_tree_from_index(repo_root, index)

    user_name, user_email = config.get_user_config(repo_root)
    if not user_name or not user_email:
        raise KitError("Author identity unknown. Run 'kit config user.name <name>' and 'kit config user.email <email>'.")

    date = date or datetime.now().astimezone().replace(microsecond=0)
    identity = f"{user_name} <{user_email}>"

    commit_hash = write_commit(repo_root, Commit(
        tree=tree_hash,
        parents=list(parents),
        author=identity,
        author_date=date,
        committer=identity,
        committer_date=date,
        message=message,
    ))

    current_branch = repository.update_head(repo_root, commit_hash)
    summary = message.splitlines()[0] if message.strip() else ''
    print(f"[{current_branch or 'detached HEAD'} {commit_hash[:7]}] {summary}")

    return commit_hash

def prompt_commit_message(repo_root): # Opens the configured editor on .kit/COMMIT_EDITMSG and returns the cleaned message, or None if empty
    msg_path = os.path.join(repo_root, '.kit', 'COMMIT_EDITMSG')
    with open(msg_path, 'w') as f:
        f.write(COMMIT_TEMPLATE)

    editor = config.get_editor(repo_root)
    subprocess.run(shlex.split(editor) + [msg_path], check=True)

    with open(msg_path, 'r') as f:
        return clean_message(f.read())

def clean_message(text):
    """
    Drops comment lines starting with '#' and surrounding blank lines.
    Returns None when nothing is left, which aborts the commit.
    """
    lines = [line.rstrip() for line in text.splitlines() if not line.startswith('#')]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return None
    return ''.join(line + '\n' for line in lines)
