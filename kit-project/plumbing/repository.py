# What it does: Provides high-level functions for interacting with the repository structure, like finding the repo root, creating it, and reading/updating refs
# How it does: It reads/writes files like `HEAD` and those under `refs/` to manage the repository's current state. `find_repo_root` walks up the directory tree to locate the `.kit` directory; `resolve_ref` follows symbolic refs ("ref: refs/heads/master") to an object name
# What data structure it uses: Uses recursion (linear recursion) to find the repo root. Conceptually, refs are pointers into the commit graph, and symbolic refs are pointers to pointers

import logging
import os

from . import objects
from .errors import KitError, RefNotFoundError

logger = logging.getLogger(__name__)

MAX_SYMREF_DEPTH = 5


def find_repo_root(path='.'): # Recursively searches for the .kit directory to find the repository root
    path = os.path.abspath(path)
    kit_dir = os.path.join(path, '.kit')
    if os.path.isdir(kit_dir):
        return path
    parent_path = os.path.dirname(path)
    if parent_path == path:
        return None
    return find_repo_root(parent_path)


def init_repo(path): # Creates .kit/objects, .kit/refs/heads and a HEAD pointing at master; returns the .kit path
    kit_dir = os.path.join(path, '.kit')
    os.makedirs(os.path.join(kit_dir, 'objects'), exist_ok=True)
    os.makedirs(os.path.join(kit_dir, 'refs', 'heads'), exist_ok=True)
    os.makedirs(os.path.join(kit_dir, 'refs', 'tags'), exist_ok=True)

    head_path = os.path.join(kit_dir, 'HEAD')
    if not os.path.exists(head_path):
        with open(head_path, 'w') as f:
            f.write('ref: refs/heads/master\n')
    return kit_dir


def _ref_file(repo_root, refname):
    return os.path.join(repo_root, '.kit', *refname.split('/'))


def read_ref(repo_root, refname, depth=0):
    """
    Reads the ref stored at .kit/<refname>, following symbolic refs.
    Returns None for a ref that exists but does not point anywhere yet
    (a fresh branch), and raises RefNotFoundError if the file is missing.
    """
    if depth > MAX_SYMREF_DEPTH:
        raise KitError(f"symbolic ref loop while resolving {refname}")

    ref_path = _ref_file(repo_root, refname)
    if not os.path.isfile(ref_path):
        raise RefNotFoundError(f"ref not found: {refname}")

    with open(ref_path, 'r') as f:
        content = f.read().strip()

    if content.startswith('ref: '):
        target = content[5:].strip()
        if not os.path.isfile(_ref_file(repo_root, target)):
            return None
        return read_ref(repo_root, target, depth + 1)
    return content or None


def resolve_ref(repo_root, name): # Turns a ref name or a full object name into an object name, trying the usual ref directories in order
    if objects.is_sha1(name):
        return name

    candidates = [
        name,
        f'refs/{name}',
        f'refs/tags/{name}',
        f'refs/heads/{name}',
        f'refs/remotes/{name}',
        f'refs/remotes/{name}/HEAD',
    ]
    for refname in candidates:
        if os.path.isfile(_ref_file(repo_root, refname)):
            sha1 = read_ref(repo_root, refname)
            if sha1:
                logger.debug("resolved %s via %s to %s", name, refname, sha1)
                return sha1
            break
    raise RefNotFoundError(f"unknown revision or ref name: {name}")


def get_head_commit(repo_root): # Retrieves the commit hash that HEAD points to, or None if there are no commits
    try:
        return read_ref(repo_root, 'HEAD')
    except RefNotFoundError:
        return None


def get_current_branch(repo_root): # Retrieves the name of the current branch HEAD points to, or None if in detached HEAD state
    head_path = os.path.join(repo_root, '.kit', 'HEAD')
    with open(head_path, 'r') as f:
        head_content = f.read().strip()
    if head_content.startswith('ref: refs/heads/'):
        return head_content[len('ref: refs/heads/'):]
    return None


def update_head(repo_root, commit_hash): # Moves the current branch (or a detached HEAD) to commit_hash
    current_branch = get_current_branch(repo_root)
    if current_branch:
        ref_path = _ref_file(repo_root, f'refs/heads/{current_branch}')
        os.makedirs(os.path.dirname(ref_path), exist_ok=True)
    else:
        ref_path = os.path.join(repo_root, '.kit', 'HEAD')

    with open(ref_path, 'w') as f:
        f.write(f"{commit_hash}\n")
    return current_branch
