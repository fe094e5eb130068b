# What it does: Encodes and decodes tree objects (one directory listing each) and folds the flat, sorted index into a hierarchy of trees
# How it does: `serialize_tree`/`parse_tree` handle the binary "<mode> <name>\0<20 byte hash>" records. `build_tree_from_index` walks the index in path order with an explicit stack of open directories, writing each directory as soon as the walk leaves it
# What data structure it uses: Stack (the open directories from the root down to the current path), List (the entries of one tree), and the Merkle Tree formed by trees referencing subtrees by hash

import io
import logging
import os
from collections import namedtuple

from . import objects
from .errors import KitIOError, MalformedTreeError, UnexpectedError
from .scanner import ByteScanner

logger = logging.getLogger(__name__)

MODE_FILE = '100644'
MODE_EXECUTABLE = '100755'
MODE_SYMLINK = '120000'
MODE_TREE = '40000'

# Mode token as it appears in a tree object, space included
_MODE_TOKENS = {
    b'100644 ': MODE_FILE,
    b'100755 ': MODE_EXECUTABLE,
    b'120000 ': MODE_SYMLINK,
    b'40000 ': MODE_TREE,
}

TreeEntry = namedtuple('TreeEntry', ['mode', 'name', 'sha1'])


def parse_tree(content): # Decodes the payload of a tree object into a list of TreeEntry
    scanner = ByteScanner(io.BytesIO(content))
    entries = []

    try:
        while not scanner.at_end():
            mode_token = scanner.read_until(b' ') + b' '
            mode = _MODE_TOKENS.get(mode_token)
            if mode is None:
                raise MalformedTreeError(f"unknown mode {mode_token[:-1]!r} in tree")
            name = scanner.read_until(b'\0')
            sha1 = scanner.read_exact(20).hex()
            entries.append(TreeEntry(mode, name, sha1))
    except KitIOError as e:
        raise MalformedTreeError(f"truncated tree entry after {len(entries)} entries") from e

    return entries


def serialize_tree(entries): # Encodes entries in the order given; callers keep them sorted
    parts = []
    for entry in entries:
        if entry.mode not in _MODE_TOKENS.values():
            raise MalformedTreeError(f"unknown mode {entry.mode!r} for {entry.name!r}")
        parts.append(entry.mode.encode() + b' ' + entry.name + b'\0' + bytes.fromhex(entry.sha1))
    return b''.join(parts)


def write_tree(repo_root, entries):
    return objects.hash_object(repo_root, serialize_tree(entries), 'tree')


def read_tree(repo_root, sha1):
    obj_type, content = objects.read_object(repo_root, sha1)
    if obj_type != 'tree':
        raise TypeError(f"Object {sha1} is not a tree")
    return parse_tree(content)


def build_tree_from_index(repo_root, index):
    """Write every directory in *index* as a tree object and return the root tree hash.

    The index is walked in ascending byte order of its paths. ``stack`` holds
    one ``(name, entries)`` frame per directory between the root and the
    current path; when the next path leaves a directory, that frame and every
    frame above it are flushed: written to the object store and recorded as
    a tree entry in their parent.

    Byte order over full paths puts ``foo.txt`` before ``foo/bar`` and
    ``foo/bar`` before ``foo0``, which is the order produced by comparing a
    directory name as if it ended in ``/``.
    """
    stack = [(b'', [])]

    for path in sorted(index):
        entry = index[path]
        parts = path.split(b'/')
        dirs, leaf = parts[:-1], parts[-1]

        # Find the first open directory the new path is not inside of
        for depth in range(1, len(stack)):
            if depth > len(dirs) or stack[depth][0] != dirs[depth - 1]:
                _flush(repo_root, stack, depth)
                break

        for name in dirs[len(stack) - 1:]:
            # Names sorting between `foo` and `foo/` (foo.txt, foo-x) can sit after the file
            if any(sibling.name == name for sibling in stack[-1][1]):
                raise MalformedTreeError(f"{name!r} is staged as both a file and a directory")
            stack.append((name, []))

        stack[-1][1].append(TreeEntry(entry.mode, leaf, entry.sha1))

    return _flush(repo_root, stack, 0)


def _flush(repo_root, stack, depth): # Writes out frames from the top of the stack down to `depth`; returns the last hash written
    sha1 = None
    while len(stack) > depth:
        name, entries = stack.pop()
        sha1 = write_tree(repo_root, entries)
        logger.debug("flushed tree %r with %d entries as %s", name, len(entries), sha1)
        if stack:
            stack[-1][1].append(TreeEntry(MODE_TREE, name, sha1))

    if sha1 is None:
        raise UnexpectedError("tried to flush an empty tree stack")
    return sha1


def walk_tree(repo_root, sha1, prefix=b''): # Flattens a tree recursively into {path: (mode, hash)}
    files = {}
    for entry in read_tree(repo_root, sha1):
        path = prefix + entry.name
        if entry.mode == MODE_TREE:
            files.update(walk_tree(repo_root, entry.sha1, path + b'/'))
        else:
            files[path] = (entry.mode, entry.sha1)
    return files


def display_name(name): # Bytes path -> str for printing, keeping undecodable bytes intact
    return os.fsdecode(name)
