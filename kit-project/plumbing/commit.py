# What it does: Encodes and decodes commit objects: the tree snapshot, the parent commits, author/committer identities with their dates, and the message
# How it does: Parses the payload line by line with a strict grammar ("tree", zero or more "parent", "author", "committer", an optional gpgsig block, a blank line, then the message) and builds the same lines back when serializing
# What data structure it uses: A record (namedtuple) per commit; the parent links form the Directed Acyclic Graph of history

import io
import re
from collections import namedtuple
from datetime import datetime, timedelta, timezone

from . import objects
from .errors import InvalidHexError, InvalidUtf8Error, KitIOError, MalformedCommitError
from .scanner import ByteScanner

GPGSIG_END = b' -----END PGP SIGNATURE-----'

_DATE_RE = re.compile(r'(-?\d+) ([+-])(\d\d)(\d\d)')

Commit = namedtuple('Commit', [
    'tree', 'parents', 'author', 'author_date',
    'committer', 'committer_date', 'message',
])


def make_signature_date(timestamp, offset_minutes=0): # Unix seconds + fixed UTC offset -> aware datetime
    tz = timezone(timedelta(minutes=offset_minutes))
    return datetime.fromtimestamp(timestamp, tz)


def format_signature_date(date):
    """Format an aware datetime as "<unix seconds> <+HHMM>"."""
    offset = date.utcoffset()
    if offset is None:
        raise ValueError("commit dates must carry a UTC offset")
    minutes = int(offset.total_seconds()) // 60
    sign = '-' if minutes < 0 else '+'
    hours, minutes = divmod(abs(minutes), 60)
    return f"{int(date.timestamp())} {sign}{hours:02d}{minutes:02d}"


def parse_signature_date(text):
    match = _DATE_RE.fullmatch(text)
    if not match:
        raise MalformedCommitError(f"malformed date {text!r}")
    seconds, sign, hours, minutes = match.groups()
    offset = int(hours) * 60 + int(minutes)
    if sign == '-':
        offset = -offset
    try:
        return make_signature_date(int(seconds), offset)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedCommitError(f"date out of range {text!r}") from e


def _hex_field(data):
    if len(data) != 40:
        raise MalformedCommitError(f"expected a 40 character object name, got {data!r}")
    if not all(byte in b'0123456789abcdef' for byte in data):
        raise InvalidHexError(f"invalid hex character in {data!r}")
    return data.decode('ascii')


def _decode_utf8(data, what):
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(f"{what} is not valid UTF-8") from e


def _parse_signature(data, what): # "Name <email> 1700000000 +0100" -> (identity, date), split at the last two spaces
    line = _decode_utf8(data, what)
    parts = line.rsplit(' ', 2)
    if len(parts) != 3:
        raise MalformedCommitError(f"malformed {what} line")
    identity, seconds, offset = parts
    return identity, parse_signature_date(f"{seconds} {offset}")


def parse_commit(content):
    """Decode the payload of a commit object.

    A gpgsig block is consumed and dropped, so re-serializing a signed
    commit does not reproduce its bytes or its hash.
    """
    scanner = ByteScanner(io.BytesIO(content))

    try:
        tree_line = scanner.read_until(b'\n')
        if not tree_line.startswith(b'tree '):
            raise MalformedCommitError("commit does not start with a tree line")
        tree = _hex_field(tree_line[5:])

        parents = []
        line_type = scanner.read_until(b' ')
        while line_type == b'parent':
            parents.append(_hex_field(scanner.read_until(b'\n')))
            line_type = scanner.read_until(b' ')

        if line_type != b'author':
            raise MalformedCommitError(f"expected author, found {line_type!r}")
        author, author_date = _parse_signature(scanner.read_until(b'\n'), 'author')

        line_type = scanner.read_until(b' ')
        if line_type != b'committer':
            raise MalformedCommitError(f"expected committer, found {line_type!r}")
        committer, committer_date = _parse_signature(scanner.read_until(b'\n'), 'committer')

        line = scanner.read_until(b'\n')
        if line.startswith(b'gpgsig'):
            while scanner.read_until(b'\n') != GPGSIG_END:
                pass
            line = scanner.read_until(b'\n')
        if line != b'':
            raise MalformedCommitError("missing blank line after commit header")
    except KitIOError as e:
        raise MalformedCommitError("commit header is truncated") from e

    message = _decode_utf8(scanner.read_rest(), 'commit message')

    return Commit(
        tree=tree,
        parents=parents,
        author=author,
        author_date=author_date,
        committer=committer,
        committer_date=committer_date,
        message=message,
    )


def serialize_commit(commit):
    lines = [f'tree {commit.tree}']
    for parent in commit.parents:
        lines.append(f'parent {parent}')
    lines.append(f'author {commit.author} {format_signature_date(commit.author_date)}')
    lines.append(f'committer {commit.committer} {format_signature_date(commit.committer_date)}')
    lines.append('')
    lines.append(commit.message)
    return '\n'.join(lines).encode('utf-8')


def write_commit(repo_root, commit):
    return objects.hash_object(repo_root, serialize_commit(commit), 'commit')


def read_commit(repo_root, sha1):
    obj_type, content = objects.read_object(repo_root, sha1)
    if obj_type != 'commit':
        raise TypeError(f"Object {sha1} is not a commit")
    return parse_commit(content)
