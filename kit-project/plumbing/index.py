# What it does: Provides centralized read/write operations for the .kit/index file (the staging area)
# How it does: Encodes and decodes the binary DIRC version 2 format: a 12 byte header, one fixed 62 byte record plus a NUL-padded name per staged path, and a trailing SHA-1 over everything before it
# What data structure it uses: Dictionary (mapping path bytes to IndexEntry tuples, kept in ascending byte order of the path)

import hashlib
import io
import logging
import os
import stat
import struct
from collections import namedtuple

from . import objects
from .errors import (
    BadEntryModeError, BadSignatureError, ChecksumMismatchError, CorruptIndexError, CorruptNameError,
    CorruptPaddingError, IndexLockedError, KitError, KitIOError,
    UnsupportedExtensionError,
)
from .scanner import ByteScanner
from .tree import MODE_EXECUTABLE, MODE_FILE, MODE_SYMLINK

logger = logging.getLogger(__name__)

SIGNATURE = b'DIRC\x00\x00\x00\x02'
CHECKSUM_SIZE = 20
ENTRY_HEADER_SIZE = 62
MAX_NAME_LENGTH = 0xFFF

FLAG_ASSUME_VALID = 0x8000
FLAG_EXTENDED = 0x4000
FLAG_STAGE = 0x3000

# ctime, ctime_ns, mtime, mtime_ns, dev, ino, mode, uid, gid, size, hash, flags
_ENTRY_HEADER = struct.Struct('>10I20sH')

_MODE_BITS = {
    0o100644: MODE_FILE,
    0o100755: MODE_EXECUTABLE,
    0o120000: MODE_SYMLINK,
}
_BITS_FOR_MODE = {mode: bits for bits, mode in _MODE_BITS.items()}

IndexEntry = namedtuple('IndexEntry', [
    'ctime', 'ctime_ns', 'mtime', 'mtime_ns', 'dev', 'ino', 'mode',
    'uid', 'gid', 'size', 'assume_valid', 'sha1', 'path',
])


def get_index_path(repo_root):
    return os.path.join(repo_root, '.kit', 'index')


def padding_length(name_length): # NUL bytes after the name terminator so the record is a multiple of 8 bytes long
    return (8 - (ENTRY_HEADER_SIZE + name_length + 1) % 8) % 8


def encode_index(index):
    """Serialize an index dict to the bytes of an index file.

    Entries are always written in ascending byte order of their path, so
    two equal indexes always encode to identical bytes.
    """
    out = io.BytesIO()
    out.write(SIGNATURE)
    out.write(struct.pack('>I', len(index)))

    for path in sorted(index):
        entry = index[path]
        if entry.mode not in _BITS_FOR_MODE:
            raise BadEntryModeError(f"cannot stage {path!r} with mode {entry.mode!r}")

        flags = min(len(path), MAX_NAME_LENGTH)
        if entry.assume_valid:
            flags |= FLAG_ASSUME_VALID

        out.write(_ENTRY_HEADER.pack(
            entry.ctime, entry.ctime_ns, entry.mtime, entry.mtime_ns,
            entry.dev, entry.ino, _BITS_FOR_MODE[entry.mode],
            entry.uid, entry.gid, entry.size,
            bytes.fromhex(entry.sha1), flags,
        ))
        out.write(path + b'\0')
        out.write(b'\0' * padding_length(len(path)))

    data = out.getvalue()
    return data + hashlib.sha1(data).digest()


def decode_index(data):
    """Parse the bytes of an index file into a dict {path: IndexEntry}.

    A short file raises KitIOError; every structural problem raises
    CorruptIndexError or one of its subclasses. Nothing is returned unless
    the whole file, checksum included, is valid.
    """
    scanner = ByteScanner(io.BytesIO(data))

    if scanner.read_exact(len(SIGNATURE)) != SIGNATURE:
        raise BadSignatureError("bad index file signature")

    count = scanner.read_u32()
    index = {}
    consumed = len(SIGNATURE) + 4

    previous = None
    for _ in range(count):
        entry, size = _decode_entry(scanner)
        if previous is not None and entry.path <= previous:
            raise CorruptIndexError(f"index entry {entry.path!r} is duplicated or out of order")
        previous = entry.path
        index[entry.path] = entry
        consumed += size

    remaining = len(data) - consumed
    if remaining < CHECKSUM_SIZE:
        raise KitIOError("index file is truncated before its checksum")
    if remaining > CHECKSUM_SIZE:
        raise UnsupportedExtensionError("index extensions are not supported")

    if hashlib.sha1(data[:consumed]).digest() != data[consumed:]:
        raise ChecksumMismatchError("index checksum does not match its contents")

    return index


def _decode_entry(scanner): # Returns (IndexEntry, number of bytes the record took)
    (ctime, ctime_ns, mtime, mtime_ns, dev, ino, mode_bits,
     uid, gid, size, raw_sha1, flags) = _ENTRY_HEADER.unpack(scanner.read_exact(ENTRY_HEADER_SIZE))

    mode = _MODE_BITS.get(mode_bits)
    if mode is None:
        raise BadEntryModeError(f"bad entry mode {mode_bits:o} in index")
    if flags & FLAG_EXTENDED:
        raise UnsupportedExtensionError("extended flag must be 0")
    if flags & FLAG_STAGE:
        raise UnsupportedExtensionError("merge stages are not supported")

    name_length = flags & MAX_NAME_LENGTH
    path = scanner.read_until(b'\0')

    # Names of 0xFFF bytes or more all store 0xFFF in the flags
    if not (len(path) == name_length or (len(path) > MAX_NAME_LENGTH and name_length == MAX_NAME_LENGTH)):
        raise CorruptNameError(f"name length {len(path)} does not match flags ({name_length}) for {path!r}")

    pad = padding_length(len(path))
    if scanner.read_exact(pad) != b'\0' * pad:
        raise CorruptPaddingError(f"non-zero padding after {path!r}")

    entry = IndexEntry(
        ctime=ctime, ctime_ns=ctime_ns, mtime=mtime, mtime_ns=mtime_ns,
        dev=dev, ino=ino, mode=mode, uid=uid, gid=gid, size=size,
        assume_valid=bool(flags & FLAG_ASSUME_VALID),
        sha1=raw_sha1.hex(), path=path,
    )
    return entry, ENTRY_HEADER_SIZE + len(path) + 1 + pad


def read_index(repo_root):
    """
    Reads the index file and returns a dictionary {path: IndexEntry}.
    A repository without an index file has an empty index.
    """
    index_path = get_index_path(repo_root)
    try:
        with open(index_path, 'rb') as f:
            data = f.read()
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise KitIOError(f"could not read index: {e}") from e

    index = decode_index(data)
    logger.debug("read %d index entries from %s", len(index), index_path)
    return index


def write_index(repo_root, index):
    """
    Writes the index through .kit/index.lock and renames it into place,
    so a crash never leaves a half-written index behind.
    """
    index_path = get_index_path(repo_root)
    lock_path = index_path + '.lock'
    data = encode_index(index)

    try:
        fd = os.open(lock_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
    except FileExistsError as e:
        raise IndexLockedError(f"unable to create '{lock_path}': another process may be updating the index") from e
    except OSError as e:
        raise KitIOError(f"could not lock index: {e}") from e

    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(lock_path, index_path)
    except OSError as e:
        if os.path.exists(lock_path):
            os.unlink(lock_path)
        raise KitIOError(f"could not write index: {e}") from e

    logger.debug("wrote %d index entries to %s", len(index), index_path)


def _u32(value):
    return value & 0xFFFFFFFF


def entry_from_stat(path, st, sha1, mode): # Builds an IndexEntry from an os.stat_result; every field is truncated to 32 bits
    return IndexEntry(
        ctime=_u32(st.st_ctime_ns // 1_000_000_000),
        ctime_ns=st.st_ctime_ns % 1_000_000_000,
        mtime=_u32(st.st_mtime_ns // 1_000_000_000),
        mtime_ns=st.st_mtime_ns % 1_000_000_000,
        dev=_u32(st.st_dev),
        ino=_u32(st.st_ino),
        mode=mode,
        uid=_u32(st.st_uid),
        gid=_u32(st.st_gid),
        size=_u32(st.st_size),
        assume_valid=False,
        sha1=sha1,
        path=path,
    )


def index_key(repo_root, file_path): # Working tree path -> '/'-separated path bytes relative to the repo root
    rel_path = os.path.relpath(file_path, repo_root)
    return os.fsencode(rel_path.replace(os.sep, '/'))


def add_path(repo_root, index, file_path):
    """Stage one regular file or symlink: store its content as a blob and record it in *index*.

    Returns the new IndexEntry. The index is only changed in memory; call
    write_index to persist it.
    """
    try:
        st = os.lstat(file_path)
        if stat.S_ISLNK(st.st_mode):
            content = os.fsencode(os.readlink(file_path))
            mode = MODE_SYMLINK
        elif stat.S_ISREG(st.st_mode):
            with open(file_path, 'rb') as f:
                content = f.read()
            mode = MODE_EXECUTABLE if st.st_mode & stat.S_IXUSR else MODE_FILE
        else:
            raise KitError(f"cannot add '{file_path}': not a regular file or symlink")
    except OSError as e:
        raise KitIOError(f"could not read '{file_path}': {e}") from e

    sha1 = objects.hash_object(repo_root, content, 'blob')
    key = index_key(repo_root, file_path)
    _drop_conflicts(index, key)

    entry = entry_from_stat(key, st, sha1, mode)
    index[key] = entry
    return entry


def _drop_conflicts(index, key): # A path can't be both a file and a directory: staging one replaces the other
    parts = key.split(b'/')
    for depth in range(1, len(parts)):
        index.pop(b'/'.join(parts[:depth]), None)

    prefix = key + b'/'
    for path in [p for p in index if p.startswith(prefix)]:
        del index[path]
