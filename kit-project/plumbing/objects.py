# What it does: Manages the low-level object database, handling the storage and retrieval of blobs, trees, commits and tags
# How it does: It implements a content-addressed storage system. `hash_object` saves content and returns its hash. `read_object` retrieves content using its hash
# What data structure it uses: Hash Table / Dictionary (the entire object store is a content-addressed dictionary where the SHA-1 hash is the key), laid out on disk as a two-level directory tree

import hashlib
import io
import logging
import os
import tempfile
import zlib
from collections import namedtuple

from .errors import (
    CorruptObjectError, InvalidHexError, InvalidUtf8Error, KitIOError,
    ObjectNotFoundError, ParseIntError,
)
from .scanner import ByteScanner

logger = logging.getLogger(__name__)

OBJECT_TYPES = ('blob', 'tree', 'commit', 'tag')
HEX_DIGITS = frozenset('0123456789abcdef')

StoredObject = namedtuple('StoredObject', ['obj_type', 'content'])


def is_sha1(value): # True for a 40 character lowercase hex object name
    return isinstance(value, str) and len(value) == 40 and set(value) <= HEX_DIGITS


def get_objects_dir(repo_root):
    return os.path.join(repo_root, '.kit', 'objects')


def object_path(repo_root, sha1): # objects/<first 2 hex chars>/<remaining 38>
    if not is_sha1(sha1):
        raise InvalidHexError(f"not a valid object name: {sha1!r}")
    return os.path.join(get_objects_dir(repo_root), sha1[:2], sha1[2:])


def object_exists(repo_root, sha1):
    return os.path.isfile(object_path(repo_root, sha1))


def hash_object(repo_root, content, obj_type, write=True): #Hashes content and optionally writes it as an object of the given type ('blob', 'tree', 'commit', 'tag')
    if obj_type not in OBJECT_TYPES:
        raise ValueError(f"unknown object type {obj_type!r}")

    header = f'{obj_type} {len(content)}\0'.encode()
    data = header + content

    sha1 = hashlib.sha1(data).hexdigest()

    if write:
        _store(repo_root, sha1, data)

    return sha1


def write_object(repo_root, obj):
    return hash_object(repo_root, obj.content, obj.obj_type)


def _store(repo_root, sha1, data):
    object_file = object_path(repo_root, sha1)
    object_dir = os.path.dirname(object_file)

    # Identical name means identical bytes, so an existing file is never rewritten
    if os.path.exists(object_file):
        logger.debug("object %s already present", sha1)
        return

    try:
        os.makedirs(object_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix='tmp_obj_', dir=object_dir)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(zlib.compress(data))
            os.replace(tmp_path, object_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    except OSError as e:
        raise KitIOError(f"could not write object {sha1}: {e}") from e

    logger.debug("wrote object %s (%d bytes)", sha1, len(data))


def read_object(repo_root, sha1): #Reads an object by its SHA-1 hash and returns its type and content
    path = object_path(repo_root, sha1)

    try:
        with open(path, 'rb') as f:
            compressed_data = f.read()
    except FileNotFoundError as e:
        raise ObjectNotFoundError(f"Object not found: {sha1}") from e
    except OSError as e:
        raise KitIOError(f"could not read object {sha1}: {e}") from e

    try:
        data = zlib.decompress(compressed_data)
    except zlib.error as e:
        raise CorruptObjectError(f"object {sha1} is not valid zlib data: {e}") from e

    return parse_object(data, sha1)


def parse_object(data, sha1='<unknown>'): # Splits decompressed "<type> <len>\0<payload>" bytes into a StoredObject
    scanner = ByteScanner(io.BytesIO(data))

    try:
        type_token = scanner.read_until(b' ')
    except KitIOError as e:
        raise CorruptObjectError(f"object {sha1} has no type header") from e

    obj_type = type_token.decode('ascii', errors='replace')
    if obj_type not in OBJECT_TYPES:
        raise CorruptObjectError(f"object {sha1} has unknown type {type_token!r}")

    try:
        length_token = scanner.read_until(b'\0')
    except KitIOError as e:
        raise CorruptObjectError(f"object {sha1} has no length header") from e
    size = _parse_length(length_token, sha1)

    # Trailing bytes past the declared length are ignored
    content = scanner.read_exact(size)
    return StoredObject(obj_type, content)


def _parse_length(token, sha1):
    try:
        text = token.decode('ascii')
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(f"object {sha1} has a non-ASCII length header") from e
    if not text or not all('0' <= c <= '9' for c in text):
        raise ParseIntError(f"object {sha1} has an invalid length {text!r}")
    return int(text)
