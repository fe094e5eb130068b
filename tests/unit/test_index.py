# Unit tests for plumbing/index.py

import hashlib
import os
import struct
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'kit-project'))

from plumbing import index as index_utils, objects, tree
from plumbing.errors import (
    BadEntryModeError, BadSignatureError, ChecksumMismatchError, CorruptIndexError,
    CorruptNameError, CorruptObjectError, CorruptPaddingError, IndexLockedError,
    KitError, KitIOError, UnsupportedExtensionError,
)

SHA_A = 'a' * 40
SHA_B = 'b' * 40

# Offsets inside a single-entry index file
MODE_OFFSET = 12 + 24
FLAGS_OFFSET = 12 + 60
NAME_OFFSET = 12 + 62


def with_checksum(body):
    return body + hashlib.sha1(body).digest()


def patch(data, offset, value):
    # Replaces bytes at offset and re-signs the file so only the patched field is wrong
    body = data[:-20]
    body = body[:offset] + value + body[offset + len(value):]
    return with_checksum(body)


class TestEncodeIndex:
    """Tests for index_utils.encode_index()"""

    def test_empty_index(self):
        data = index_utils.encode_index({})
        assert data == with_checksum(b'DIRC\x00\x00\x00\x02\x00\x00\x00\x00')

    def test_single_entry_layout(self, make_entry):
        entry = make_entry(b'ab', SHA_A)
        data = index_utils.encode_index({b'ab': entry})

        assert data[:12] == b'DIRC\x00\x00\x00\x02\x00\x00\x00\x01'
        fields = struct.unpack('>10I20sH', data[12:74])
        assert fields[:6] == (1700000000, 1, 1700000001, 2, 3, 4)
        assert fields[6] == 0o100644
        assert fields[7:10] == (1000, 1000, 6)
        assert fields[10] == bytes.fromhex(SHA_A)
        assert fields[11] == 2
        # 62 + 2 + 1 = 65, padded to 72
        assert data[74:84] == b'ab' + b'\0' * 8
        assert len(data) == 12 + 72 + 20
        assert data[-20:] == hashlib.sha1(data[:-20]).digest()

    @pytest.mark.parametrize('name_length', range(0, 20))
    def test_padding_invariant(self, make_entry, name_length):
        """Every entry record is a multiple of 8 bytes long."""
        path = b'x' * name_length
        data = index_utils.encode_index({path: make_entry(path, SHA_A)})
        record = len(data) - 12 - 20
        pad = index_utils.padding_length(name_length)
        assert record == 62 + name_length + 1 + pad
        assert record % 8 == 0
        assert 0 <= pad < 8

    def test_sorted_by_path_bytes(self, make_entry):
        index = {
            b'z': make_entry(b'z', SHA_A),
            b'a/b': make_entry(b'a/b', SHA_A),
            b'a.txt': make_entry(b'a.txt', SHA_A),
        }
        decoded = index_utils.decode_index(index_utils.encode_index(index))
        assert list(decoded) == [b'a.txt', b'a/b', b'z']

    def test_modes_and_flags(self, make_entry):
        index = {
            b'run.sh': make_entry(b'run.sh', SHA_A, tree.MODE_EXECUTABLE, assume_valid=True),
        }
        data = index_utils.encode_index(index)
        assert struct.unpack('>I', data[MODE_OFFSET:MODE_OFFSET + 4])[0] == 0o100755
        assert struct.unpack('>H', data[FLAGS_OFFSET:FLAGS_OFFSET + 2])[0] == 0x8000 | 6

    def test_long_name_flags_capped(self, make_entry):
        path = b'd/' * 2500
        data = index_utils.encode_index({path: make_entry(path, SHA_A)})
        assert struct.unpack('>H', data[FLAGS_OFFSET:FLAGS_OFFSET + 2])[0] == 0xFFF

    def test_tree_mode_cannot_be_staged(self, make_entry):
        with pytest.raises(BadEntryModeError):
            index_utils.encode_index({b'dir': make_entry(b'dir', SHA_A, tree.MODE_TREE)})

    def test_deterministic(self, make_entry):
        index = {b'a': make_entry(b'a', SHA_A), b'b': make_entry(b'b', SHA_B)}
        reordered = {b'b': index[b'b'], b'a': index[b'a']}
        assert index_utils.encode_index(index) == index_utils.encode_index(reordered)


class TestDecodeIndex:
    """Tests for index_utils.decode_index()"""

    def test_round_trip(self, make_entry):
        index = {
            b'README.md': make_entry(b'README.md', SHA_A),
            b'bin/run': make_entry(b'bin/run', SHA_B, tree.MODE_EXECUTABLE, assume_valid=True),
            b'link': make_entry(b'link', SHA_A, tree.MODE_SYMLINK, size=0),
            b'src/deep/main.py': make_entry(b'src/deep/main.py', SHA_B, ctime=0xFFFFFFFF, ino=0xFFFFFFFF),
            'café'.encode(): make_entry('café'.encode(), SHA_A),
        }
        data = index_utils.encode_index(index)
        decoded = index_utils.decode_index(data)
        assert decoded == index
        assert index_utils.encode_index(decoded) == data

    @pytest.mark.parametrize('length', [0xFFE, 0xFFF, 0x1000, 5000])
    def test_long_names_round_trip(self, make_entry, length):
        path = b'n' * length
        index = {path: make_entry(path, SHA_A)}
        assert index_utils.decode_index(index_utils.encode_index(index)) == index

    def test_bad_signature(self):
        data = with_checksum(b'DIRC\x00\x00\x00\x03\x00\x00\x00\x00')
        with pytest.raises(BadSignatureError):
            index_utils.decode_index(data)

    def test_bad_mode(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, MODE_OFFSET, struct.pack('>I', 0o100600))
        with pytest.raises(BadEntryModeError):
            index_utils.decode_index(data)

    def test_extended_flag(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, FLAGS_OFFSET, struct.pack('>H', 0x4000 | 2))
        with pytest.raises(UnsupportedExtensionError):
            index_utils.decode_index(data)

    def test_merge_stage(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, FLAGS_OFFSET, struct.pack('>H', 0x1000 | 2))
        with pytest.raises(UnsupportedExtensionError):
            index_utils.decode_index(data)

    def test_name_length_mismatch(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, FLAGS_OFFSET, struct.pack('>H', 5))
        with pytest.raises(CorruptNameError):
            index_utils.decode_index(data)

    def test_long_name_must_store_fff(self, make_entry):
        path = b'n' * 5000
        data = index_utils.encode_index({path: make_entry(path, SHA_A)})
        data = patch(data, FLAGS_OFFSET, struct.pack('>H', 0xFFE))
        with pytest.raises(CorruptNameError):
            index_utils.decode_index(data)

    def test_nonzero_padding(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        # name 'ab' + NUL is followed by 7 padding bytes
        data = patch(data, NAME_OFFSET + 3 + 2, b'\x01')
        with pytest.raises(CorruptPaddingError):
            index_utils.decode_index(data)

    def test_checksum_mismatch(self, make_entry):
        data = bytearray(index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)}))
        data[-1] ^= 0xFF
        with pytest.raises(ChecksumMismatchError):
            index_utils.decode_index(bytes(data))

    def test_changed_body_detected(self, make_entry):
        data = bytearray(index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)}))
        data[12] ^= 0x01 # ctime
        with pytest.raises(ChecksumMismatchError):
            index_utils.decode_index(bytes(data))

    def test_truncated_entries(self, make_entry):
        """Entry count says 2 but only one entry is present: never a partial index."""
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, 8, struct.pack('>I', 2))
        with pytest.raises((KitIOError, CorruptObjectError)):
            index_utils.decode_index(data)

    def test_truncated_entries_is_io_error(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = patch(data, 8, struct.pack('>I', 2))
        with pytest.raises(KitIOError):
            index_utils.decode_index(data)

    def test_missing_checksum(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        with pytest.raises(KitIOError):
            index_utils.decode_index(data[:-5])

    def test_extension_data(self, make_entry):
        data = index_utils.encode_index({b'ab': make_entry(b'ab', SHA_A)})
        data = with_checksum(data[:-20] + b'TREE\x00\x00\x00\x00')
        with pytest.raises(UnsupportedExtensionError):
            index_utils.decode_index(data)

    @pytest.mark.parametrize('order', [[b'b', b'a'], [b'a', b'a']])
    def test_entries_must_be_strictly_sorted(self, make_entry, order):
        """Duplicated or out-of-order paths are rejected, not silently merged."""
        records = [index_utils.encode_index({path: make_entry(path, SHA_A)})[12:-20] for path in order]
        body = index_utils.SIGNATURE + struct.pack('>I', len(records)) + b''.join(records)
        with pytest.raises(CorruptIndexError):
            index_utils.decode_index(with_checksum(body))

    def test_errors_are_corrupt_index(self):
        with pytest.raises(CorruptIndexError):
            index_utils.decode_index(with_checksum(b'XXXX\x00\x00\x00\x02\x00\x00\x00\x00'))


class TestReadWriteIndex:
    """Tests for read_index() / write_index() on disk"""

    def test_read_empty_index(self, temp_repo):
        """Should return empty dict when no index exists."""
        assert index_utils.read_index(temp_repo) == {}

    def test_write_then_read(self, temp_repo, make_entry):
        index = {b'a.txt': make_entry(b'a.txt', SHA_A), b'dir/b.txt': make_entry(b'dir/b.txt', SHA_B)}
        index_utils.write_index(temp_repo, index)
        assert index_utils.read_index(temp_repo) == index

    def test_no_lock_left_behind(self, temp_repo, make_entry):
        index_utils.write_index(temp_repo, {b'a': make_entry(b'a', SHA_A)})
        assert not os.path.exists(index_utils.get_index_path(temp_repo) + '.lock')

    def test_existing_lock(self, temp_repo, make_entry):
        index_utils.write_index(temp_repo, {b'a': make_entry(b'a', SHA_A)})
        lock_path = index_utils.get_index_path(temp_repo) + '.lock'
        open(lock_path, 'w').close()

        with pytest.raises(IndexLockedError):
            index_utils.write_index(temp_repo, {})
        assert index_utils.read_index(temp_repo) == {b'a': make_entry(b'a', SHA_A)}
        assert os.path.exists(lock_path)

    def test_corrupt_file(self, temp_repo):
        with open(index_utils.get_index_path(temp_repo), 'wb') as f:
            f.write(b'garbage that is long enough to not be short')
        with pytest.raises(CorruptIndexError):
            index_utils.read_index(temp_repo)


class TestAddPath:
    """Tests for index_utils.add_path()"""

    def test_regular_file(self, repo_with_file):
        index = {}
        file_path = os.path.join(repo_with_file, 'test.txt')
        os.chmod(file_path, 0o644)
        entry = index_utils.add_path(repo_with_file, index, file_path)

        assert index == {b'test.txt': entry}
        assert entry.path == b'test.txt'
        assert entry.mode == tree.MODE_FILE
        assert entry.size == len('Hello, World!')
        assert entry.sha1 == objects.hash_object(None, b'Hello, World!', 'blob', write=False)
        assert objects.read_object(repo_with_file, entry.sha1) == ('blob', b'Hello, World!')
        st = os.stat(file_path)
        assert entry.mtime == st.st_mtime_ns // 1_000_000_000
        assert entry.mtime_ns == st.st_mtime_ns % 1_000_000_000
        assert entry.assume_valid is False

    def test_executable_file(self, temp_repo):
        file_path = os.path.join(temp_repo, 'run.sh')
        with open(file_path, 'w') as f:
            f.write('#!/bin/sh\n')
        os.chmod(file_path, 0o755)
        entry = index_utils.add_path(temp_repo, {}, file_path)
        assert entry.mode == tree.MODE_EXECUTABLE

    @pytest.mark.skipif(not hasattr(os, 'symlink'), reason="symlinks not supported")
    def test_symlink(self, repo_with_file):
        link_path = os.path.join(repo_with_file, 'link')
        os.symlink('test.txt', link_path)
        entry = index_utils.add_path(repo_with_file, {}, link_path)
        assert entry.mode == tree.MODE_SYMLINK
        assert objects.read_object(repo_with_file, entry.sha1) == ('blob', b'test.txt')

    def test_nested_path_uses_slashes(self, temp_repo):
        os.makedirs(os.path.join(temp_repo, 'src', 'pkg'))
        file_path = os.path.join(temp_repo, 'src', 'pkg', 'mod.py')
        with open(file_path, 'w') as f:
            f.write('x = 1\n')
        entry = index_utils.add_path(temp_repo, {}, file_path)
        assert entry.path == b'src/pkg/mod.py'

    def test_directory_rejected(self, temp_repo):
        os.makedirs(os.path.join(temp_repo, 'dir'))
        with pytest.raises(KitError):
            index_utils.add_path(temp_repo, {}, os.path.join(temp_repo, 'dir'))

    def test_missing_file(self, temp_repo):
        with pytest.raises(KitIOError):
            index_utils.add_path(temp_repo, {}, os.path.join(temp_repo, 'nope'))

    def test_file_replaces_directory(self, temp_repo, make_entry):
        index = {b'foo/a': make_entry(b'foo/a', SHA_A), b'foo/b': make_entry(b'foo/b', SHA_A), b'foobar': make_entry(b'foobar', SHA_A)}
        with open(os.path.join(temp_repo, 'foo'), 'w') as f:
            f.write('now a file')
        index_utils.add_path(temp_repo, index, os.path.join(temp_repo, 'foo'))
        assert sorted(index) == [b'foo', b'foobar']

    def test_directory_replaces_file(self, temp_repo, make_entry):
        index = {b'foo': make_entry(b'foo', SHA_A)}
        os.makedirs(os.path.join(temp_repo, 'foo2', 'bar'))
        index[b'foo2'] = make_entry(b'foo2', SHA_A)
        with open(os.path.join(temp_repo, 'foo2', 'bar', 'baz'), 'w') as f:
            f.write('nested')
        index_utils.add_path(temp_repo, index, os.path.join(temp_repo, 'foo2', 'bar', 'baz'))
        assert sorted(index) == [b'foo', b'foo2/bar/baz']
