# Shared pytest fixtures for Kit tests

import pytest
import os
import sys
import shutil
import tempfile

# Add kit-project to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'kit-project'))

from plumbing import repository, objects, index as index_utils, tree
from plumbing.commit import Commit, make_signature_date, write_commit


@pytest.fixture
def temp_dir():
    # Creates a temporary directory that is cleaned up after the test
    # Also saves/restores cwd to prevent issues when tests change directories
    original_dir = os.getcwd()
    tmp = tempfile.mkdtemp()
    yield tmp
    os.chdir(original_dir)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_repo(temp_dir):
    # Creates an initialized Kit repository in a temporary directory
    original_dir = os.getcwd()
    os.chdir(temp_dir)

    repository.init_repo(temp_dir)

    # Set up config
    config_path = os.path.join(temp_dir, '.kit', 'config')
    with open(config_path, 'w') as f:
        f.write('[user]\n')
        f.write('name = Test User\n')
        f.write('email = test@example.com\n')

    yield temp_dir

    os.chdir(original_dir)


@pytest.fixture
def make_entry():
    # Factory for IndexEntry values with fixed stat data
    def _make_entry(path, sha1, mode=tree.MODE_FILE, **overrides):
        fields = dict(
            ctime=1700000000, ctime_ns=1, mtime=1700000001, mtime_ns=2,
            dev=3, ino=4, mode=mode, uid=1000, gid=1000, size=6,
            assume_valid=False, sha1=sha1, path=path,
        )
        fields.update(overrides)
        return index_utils.IndexEntry(**fields)
    return _make_entry


@pytest.fixture
def repo_with_file(temp_repo):
    # Creates a repo with a single file (not staged)
    file_path = os.path.join(temp_repo, 'test.txt')
    with open(file_path, 'w') as f:
        f.write('Hello, World!')
    return temp_repo


@pytest.fixture
def repo_with_commit(temp_repo):
    # Creates a repo with one committed file, built only from the plumbing layer
    file_path = os.path.join(temp_repo, 'README.md')
    with open(file_path, 'w') as f:
        f.write('# Test Project\n')

    index = {}
    index_utils.add_path(temp_repo, index, file_path)
    index_utils.write_index(temp_repo, index)

    tree_hash = tree.build_tree_from_index(temp_repo, index)
    date = make_signature_date(1700000000, 0)
    commit_hash = write_commit(temp_repo, Commit(
        tree=tree_hash,
        parents=[],
        author='Test User <test@example.com>',
        author_date=date,
        committer='Test User <test@example.com>',
        committer_date=date,
        message='Initial commit\n',
    ))

    # Update master branch
    branch_path = os.path.join(temp_repo, '.kit', 'refs', 'heads', 'master')
    with open(branch_path, 'w') as f:
        f.write(commit_hash + '\n')

    return temp_repo, commit_hash


# Mock args object for command functions
class MockArgs:
    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)


@pytest.fixture
def mock_args():
    return MockArgs
