import contextlib

import pytest

from merkledag.models import Directory, File, MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def change_to_tmp_dir(tmp_path):
    with contextlib.chdir(tmp_path):
        yield tmp_path


@pytest.fixture
def hello_tree():
    return Directory(
        name="root",
        children=(File(name="hello.txt", content=b"abcdefghij"),),
    )


@pytest.fixture
def clear_env(monkeypatch):
    for name in ("MERKLEDAG_STORE", "MERKLEDAG_REMOTE", "MERKLEDAG_HASH"):
        monkeypatch.delenv(name, raising=False)
