"""Key-value stores holding Merkle DAG objects under their hash."""
import logging
import os
import pathlib
import tempfile
import zlib
from os import PathLike
from typing import Protocol, runtime_checkable

from merkledag.models.errors import ObjectNotFound, StoreReadError, StoreWriteError

__all__ = ["KVStore", "MemoryStore", "FileStore", "STORE_FOLDER"]

logger = logging.getLogger(__name__)

STORE_FOLDER = ".merkledag"


@runtime_checkable
class KVStore(Protocol):
    def has(self, key: bytes) -> bool: ...

    def get(self, key: bytes) -> bytes: ...

    def put(self, key: bytes, value: bytes) -> None: ...


class MemoryStore:
    def __init__(self):
        self.objects: dict[bytes, bytes] = {}
        self.writes = 0

    def __len__(self):
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def has(self, key: bytes) -> bool:
        return key in self.objects

    def get(self, key: bytes) -> bytes:
        try:
            return self.objects[key]
        except KeyError:
            raise ObjectNotFound(f"Object not found: {key.hex()}", key=key) from None

    def put(self, key: bytes, value: bytes) -> None:
        self.writes += 1
        self.objects[bytes(key)] = bytes(value)


class FileStore:
    """Loose objects on disk, laid out like git's ``objects`` folder.

    Every value is zlib-compressed and lives at ``objects/<hex[:2]>/<hex[2:]>``.
    """

    def __init__(self, root: PathLike | str = STORE_FOLDER):
        self.root = pathlib.Path(root)
        self.objects_folder = self.root / "objects"

    def init(self) -> None:
        self.objects_folder.mkdir(parents=True, exist_ok=True)

    def object_path(self, key: bytes) -> pathlib.Path:
        hash_value = key.hex()
        return self.objects_folder / hash_value[:2] / hash_value[2:]

    @staticmethod
    def compress(data: bytes, *, compressor=zlib.compress) -> bytes:
        return compressor(data)

    @staticmethod
    def decompress(data: bytes, *, decompressor=zlib.decompress) -> bytes:
        return decompressor(data)

    def has(self, key: bytes) -> bool:
        return self.object_path(key).is_file()

    def get(self, key: bytes) -> bytes:
        path = self.object_path(key)
        try:
            with path.open("rb") as f:
                return self.decompress(f.read())
        except FileNotFoundError:
            raise ObjectNotFound(f"Object not found: {key.hex()}", key=key) from None
        except (OSError, zlib.error) as e:
            raise StoreReadError(f"Cannot read object {key.hex()}: {e}", key=key) from e

    def put(self, key: bytes, value: bytes) -> None:
        path = self.object_path(key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            with os.fdopen(fd, "wb") as f:
                f.write(self.compress(value))
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise StoreWriteError(f"Cannot write object {key.hex()}: {e}", key=key) from e
        logger.debug("Stored object %s (%d bytes)", key.hex()[:8], len(value))
