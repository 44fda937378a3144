"""Build a Merkle DAG from a source tree.

Small files become a single blob. Larger files are cut into ``chunk_size``
blobs gathered by list objects, each list holding at most ``max_links``
children, so a file of ``n`` chunks needs a tree of height
``ceil(log(n, max_links))``. Directories become tree objects.
"""
import hashlib
import logging
from dataclasses import dataclass

from merkledag.models.errors import EncodingError, UnrecognizedSourceNode
from merkledag.models.hashing import Hasher, compute_hash
from merkledag.models.objects import Kind, Link, Object, encode_object
from merkledag.models.source import Directory, File, Node
from merkledag.models.store import KVStore

__all__ = ["CHUNK_SIZE", "MAX_LISTLINE", "BuildStats", "Builder", "build", "tree_height"]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024
MAX_LISTLINE = 4096


def tree_height(
    size: int,
    *,
    chunk_size: int = CHUNK_SIZE,
    max_links: int = MAX_LISTLINE,
) -> int:
    """Number of list levels needed for a file of *size* bytes.

    Returns 0 when the file fits in a single blob.
    """
    if size <= chunk_size:
        return 0
    chunks = -(-size // chunk_size)
    height, capacity = 1, max_links
    while capacity < chunks:
        height += 1
        capacity *= max_links
    return height


@dataclass
class BuildStats:
    files: int = 0
    directories: int = 0
    objects_written: int = 0
    objects_skipped: int = 0


class Builder:
    def __init__(
        self,
        store: KVStore,
        *,
        hasher: Hasher = hashlib.sha256,
        chunk_size: int = CHUNK_SIZE,
        max_links: int = MAX_LISTLINE,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if max_links < 2:
            raise ValueError(f"max_links must be at least 2, got {max_links}")
        self.store = store
        self.hasher = hasher
        self.chunk_size = chunk_size
        self.max_links = max_links
        self.stats = BuildStats()

    def build(self, node: Node) -> bytes:
        """Persist *node* and everything below it; return the root hash."""
        match node:
            case File():
                _obj, key = self.build_file(node)
            case Directory():
                _obj, key = self.build_directory(node)
            case _:
                raise UnrecognizedSourceNode(node)
        logger.info(
            "Built %s: %d objects written, %d already stored",
            key.hex(),
            self.stats.objects_written,
            self.stats.objects_skipped,
        )
        return key

    def persist(self, obj: Object) -> bytes:
        """Store *obj* unless its hash is already present; return the hash."""
        encoded = encode_object(obj)
        key = compute_hash(encoded, hasher=self.hasher)
        if self.store.has(key):
            self.stats.objects_skipped += 1
            logger.debug("Object %s already in store, skipped", key.hex()[:8])
            return key
        self.store.put(key, obj.data if obj.kind is Kind.BLOB else encoded)
        self.stats.objects_written += 1
        return key

    def build_file(self, file: File) -> tuple[Object, bytes]:
        self.stats.files += 1
        data = file.read_bytes()
        height = tree_height(len(data), chunk_size=self.chunk_size, max_links=self.max_links)
        if height == 0:
            obj = Object.blob(data)
            return obj, self.persist(obj)
        logger.debug("Chunking %s (%d bytes, height %d)", file.name, len(data), height)
        obj, key, _consumed = self.build_level(height, memoryview(data), 0)
        return obj, key

    def build_level(
        self, height: int, data: memoryview, start: int
    ) -> tuple[Object, bytes, int]:
        """Build one list level starting at *start*.

        Returns the object, its hash and how many bytes it covers. The
        caller sizes *height* so that no level needs more than
        ``max_links`` children.
        """
        end = len(data)
        links = []
        consumed = 0
        if height == 1:
            if end - start < self.chunk_size:
                obj = Object.blob(data[start:])
                return obj, self.persist(obj), end - start
            for _ in range(self.max_links):
                offset = start + consumed
                chunk = Object.blob(data[offset : offset + self.chunk_size])
                links.append(
                    Link(hash=self.persist(chunk), size=len(chunk.data), kind=Kind.BLOB)
                )
                consumed += len(chunk.data)
                if start + consumed >= end:
                    break
        else:
            for _ in range(self.max_links):
                if start + consumed >= end:
                    break
                child, key, child_size = self.build_level(height - 1, data, start + consumed)
                links.append(Link(hash=key, size=child_size, kind=child.kind))
                consumed += child_size
        obj = Object.list(links)
        return obj, self.persist(obj), consumed

    def build_directory(self, directory: Directory) -> tuple[Object, bytes]:
        self.stats.directories += 1
        links = []
        for child in directory:
            if isinstance(child, File | Directory) and not child.name:
                raise EncodingError(f"Unnamed entry in directory {directory.name!r}")
            match child:
                case File():
                    obj, key = self.build_file(child)
                case Directory():
                    obj, key = self.build_directory(child)
                case _:
                    raise UnrecognizedSourceNode(child)
            links.append(Link(name=child.name, hash=key, size=obj.size, kind=obj.kind))
        obj = Object.tree(links)
        return obj, self.persist(obj)


def build(
    store: KVStore,
    node: Node,
    *,
    hasher: Hasher = hashlib.sha256,
    chunk_size: int = CHUNK_SIZE,
    max_links: int = MAX_LISTLINE,
) -> bytes:
    builder = Builder(store, hasher=hasher, chunk_size=chunk_size, max_links=max_links)
    return builder.build(node)
