import logging
import pathlib
import sys
from os import PathLike

from merkledag.models.builder import CHUNK_SIZE, MAX_LISTLINE, Builder, BuildStats
from merkledag.models.errors import ObjectNotFound
from merkledag.models.hashing import DEFAULT_HASH, get_hasher
from merkledag.models.objects import Kind, Link, Object, decode_object
from merkledag.models.retriever import Retriever
from merkledag.models.source import Directory, File, from_path
from merkledag.models.store import STORE_FOLDER, FileStore, KVStore

__all__ = ["MerkleDag"]

logger = logging.getLogger(__name__)


class MerkleDag:
    ignore_patterns = frozenset({STORE_FOLDER, ".git", "__pycache__", ".pytest_cache", ".venv"})

    def __init__(
        self,
        store: KVStore | None = None,
        *,
        hash_name: str = DEFAULT_HASH,
        chunk_size: int = CHUNK_SIZE,
        max_links: int = MAX_LISTLINE,
    ):
        self.store = store if store is not None else FileStore(STORE_FOLDER)
        self.hash_name = hash_name
        self.hasher = get_hasher(hash_name)
        self.chunk_size = chunk_size
        self.max_links = max_links
        self.last_stats: BuildStats | None = None

    def init_store(self):
        if not isinstance(self.store, FileStore):
            raise ValueError("Only a local store can be initialized")
        self.store.init()
        logger.info("Initialized store in %s", self.store.root)
        return self.store.root

    def add(self, path: PathLike | str, *, pretty_print: bool = True) -> bytes:
        """Build the DAG of the directory at *path* and return its root hash.

        A single file is stored as the only entry of a tree, so the result
        can always be resolved by path.
        """
        node = from_path(path, ignore_patterns=self.ignore_patterns)
        if isinstance(node, File):
            node = Directory(name=pathlib.Path(path).resolve().parent.name, children=(node,))
        builder = Builder(
            self.store,
            hasher=self.hasher,
            chunk_size=self.chunk_size,
            max_links=self.max_links,
        )
        root_hash = builder.build(node)
        self.last_stats = builder.stats
        if pretty_print:
            sys.stdout.write(root_hash.hex())
        return root_hash

    def retriever(self, *, verify: bool = False) -> Retriever:
        return Retriever(self.store, hasher=self.hasher, verify=verify)

    def cat(
        self,
        root_hash: bytes,
        path: str,
        *,
        verify: bool = False,
        pretty_print: bool = False,
    ) -> bytes | None:
        content = self.retriever(verify=verify).resolve(root_hash, path)
        if pretty_print and content is not None:
            sys.stdout.buffer.write(content)
            sys.stdout.flush()
        return content

    def ls_tree(
        self,
        root_hash: bytes,
        path: str = "",
        *,
        name_only: bool = False,
        pretty_print: bool = False,
    ) -> list[Link] | None:
        entries = self.retriever().list_tree(root_hash, path)
        if pretty_print and entries is not None:
            for entry in entries:
                if name_only:
                    print(entry.name)
                else:
                    print(f"{entry.kind} {entry.hex} {entry.size}\t{entry.name}")
        return entries

    def cat_object(
        self,
        key: bytes,
        *,
        kind: Kind = Kind.TREE,
        pretty_print: bool = False,
    ) -> Object:
        if not self.store.has(key):
            raise ObjectNotFound(f"Object not found: {key.hex()}", key=key)
        obj = decode_object(self.store.get(key), kind)
        if pretty_print:
            if obj.kind is Kind.BLOB:
                sys.stdout.buffer.write(obj.data)
                sys.stdout.flush()
            else:
                for link in obj.links:
                    name = f"\t{link.name}" if link.name else ""
                    print(f"{link.kind} {link.hex} {link.size}{name}")
        return obj
