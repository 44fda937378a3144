import hashlib
import logging

from merkledag.models.errors import IntegrityError, MalformedObject
from merkledag.models.hashing import Hasher, compute_hash
from merkledag.models.objects import Kind, Link, Object, decode_object, encode_object
from merkledag.models.store import KVStore

__all__ = ["Retriever", "resolve", "list_tree"]

logger = logging.getLogger(__name__)


class Retriever:
    """Read files back out of a Merkle DAG.

    An unknown root hash or a path that names nothing resolves to ``None``.
    Store failures and undecodable objects raise.
    """

    def __init__(
        self,
        store: KVStore,
        *,
        hasher: Hasher = hashlib.sha256,
        verify: bool = False,
    ):
        self.store = store
        self.hasher = hasher
        self.verify = verify

    def fetch(self, key: bytes, kind: Kind) -> bytes:
        value = self.store.get(key)
        if self.verify:
            encoded = encode_object(Object.blob(value)) if kind is Kind.BLOB else value
            actual = compute_hash(encoded, hasher=self.hasher)
            if actual != key:
                raise IntegrityError(key, actual)
        return value

    def load(self, key: bytes, kind: Kind) -> Object:
        return decode_object(self.fetch(key, kind), kind)

    def load_root(self, root_hash: bytes) -> Object | None:
        if not self.store.has(root_hash):
            logger.info("Root %s not in store", root_hash.hex())
            return None
        try:
            return self.load(root_hash, Kind.TREE)
        except IntegrityError:
            raise
        except MalformedObject as e:
            logger.info("Root %s is not a tree: %s", root_hash.hex(), e)
            return None

    def resolve(self, root_hash: bytes, path: str) -> bytes | None:
        """Return the bytes of the file at *path* below the tree *root_hash*.

        The first ``/``-separated segment names the root itself and is
        skipped, so ``/docs/readme.txt`` and ``root/docs/readme.txt`` are
        the same path.
        """
        root = self.load_root(root_hash)
        if root is None:
            return None
        content = self.resolve_in_tree(root, path.split("/"), 1)
        if content is None:
            logger.info("Path %r not found below %s", path, root_hash.hex())
        return content

    def resolve_in_tree(self, tree: Object, segments: list[str], cursor: int) -> bytes | None:
        if cursor >= len(segments):
            return None
        for link in tree.links:
            if link.name != segments[cursor]:
                continue
            match link.kind:
                case Kind.TREE:
                    content = self.resolve_in_tree(
                        self.load(link.hash, Kind.TREE), segments, cursor + 1
                    )
                    if content is not None:
                        return content
                case Kind.BLOB:
                    return self.fetch(link.hash, Kind.BLOB)
                case Kind.LIST:
                    return self.collect_list(self.load(link.hash, Kind.LIST))
        return None

    def collect_list(self, obj: Object) -> bytes:
        """Concatenate every chunk below the list *obj*, in link order."""
        return b"".join(self._iter_chunks(obj))

    def _iter_chunks(self, obj: Object):
        for link in obj.links:
            if link.kind is Kind.BLOB:
                yield self.fetch(link.hash, Kind.BLOB)
            else:
                yield from self._iter_chunks(self.load(link.hash, Kind.LIST))

    def list_tree(self, root_hash: bytes, path: str = "") -> list[Link] | None:
        """Return the entries of the directory at *path*, or ``None``."""
        tree = self.load_root(root_hash)
        for segment in path.split("/")[1:]:
            if tree is None:
                break
            if not segment:
                continue
            link = next(
                (
                    link
                    for link in tree.links
                    if link.name == segment and link.kind is Kind.TREE
                ),
                None,
            )
            tree = self.load(link.hash, Kind.TREE) if link is not None else None
        if tree is None:
            return None
        return list(tree.links)


def resolve(
    store: KVStore,
    root_hash: bytes,
    path: str,
    *,
    hasher: Hasher = hashlib.sha256,
    verify: bool = False,
) -> bytes | None:
    return Retriever(store, hasher=hasher, verify=verify).resolve(root_hash, path)


def list_tree(
    store: KVStore,
    root_hash: bytes,
    path: str = "",
    *,
    hasher: Hasher = hashlib.sha256,
) -> list[Link] | None:
    return Retriever(store, hasher=hasher).list_tree(root_hash, path)
