from merkledag.models.builder import CHUNK_SIZE, MAX_LISTLINE, Builder, build, tree_height
from merkledag.models.dag import MerkleDag
from merkledag.models.errors import (
    EncodingError,
    IntegrityError,
    MalformedObject,
    MerkleDagError,
    ObjectNotFound,
    StoreReadError,
    StoreWriteError,
    UnrecognizedSourceNode,
)
from merkledag.models.objects import Kind, Link, Object, decode_object, encode_object
from merkledag.models.remote import HttpStore
from merkledag.models.retriever import Retriever, list_tree, resolve
from merkledag.models.source import Directory, File, from_path
from merkledag.models.store import FileStore, KVStore, MemoryStore

__all__ = [
    "CHUNK_SIZE",
    "MAX_LISTLINE",
    "Builder",
    "Directory",
    "EncodingError",
    "File",
    "FileStore",
    "HttpStore",
    "IntegrityError",
    "KVStore",
    "Kind",
    "Link",
    "MalformedObject",
    "MemoryStore",
    "MerkleDag",
    "MerkleDagError",
    "Object",
    "ObjectNotFound",
    "Retriever",
    "StoreReadError",
    "StoreWriteError",
    "UnrecognizedSourceNode",
    "build",
    "decode_object",
    "encode_object",
    "from_path",
    "list_tree",
    "resolve",
    "tree_height",
]
