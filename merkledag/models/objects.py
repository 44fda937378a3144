"""Merkle DAG objects and their canonical encoding.

An object is a list of links plus a data field. Its category is never
stored in the object itself: a parent records it as a 4-byte tag in its own
``Data``, one tag per link, in link order. Blobs keep their raw content in
``Data``; lists and trees keep the tags there.

The canonical encoding is the compact JSON document Go's ``encoding/json``
produces for ``{Links []Link; Data []byte}``, so hashes stay comparable with
stores written by other implementations of the same format::

    {"Links":[{"Name":"","Hash":"<base64>","Size":262144}],"Data":"YmxvYg=="}
"""
import base64
import binascii
import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable

from merkledag.models.errors import EncodingError, MalformedObject

__all__ = ["Kind", "Link", "Object", "TAG_SIZE", "encode_object", "decode_object"]

TAG_SIZE = 4

# Escapes applied by Go's encoder on top of standard JSON.
_GO_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class Kind(StrEnum):
    BLOB = "blob"
    LIST = "link"
    TREE = "tree"

    @property
    def tag(self) -> bytes:
        return self.value.encode("ascii")

    @classmethod
    def from_tag(cls, tag: bytes) -> "Kind":
        try:
            return cls(tag.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            raise ValueError(f"Invalid object tag: {tag!r}") from None


@dataclass(frozen=True, kw_only=True)
class Link:
    hash: bytes
    size: int
    kind: Kind
    name: str | None = None

    @property
    def hex(self) -> str:
        return self.hash.hex()


@dataclass(frozen=True, kw_only=True)
class Object:
    kind: Kind
    links: tuple[Link, ...] = ()
    data: bytes = b""

    @classmethod
    def blob(cls, data: bytes) -> "Object":
        return cls(kind=Kind.BLOB, data=bytes(data))

    @classmethod
    def list(cls, links: Iterable[Link]) -> "Object":
        links = tuple(links)
        if any(link.kind is Kind.TREE for link in links):
            raise ValueError("A list can only link to blobs and lists")
        return cls(kind=Kind.LIST, links=links, data=_tags(links))

    @classmethod
    def tree(cls, links: Iterable[Link]) -> "Object":
        links = tuple(links)
        if any(not link.name for link in links):
            raise ValueError("Every tree entry needs a name")
        return cls(kind=Kind.TREE, links=links, data=_tags(links))

    @property
    def size(self) -> int:
        """Logical byte length of the content below this object."""
        if self.kind is Kind.BLOB:
            return len(self.data)
        return sum(link.size for link in self.links)

    @property
    def tags(self) -> tuple[Kind, ...]:
        return tuple(link.kind for link in self.links)

    def stored_value(self) -> bytes:
        """Bytes persisted under this object's hash."""
        if self.kind is Kind.BLOB:
            return self.data
        return encode_object(self)


def _tags(links: tuple[Link, ...]) -> bytes:
    return b"".join(link.kind.tag for link in links)


def _b64encode(value: bytes) -> str | None:
    if not value:
        return None
    return base64.b64encode(value).decode("ascii")


def _b64decode(value: str | None) -> bytes:
    if value is None:
        return b""
    return base64.b64decode(value, validate=True)


def _size(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Invalid size: {value!r}")
    return value


def encode_object(obj: Object) -> bytes:
    document = {
        "Links": [
            {
                "Name": link.name or "",
                "Hash": _b64encode(link.hash),
                "Size": link.size,
            }
            for link in obj.links
        ]
        or None,
        "Data": _b64encode(obj.data),
    }
    text = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    for char, escape in _GO_ESCAPES:
        text = text.replace(char, escape)
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Cannot encode object: {e}") from e


def decode_object(raw: bytes, kind: Kind) -> Object:
    """Decode a stored value as an object of the given *kind*."""
    if kind is Kind.BLOB:
        return Object.blob(raw)

    try:
        document = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedObject(f"Invalid {kind} object: {e}") from e
    if not isinstance(document, dict):
        raise MalformedObject(f"Invalid {kind} object: not a JSON object")

    entries = document.get("Links")
    if entries is None:
        entries = []
    elif not isinstance(entries, list):
        raise MalformedObject(f"Invalid links field: {entries!r}")
    try:
        data = _b64decode(document.get("Data"))
    except (binascii.Error, TypeError) as e:
        raise MalformedObject(f"Invalid data field: {e}") from e
    if len(data) != TAG_SIZE * len(entries):
        raise MalformedObject(
            f"{len(entries)} links need {TAG_SIZE * len(entries)} bytes of tags, "
            f"found {len(data)}"
        )

    links = []
    for index, entry in enumerate(entries):
        offset = TAG_SIZE * index
        try:
            links.append(
                Link(
                    name=entry.get("Name") or None,
                    hash=_b64decode(entry["Hash"]),
                    size=_size(entry["Size"]),
                    kind=Kind.from_tag(data[offset : offset + TAG_SIZE]),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedObject(f"Invalid link #{index}: {e}") from e

    try:
        match kind:
            case Kind.LIST:
                return Object.list(links)
            case Kind.TREE:
                return Object.tree(links)
    except ValueError as e:
        raise MalformedObject(str(e)) from e
    raise MalformedObject(f"Cannot decode object of kind {kind!r}")
