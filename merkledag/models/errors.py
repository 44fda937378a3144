__all__ = [
    "MerkleDagError",
    "EncodingError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "ObjectNotFound",
    "MalformedObject",
    "IntegrityError",
    "UnrecognizedSourceNode",
]


class MerkleDagError(Exception):
    """Base class for every error raised by merkledag."""


class EncodingError(MerkleDagError):
    pass


class StoreError(MerkleDagError):
    def __init__(self, message: str, *, key: bytes | None = None):
        super().__init__(message)
        self.key = key


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class ObjectNotFound(StoreReadError):
    """The store holds no value for the requested hash."""


class MalformedObject(MerkleDagError):
    """A stored value does not decode into the object its parent announced."""


class IntegrityError(MalformedObject):
    def __init__(self, expected: bytes, actual: bytes):
        super().__init__(f"Hash mismatch: expected {expected.hex()}, got {actual.hex()}")
        self.expected = expected
        self.actual = actual


class UnrecognizedSourceNode(MerkleDagError):
    def __init__(self, node):
        super().__init__(f"Unrecognized source node: {node!r}")
        self.node = node
