import hashlib
from functools import partial
from typing import Any, Callable

__all__ = ["DEFAULT_HASH", "Hasher", "compute_hash", "get_hasher"]

DEFAULT_HASH = "sha256"

Hasher = Callable[..., Any]


def compute_hash(data: str | bytes, *, hasher: Hasher = hashlib.sha256) -> bytes:
    if isinstance(data, str):
        data = data.encode()
    hash_object = hasher(data)
    return hash_object.digest()


def get_hasher(name: str) -> Hasher:
    """Return a hashlib-style constructor for the algorithm called *name*."""
    name = name.lower().replace("-", "_")
    if name not in hashlib.algorithms_available:
        raise ValueError(f"Unknown hash algorithm: {name}")
    if name.startswith("shake_"):
        # Variable length digests have no default size.
        raise ValueError(f"Hash algorithm has no fixed digest size: {name}")
    return getattr(hashlib, name, None) or partial(hashlib.new, name)
