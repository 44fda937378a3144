import logging
import pathlib
from dataclasses import dataclass, field
from os import PathLike

__all__ = ["File", "Directory", "Node", "from_path"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class File:
    """A file of the source tree.

    ``content`` is either the bytes themselves or the path they are read
    from when the builder asks for them.
    """

    name: str
    content: bytes | pathlib.Path

    @property
    def size(self) -> int:
        if isinstance(self.content, pathlib.Path):
            return self.content.stat().st_size
        return len(self.content)

    def read_bytes(self) -> bytes:
        if isinstance(self.content, pathlib.Path):
            return self.content.read_bytes()
        return bytes(self.content)


@dataclass(frozen=True, kw_only=True)
class Directory:
    name: str
    children: tuple["Node", ...] = field(default_factory=tuple)

    @property
    def size(self) -> int:
        return sum(child.size for child in self.children)

    def __iter__(self):
        return iter(self.children)


Node = File | Directory


def from_path(
    path: PathLike | str,
    *,
    ignore_patterns: frozenset[str] = frozenset(),
) -> Node:
    """Snapshot the file or directory at *path* as a source tree.

    Directory entries are sorted by name so the same tree always yields the
    same root hash. Symlinks and entries named in *ignore_patterns* are left out.
    """
    path = pathlib.Path(path)
    if path.is_file():
        return File(name=path.name, content=path)
    if not path.is_dir():
        raise FileNotFoundError(f"No such file or directory: {path}")

    children = []
    for entry in sorted(path.iterdir()):
        if entry.name in ignore_patterns or entry.is_symlink():
            logger.debug("Skipping %s", entry)
            continue
        if entry.is_file() or entry.is_dir():
            children.append(from_path(entry, ignore_patterns=ignore_patterns))
    return Directory(name=path.name, children=tuple(children))
