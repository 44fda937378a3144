import logging
import os
import pathlib
from argparse import ArgumentParser, ArgumentTypeError

from merkledag.models.hashing import DEFAULT_HASH
from merkledag.models.objects import Kind
from merkledag.models.store import STORE_FOLDER


def hex_hash(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ArgumentTypeError(f"not a hex digest: {value!r}") from None


def get_parser():
    parser = ArgumentParser(prog="merkledag")
    parser.add_argument(
        "--store",
        type=pathlib.Path,
        default=pathlib.Path(os.environ.get("MERKLEDAG_STORE", STORE_FOLDER)),
        help="local object store folder",
    )
    parser.add_argument(
        "--remote",
        default=os.environ.get("MERKLEDAG_REMOTE"),
        help="use the HTTP object store at this URL instead of the local one",
    )
    parser.add_argument(
        "--hash",
        dest="hash_name",
        default=os.environ.get("MERKLEDAG_HASH", DEFAULT_HASH),
        help="hash algorithm",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command")

    # init
    _init_parser = subparsers.add_parser("init")

    # add
    add_parser = subparsers.add_parser("add")
    add_parser.add_argument("path", type=pathlib.Path)

    # cat
    cat_parser = subparsers.add_parser("cat")
    cat_parser.add_argument("root_hash", type=hex_hash)
    cat_parser.add_argument("path")
    cat_parser.add_argument(
        "--verify", action="store_true", help="check every object against its hash"
    )

    # ls
    ls_parser = subparsers.add_parser("ls")
    ls_parser.add_argument("root_hash", type=hex_hash)
    ls_parser.add_argument("path", nargs="?", default="")
    ls_parser.add_argument("--name-only", action="store_true")

    # cat-object
    cat_object_parser = subparsers.add_parser("cat-object")
    cat_object_parser.add_argument("hash_value", type=hex_hash)
    cat_object_parser.add_argument(
        "-k", "--kind", type=Kind, choices=list(Kind), default=Kind.TREE
    )

    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
