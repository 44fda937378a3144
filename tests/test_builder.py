import hashlib

import pytest

from merkledag.models import (
    CHUNK_SIZE,
    MAX_LISTLINE,
    Builder,
    Directory,
    EncodingError,
    File,
    Kind,
    UnrecognizedSourceNode,
    build,
    decode_object,
    encode_object,
    tree_height,
)
from merkledag.models.hashing import compute_hash

HELLO_BLOB = "c3a56feff10206820accf38d21ec3e1a88789e23b5b55090731248aa8f42bfad"
HELLO_ROOT = "97afed26b058d5dd8db516baa98f5a2dff1c7eca5a1413549cf6aaccbb56ebbf"


def walk(store, key, kind, hasher=hashlib.sha256):
    """Yield every object reachable from *key*, checking hashes, tags and sizes."""
    value = store.get(key)
    obj = decode_object(value, kind)
    assert compute_hash(encode_object(obj), hasher=hasher) == key
    if kind is not Kind.BLOB:
        assert encode_object(obj) == value
        assert len(obj.data) == 4 * len(obj.links)
        for index, link in enumerate(obj.links):
            assert obj.data[4 * index : 4 * index + 4] == link.kind.tag
            children = list(walk(store, link.hash, link.kind, hasher))
            assert children[-1].size == link.size
            yield from children
    yield obj


def single_file(data, name="file.bin"):
    return Directory(name="root", children=(File(name=name, content=data),))


class TestTreeHeight:
    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, 0),
            (1, 0),
            (CHUNK_SIZE, 0),
            (CHUNK_SIZE + 1, 1),
            (CHUNK_SIZE * MAX_LISTLINE, 1),
            (CHUNK_SIZE * MAX_LISTLINE + 1, 2),
            (CHUNK_SIZE * MAX_LISTLINE**2, 2),
            (CHUNK_SIZE * MAX_LISTLINE**2 + 1, 3),
        ],
    )
    def test_default_limits(self, size, expected):
        assert tree_height(size) == expected

    @pytest.mark.parametrize(
        "size, expected",
        [(4, 0), (5, 1), (8, 1), (9, 2), (16, 2), (17, 3)],
    )
    def test_small_limits(self, size, expected):
        assert tree_height(size, chunk_size=4, max_links=2) == expected

    @pytest.mark.parametrize("size", [CHUNK_SIZE + 1, CHUNK_SIZE * 5000, CHUNK_SIZE * MAX_LISTLINE**2 + 1])
    def test_height_is_minimal(self, size):
        chunks = -(-size // CHUNK_SIZE)
        height = tree_height(size)
        assert MAX_LISTLINE**height >= chunks
        assert MAX_LISTLINE ** (height - 1) < chunks


class TestBuilder:
    def test_small_file(self, store, hello_tree):
        root_hash = build(store, hello_tree)
        assert root_hash.hex() == HELLO_ROOT
        assert store.get(bytes.fromhex(HELLO_BLOB)) == b"abcdefghij"
        assert len(store) == 2

    def test_root_hash_is_store_key(self, store, hello_tree):
        root_hash = build(store, hello_tree)
        assert compute_hash(store.get(root_hash)) == root_hash

    def test_single_file_node(self, store):
        root_hash = build(store, File(name="hello.txt", content=b"abcdefghij"))
        assert root_hash.hex() == HELLO_BLOB

    def test_chunk_boundary_plus_one(self, store):
        data = b"A" * (CHUNK_SIZE + 1)
        builder = Builder(store)
        root_hash = builder.build(single_file(data))

        (link,) = decode_object(store.get(root_hash), Kind.TREE).links
        assert link.kind is Kind.LIST
        assert link.size == len(data)
        file_obj = decode_object(store.get(link.hash), Kind.LIST)
        assert [child.size for child in file_obj.links] == [CHUNK_SIZE, 1]
        assert file_obj.data == b"blobblob"
        assert builder.stats.objects_written == 4

    def test_exact_chunk_size_is_a_blob(self, store):
        root_hash = build(store, single_file(b"B" * CHUNK_SIZE))
        (link,) = decode_object(store.get(root_hash), Kind.TREE).links
        assert link.kind is Kind.BLOB
        assert store.get(link.hash) == b"B" * CHUNK_SIZE

    def test_two_levels(self, store):
        root_hash = build(store, single_file(b"0123456789"), chunk_size=4, max_links=2)
        (link,) = decode_object(store.get(root_hash), Kind.TREE).links
        top = decode_object(store.get(link.hash), Kind.LIST)
        assert top.tags == (Kind.LIST, Kind.BLOB)
        assert [child.size for child in top.links] == [8, 2]

        left = decode_object(store.get(top.links[0].hash), Kind.LIST)
        assert [store.get(child.hash) for child in left.links] == [b"0123", b"4567"]
        assert store.get(top.links[1].hash) == b"89"

    def test_exact_multiple_of_chunk_size(self, store):
        root_hash = build(store, single_file(b"01234567"), chunk_size=4, max_links=2)
        (link,) = decode_object(store.get(root_hash), Kind.TREE).links
        obj = decode_object(store.get(link.hash), Kind.LIST)
        assert [store.get(child.hash) for child in obj.links] == [b"0123", b"4567"]

    @pytest.mark.parametrize("size", [1, 7, 8, 9, 63, 64, 65, 500])
    def test_tags_match_children(self, store, size):
        data = bytes(i % 251 for i in range(size))
        tree = Directory(
            name="root",
            children=(
                File(name="data.bin", content=data),
                Directory(name="sub", children=(File(name="copy.bin", content=data),)),
                Directory(name="empty"),
            ),
        )
        root_hash = build(store, tree, chunk_size=4, max_links=3)
        objects = list(walk(store, root_hash, Kind.TREE))
        assert objects[-1].size == 2 * size

    def test_empty_directory(self, store):
        root_hash = build(store, Directory(name="root"))
        assert store.get(root_hash) == b'{"Links":null,"Data":null}'
        assert decode_object(store.get(root_hash), Kind.TREE).links == ()

    def test_directory_order_is_kept(self, store):
        tree = Directory(
            name="root",
            children=(File(name="b", content=b"2"), File(name="a", content=b"1")),
        )
        root = decode_object(store.get(build(store, tree)), Kind.TREE)
        assert [link.name for link in root.links] == ["b", "a"]

    def test_directory_sizes(self, store):
        tree = Directory(
            name="root",
            children=(
                File(name="a", content=b"123"),
                Directory(name="d", children=(File(name="b", content=b"4567"),)),
            ),
        )
        root = decode_object(store.get(build(store, tree)), Kind.TREE)
        assert [(link.name, link.size, link.kind) for link in root.links] == [
            ("a", 3, Kind.BLOB),
            ("d", 4, Kind.TREE),
        ]

    def test_rebuild_is_deterministic_and_writes_nothing(self, store):
        tree = single_file(bytes(range(256)) * 10)
        first = build(store, tree, chunk_size=64, max_links=4)
        writes = store.writes

        builder = Builder(store, chunk_size=64, max_links=4)
        second = builder.build(tree)
        assert second == first
        assert store.writes == writes
        assert builder.stats.objects_written == 0
        assert builder.stats.objects_skipped > 0

    def test_identical_content_is_stored_once(self, store):
        tree = Directory(
            name="root",
            children=(
                File(name="a.txt", content=b"same"),
                File(name="b.txt", content=b"same"),
                Directory(name="sub", children=(File(name="c.txt", content=b"same"),)),
            ),
        )
        build(store, tree)
        # one blob, the sub tree and the root tree
        assert len(store) == 3

    def test_hash_algorithm_is_injected(self, store, hello_tree):
        root_hash = build(store, hello_tree, hasher=hashlib.sha1)
        assert len(root_hash) == 20
        list(walk(store, root_hash, Kind.TREE, hasher=hashlib.sha1))

    def test_file_from_disk(self, store, tmp_path):
        path = tmp_path / "hello.txt"
        path.write_bytes(b"abcdefghij")
        tree = Directory(name="root", children=(File(name="hello.txt", content=path),))
        assert build(store, tree).hex() == HELLO_ROOT

    @pytest.mark.parametrize("node", [None, "hello.txt", object()])
    def test_unrecognized_node(self, store, node):
        with pytest.raises(UnrecognizedSourceNode):
            build(store, node)

    @pytest.mark.parametrize(
        "child",
        [File(name="", content=b"1"), Directory(name="")],
    )
    def test_unnamed_entry(self, store, child):
        with pytest.raises(EncodingError):
            build(store, Directory(name="root", children=(child,)))

    def test_unrecognized_child(self, store):
        with pytest.raises(UnrecognizedSourceNode):
            build(store, Directory(name="root", children=("nope",)))

    @pytest.mark.parametrize("options", [{"chunk_size": 0}, {"max_links": 1}])
    def test_invalid_limits(self, store, options):
        with pytest.raises(ValueError):
            Builder(store, **options)
