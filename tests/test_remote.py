import httpx
import pytest

from merkledag.models import (
    HttpStore,
    MerkleDag,
    ObjectNotFound,
    StoreReadError,
    StoreWriteError,
    build,
    resolve,
)

BASE_URL = "http://objects.test/dag"


class ObjectServer:
    def __init__(self):
        self.objects = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        name = request.url.path.rsplit("/", 1)[-1]
        match request.method:
            case "HEAD" | "GET":
                if name not in self.objects:
                    return httpx.Response(404)
                content = self.objects[name] if request.method == "GET" else b""
                return httpx.Response(200, content=content)
            case "PUT":
                self.objects[name] = request.read()
                return httpx.Response(201)
        return httpx.Response(405)


@pytest.fixture
def server():
    return ObjectServer()


@pytest.fixture
def http_store(server):
    with HttpStore(BASE_URL, httpx.Client(transport=httpx.MockTransport(server))) as store:
        yield store


def failing_store(status_code):
    transport = httpx.MockTransport(lambda request: httpx.Response(status_code))
    return HttpStore(BASE_URL, httpx.Client(transport=transport))


class TestHttpStore:
    def test_object_url(self):
        store = HttpStore(BASE_URL + "/")
        assert store.object_url(b"\xab\xcd") == f"{BASE_URL}/objects/abcd"
        store.close()

    def test_put_get(self, http_store, server):
        http_store.put(b"\x01", b"payload")
        assert http_store.has(b"\x01")
        assert http_store.get(b"\x01") == b"payload"
        assert server.requests[0] == ("PUT", "/dag/objects/01")

    def test_missing(self, http_store):
        assert not http_store.has(b"\x02")
        with pytest.raises(ObjectNotFound):
            http_store.get(b"\x02")

    def test_round_trip(self, http_store, hello_tree):
        root_hash = build(http_store, hello_tree)
        assert resolve(http_store, root_hash, "/hello.txt") == b"abcdefghij"

    def test_rebuild_uploads_nothing(self, http_store, server, hello_tree):
        dag = MerkleDag(http_store)
        build(dag.store, hello_tree)
        server.requests.clear()
        build(dag.store, hello_tree)
        assert [method for method, _path in server.requests] == ["HEAD", "HEAD"]

    def test_read_errors(self):
        store = failing_store(500)
        with pytest.raises(StoreReadError):
            store.has(b"\x01")
        with pytest.raises(StoreReadError):
            store.get(b"\x01")

    def test_write_error(self):
        with pytest.raises(StoreWriteError):
            failing_store(503).put(b"\x01", b"payload")
