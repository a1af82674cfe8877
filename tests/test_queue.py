import random
import threading
from collections import Counter
from urllib.parse import urlsplit

import pytest

from gleaner.errors import QueueFullError
from gleaner.queue import InMemoryQueueStorage, Queue
from gleaner.request import Request


class _Job:
    def __init__(self, request, on_do):
        self.request = request
        self.on_do = on_do

    def do(self):
        self.on_do(self.request)


class _Collector:
    def __init__(self, on_do):
        self.on_do = on_do

    def unmarshal_request(self, data):
        return _Job(Request.unmarshal(data), self.on_do)


def test_storage_is_fifo():
    storage = InMemoryQueueStorage(10)
    storage.init()
    storage.add_request(b"a")
    storage.add_request(b"b")
    assert storage.queue_size() == 2
    assert storage.get_request() == b"a"
    assert storage.get_request() == b"b"
    assert storage.get_request() is None
    assert storage.queue_size() == 0


def test_storage_rejects_beyond_max_size():
    storage = InMemoryQueueStorage(2)
    storage.init()
    storage.add_request(b"a")
    storage.add_request(b"b")
    with pytest.raises(QueueFullError):
        storage.add_request(b"c")
    assert storage.queue_size() == 2


def test_storage_without_limit():
    storage = InMemoryQueueStorage(0)
    storage.init()
    for item in range(50):
        storage.add_request(str(item).encode())
    assert storage.queue_size() == 50


def test_new_queue_is_empty():
    q = Queue(2)
    assert q.is_empty()
    assert q.size() == 0


def test_add_url_stores_get_request():
    storage = InMemoryQueueStorage(10)
    q = Queue(1, storage)
    q.add_url("http://example.com")
    assert q.size() == 1
    request = Request.unmarshal(storage.get_request())
    assert request.url == "http://example.com/"
    assert request.method == "GET"


def test_add_url_without_scheme_raises():
    q = Queue(1)
    with pytest.raises(ValueError):
        q.add_url("just/a/path")
    assert q.is_empty()


def test_add_request_stores_marshalled_request():
    storage = InMemoryQueueStorage(10)
    q = Queue(1, storage)
    q.add_request(Request(url="http://example.com/form", method="POST", body=b"a=1", depth=2))
    request = Request.unmarshal(storage.get_request())
    assert request.method == "POST"
    assert request.body == b"a=1"
    assert request.depth == 2


def test_run_consumes_every_request():
    rng = random.Random(12387123712321232)
    lock = threading.Lock()
    counts = Counter()
    storage = InMemoryQueueStorage(100000)
    q = Queue(10, storage)

    def put():
        with lock:
            delay = rng.randrange(50)
            counts["items"] += 1
        q.add_url(f"http://127.0.0.1/delay?t={delay}us")

    for _ in range(3000):
        put()
        storage.add_request(b"error request")

    def on_do(request):
        with lock:
            counts["requests"] += 1
            if urlsplit(request.url).path == "/delay":
                counts["success"] += 1
            else:
                counts["failure"] += 1
            toss = rng.randrange(2) == 0
        if toss:
            put()

    q.run(_Collector(on_do))
    assert counts["items"] == counts["requests"]
    assert counts["success"] + counts["failure"] == counts["requests"]
    assert counts["failure"] == 0
    assert q.is_empty()


def test_add_request_during_run_is_consumed():
    executed = []
    lock = threading.Lock()
    q = Queue(2)

    def on_do(request):
        with lock:
            executed.append(request.url)
        if request.url.endswith("/first"):
            q.add_request(Request(url="http://example.com/second"))

    q.add_url("http://example.com/first")
    q.run(_Collector(on_do))
    assert sorted(executed) == ["http://example.com/first", "http://example.com/second"]
    assert q.is_empty()


def test_stop_leaves_remaining_requests():
    q = Queue(1)
    for item in range(5):
        q.add_url(f"http://example.com/{item}")
    q.run(_Collector(lambda request: q.stop()))
    assert 3 <= q.size() <= 4


def test_run_needs_a_thread():
    q = Queue(0)
    q.add_url("http://example.com/")
    with pytest.raises(ValueError):
        q.run(_Collector(lambda request: None))
    assert q.size() == 1