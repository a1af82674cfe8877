"""A request queue consumed by a collector in several threads."""

from __future__ import annotations

import logging
import queue as _stdqueue
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from gleaner.errors import QueueFullError
from gleaner.request import Request

log = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 100000
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp", "file"})


def _parse_url(url: str) -> str:
    parts = urlsplit(url.strip())
    if not parts.scheme:
        raise ValueError(f"URL has no scheme: {url!r}")
    if parts.scheme in _SPECIAL_SCHEMES and parts.netloc and not parts.path:
        parts = parts._replace(path="/")
    return urlunsplit(parts)


class QueueStorage(ABC):
    """Backend holding serialised requests; must be thread safe."""

    @abstractmethod
    def init(self) -> None:
        """Prepare the storage for use."""

    @abstractmethod
    def add_request(self, data: bytes) -> None:
        """Append a serialised request."""

    @abstractmethod
    def get_request(self) -> bytes | None:
        """Pop the next serialised request, or return None if empty."""

    @abstractmethod
    def queue_size(self) -> int:
        """Return the number of stored requests."""


class InMemoryQueueStorage(QueueStorage):
    """Keeps serialised requests in memory, discarding them beyond ``max_size``.

    A ``max_size`` of zero or less means no limit.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        self.max_size = max_size
        self._items: deque[bytes] = deque()
        self._lock = threading.Lock()

    def init(self) -> None:
        self._lock = threading.Lock()

    def add_request(self, data: bytes) -> None:
        with self._lock:
            if self.max_size > 0 and len(self._items) >= self.max_size:
                raise QueueFullError()
            self._items.append(data)

    def get_request(self) -> bytes | None:
        with self._lock:
            return self._items.popleft() if self._items else None

    def queue_size(self) -> int:
        with self._lock:
            return len(self._items)


class Queue:
    """Feeds stored requests to a collector using ``threads`` workers.

    The collector passed to :meth:`run` must provide
    ``unmarshal_request(data)`` returning an object with a ``do()`` method.
    """

    def __init__(self, threads: int, storage: QueueStorage | None = None) -> None:
        if storage is None:
            storage = InMemoryQueueStorage(DEFAULT_MAX_SIZE)
        storage.init()
        self.threads = threads
        self._storage = storage
        self._cond = threading.Condition()
        self._running = True
        self._in_run = False
        self._wakes = 0
        self._active = 0

    def is_empty(self) -> bool:
        """Return whether no request is stored."""
        return self.size() == 0

    def add_url(self, url: str) -> None:
        """Store a GET request for ``url``; raise ValueError for bad URLs."""
        request = Request(url=_parse_url(url), method="GET")
        self._storage.add_request(request.marshal())

    def add_request(self, request: Request) -> None:
        """Store a request, waking a running consumer loop."""
        self._storage.add_request(request.marshal())
        with self._cond:
            if self._in_run:
                self._wakes += 1
                self._cond.notify_all()

    def size(self) -> int:
        """Return the number of stored requests."""
        return self._storage.queue_size()

    def run(self, collector: Any) -> None:
        """Consume requests until the queue is empty and idle, or stopped."""
        if self.threads < 1:
            raise ValueError("a queue needs at least one thread")
        with self._cond:
            if self._in_run:
                raise RuntimeError("cannot call duplicate Queue.run")
            self._in_run = True
            self._running = True
            self._wakes = 0
            self._active = 0
        jobs: _stdqueue.SimpleQueue[Any] = _stdqueue.SimpleQueue()
        workers = [
            threading.Thread(target=self._worker, args=(jobs,), daemon=True)
            for _ in range(self.threads)
        ]
        for worker in workers:
            worker.start()
        try:
            self._loop(collector, jobs)
        finally:
            for _ in workers:
                jobs.put(None)
            with self._cond:
                self._in_run = False

    def stop(self) -> None:
        """Make a running queue return without waiting for stored requests."""
        with self._cond:
            self._running = False
            self._cond.notify_all()

    def _loop(self, collector: Any, jobs: _stdqueue.SimpleQueue[Any]) -> None:
        while True:
            size = self._storage.queue_size()
            with self._cond:
                if (size == 0 and self._active == 0) or not self._running:
                    return
            if size > 0:
                try:
                    job = self._load_request(collector)
                except Exception:  # noqa: BLE001 - undecodable entries are dropped
                    continue
                with self._cond:
                    self._cond.wait_for(lambda: self._active < self.threads)
                    self._active += 1
                    self._wakes = 0
                jobs.put(job)
            else:
                with self._cond:
                    self._cond.wait_for(
                        lambda: self._wakes > 0 or self._active == 0 or not self._running
                    )
                    self._wakes = 0

    def _worker(self, jobs: _stdqueue.SimpleQueue[Any]) -> None:
        while (job := jobs.get()) is not None:
            try:
                job.do()
            except Exception:  # noqa: BLE001 - failures surface through collector callbacks
                log.debug("queued request failed", exc_info=True)
            with self._cond:
                self._active -= 1
                self._cond.notify_all()

    def _load_request(self, collector: Any) -> Any:
        data = self._storage.get_request()
        if data is None:
            raise LookupError("queue storage is empty")
        return collector.unmarshal_request(bytes(data))