"""Proxy selection for outgoing requests."""

from __future__ import annotations

import threading
from typing import Any
from urllib.parse import urlsplit

from gleaner.errors import EmptyProxyURLError


class _RoundRobinSwitcher:
    """Hands out proxy URLs in turn, one per request."""

    def __init__(self, proxy_urls: list[str]) -> None:
        self._proxy_urls = proxy_urls
        self._index = 0
        self._lock = threading.Lock()

    def __call__(self, request: Any = None) -> str:
        with self._lock:
            index = self._index
            self._index += 1
        proxy_url = self._proxy_urls[index % len(self._proxy_urls)]
        if request is not None and hasattr(request, "proxy_url"):
            request.proxy_url = proxy_url
        return proxy_url


def round_robin_proxy_switcher(*args: str) -> _RoundRobinSwitcher:
    """Return a callable that rotates through the given proxy URLs.

    Each call takes an optional request, records the chosen proxy on it
    and returns the proxy URL. Raises EmptyProxyURLError without URLs and
    ValueError for URLs that cannot be parsed.
    """
    if not args:
        raise EmptyProxyURLError()
    parsed = [urlsplit(url).geturl() for url in args]
    return _RoundRobinSwitcher(parsed)