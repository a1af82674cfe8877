"""Storage of visited request ids and cookies for a collector."""

from __future__ import annotations

import threading
import urllib.request
from abc import ABC, abstractmethod
from collections.abc import Iterable
from email.message import Message
from http.cookiejar import CookieJar
from http.cookies import Morsel, SimpleCookie
from typing import Any


def _url_string(url: Any) -> str:
    geturl = getattr(url, "geturl", None)
    return geturl() if callable(geturl) else str(url)


class _HeaderResponse:
    """The minimal response shape a cookie jar reads Set-Cookie headers from."""

    def __init__(self, set_cookie_lines: Iterable[str]) -> None:
        self._headers = Message()
        for line in set_cookie_lines:
            self._headers["Set-Cookie"] = line

    def info(self) -> Message:
        return self._headers


class Storage(ABC):
    """Keeps a collector's internal state: visited requests and cookies."""

    @abstractmethod
    def init(self) -> None:
        """Prepare the storage for use."""

    @abstractmethod
    def visited(self, request_id: int) -> None:
        """Record that the request with this id was visited."""

    @abstractmethod
    def is_visited(self, request_id: int) -> bool:
        """Return whether the request with this id was visited before."""

    @abstractmethod
    def cookies(self, url: Any) -> str:
        """Return the stored cookies for a URL, one per line."""

    @abstractmethod
    def set_cookies(self, url: Any, cookies: str) -> None:
        """Store cookies, one Set-Cookie value per line, for a URL."""


class InMemoryStorage(Storage):
    """Default storage keeping visited ids and cookies in memory only."""

    def __init__(self) -> None:
        self._visited: set[int] | None = None
        self._lock: threading.Lock | None = None
        self._jar: CookieJar | None = None
        self.init()

    def init(self) -> None:
        if self._visited is None:
            self._visited = set()
        if self._lock is None:
            self._lock = threading.Lock()
        if self._jar is None:
            self._jar = CookieJar()

    def visited(self, request_id: int) -> None:
        with self._lock:
            self._visited.add(request_id)

    def is_visited(self, request_id: int) -> bool:
        with self._lock:
            return request_id in self._visited

    def cookies(self, url: Any) -> str:
        request = urllib.request.Request(_url_string(url))
        self._jar.add_cookie_header(request)
        header = request.get_header("Cookie")
        if not header:
            return ""
        return "\n".join(part.strip() for part in header.split(";") if part.strip())

    def set_cookies(self, url: Any, cookies: str) -> None:
        lines = [line for line in cookies.split("\n") if line.strip()]
        request = urllib.request.Request(_url_string(url))
        self._jar.extract_cookies(_HeaderResponse(lines), request)

    def close(self) -> None:
        """Release what is no longer needed: expired cookies are dropped."""
        self._jar.clear_expired_cookies()

    def __enter__(self) -> InMemoryStorage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def stringify_cookies(cookies: Iterable[Morsel]) -> str:
    """Serialise cookies as Set-Cookie values, one per line."""
    return "\n".join(cookie.OutputString() for cookie in cookies)


def unstringify_cookies(text: str) -> list[Morsel]:
    """Parse Set-Cookie values, one per line, skipping unusable lines."""
    result: list[Morsel] = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        jar = SimpleCookie()
        try:
            jar.load(line)
        except Exception:  # noqa: BLE001 - malformed lines are skipped
            continue
        result.extend(jar.values())
    return result


def contains_cookie(cookies: Iterable[Morsel], name: str) -> bool:
    """Return whether a cookie with this name is among ``cookies``."""
    return any(cookie.key == name for cookie in cookies)