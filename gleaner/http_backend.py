"""HTTP transport with per-domain limits and an on-disk response cache."""

from __future__ import annotations

import base64
import gzip
import hashlib
import json
import os
import random
import re
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from http.cookiejar import CookieJar
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from gleaner.errors import AbortedAfterHeadersError, NoPatternError
from gleaner.request import Request
from gleaner.response import Response

CheckHeaders = Callable[[Request, int, Any], bool]

DEFAULT_TIMEOUT = 10.0


def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob with ``*``, ``?``, ``[...]``, ``[!...]`` and ``{a,b}``."""
    out: list[str] = []
    depth = 0
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise ValueError(f"unexpected end of glob pattern: {pattern!r}")
            out.append(re.escape(escaped))
        elif char == "*":
            out.append(".*")
        elif char == "?":
            out.append(".")
        elif char == "[":
            body: list[str] = []
            for inner in chars:
                if inner == "]":
                    break
                body.append(inner)
            else:
                raise ValueError(f"unclosed character class in glob: {pattern!r}")
            text = "".join(body)
            negate = text.startswith("!")
            if negate:
                text = text[1:]
            if not text:
                raise ValueError(f"empty character class in glob: {pattern!r}")
            text = text.replace("\\", "\\\\").replace("^", "\\^").replace("[", "\\[")
            out.append("[" + ("^" if negate else "") + text + "]")
        elif char == "{":
            depth += 1
            out.append("(?:")
        elif char == "," and depth:
            out.append("|")
        elif char == "}" and depth:
            depth -= 1
            out.append(")")
        else:
            out.append(re.escape(char))
    if depth:
        raise ValueError(f"unclosed alternation in glob: {pattern!r}")
    return re.compile("".join(out), re.DOTALL)


@dataclass
class LimitRule:
    """Connection restrictions for domains matching a regexp or a glob.

    ``delay`` and ``random_delay`` are in seconds; ``parallelism`` caps the
    number of concurrent requests to matching domains.
    """

    domain_regexp: str = ""
    domain_glob: str = ""
    delay: float = 0.0
    random_delay: float = 0.0
    parallelism: int = 0
    _slots: threading.BoundedSemaphore | None = field(
        default=None, init=False, repr=False, compare=False
    )
    _regexp: re.Pattern[str] | None = field(
        default=None, init=False, repr=False, compare=False
    )
    _glob: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def init(self) -> None:
        """Compile the patterns; raise NoPatternError if none is given."""
        self._slots = threading.BoundedSemaphore(max(1, self.parallelism))
        has_pattern = False
        if self.domain_regexp:
            self._regexp = re.compile(self.domain_regexp)
            has_pattern = True
        if self.domain_glob:
            self._glob = _compile_glob(self.domain_glob)
            has_pattern = True
        if not has_pattern:
            raise NoPatternError()

    def match(self, domain: str) -> bool:
        """Return whether the rule applies to ``domain``."""
        if self._regexp is not None and self._regexp.search(domain):
            return True
        return self._glob is not None and self._glob.fullmatch(domain) is not None

    @contextmanager
    def _hold(self) -> Iterator[None]:
        if self._slots is None:
            raise RuntimeError("limit rule used before init()")
        self._slots.acquire()
        try:
            yield
        finally:
            wait = self.delay
            if self.random_delay:
                wait += random.uniform(0, self.random_delay)
            if wait > 0:
                time.sleep(wait)
            self._slots.release()


def _host(url: str) -> str:
    return urlsplit(url).netloc.rpartition("@")[2]


def _is_gzipped(headers: Any, url: str) -> bool:
    encoding = headers.get("Content-Encoding", "").lower()
    content_type = headers.get("Content-Type", "").lower()
    return (
        "gzip" in encoding
        or (not encoding and "gzip" in content_type)
        or urlsplit(url).path.lower().endswith(".xml.gz")
    )


def _load_cached(path: Path) -> Response | None:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
        return Response(
            status_code=int(document["status_code"]),
            body=base64.b64decode(document["body"]),
            headers=CaseInsensitiveDict(document["headers"]),
        )
    except (OSError, ValueError, KeyError, TypeError):
        return None


def _dump_cached(response: Response) -> str:
    return json.dumps(
        {
            "status_code": response.status_code,
            "body": base64.b64encode(response.body).decode("ascii"),
            "headers": dict(response.headers or {}),
        }
    )


class HTTPBackend:
    """Performs requests, honouring limit rules and an optional cache."""

    def __init__(self, jar: CookieJar | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.client = requests.Session()
        if jar is not None:
            self.client.cookies = jar
        self.timeout = timeout
        self.limit_rules: list[LimitRule] = []
        self._lock = threading.RLock()

    def get_matching_rule(self, domain: str) -> LimitRule | None:
        """Return the first rule matching ``domain``, or None."""
        with self._lock:
            return next((rule for rule in self.limit_rules if rule.match(domain)), None)

    def cache(
        self,
        request: Request,
        body_size: int,
        check_headers: CheckHeaders,
        cache_dir: str | os.PathLike[str] | None,
    ) -> Response:
        """Serve a GET request from ``cache_dir`` or fetch and store it.

        Responses with a status of 500 or above are never stored.
        """
        headers = request.headers if request.headers is not None else {}
        if not cache_dir or request.method != "GET" or headers.get("Cache-Control") == "no-cache":
            return self.do(request, body_size, check_headers)
        digest = hashlib.sha1(request.url.encode("utf-8")).hexdigest()
        directory = Path(cache_dir) / digest[:2]
        path = directory / digest
        cached = _load_cached(path) if path.is_file() else None
        if cached is not None:
            check_headers(request, cached.status_code, cached.headers)
            if cached.status_code < 500:
                return cached
        response = self.do(request, body_size, check_headers)
        if response.status_code >= 500:
            return response
        directory.mkdir(mode=0o750, parents=True, exist_ok=True)
        partial = path.with_name(path.name + "~")
        partial.write_text(_dump_cached(response), encoding="utf-8")
        os.replace(partial, path)
        return response

    def do(self, request: Request, body_size: int, check_headers: CheckHeaders) -> Response:
        """Perform ``request`` and return its response.

        ``body_size`` above zero caps the number of body bytes read.
        Raises AbortedAfterHeadersError if ``check_headers`` returns false.
        """
        rule = self.get_matching_rule(_host(request.url))
        with rule._hold() if rule is not None else nullcontext():
            return self._fetch(request, body_size, check_headers)

    def _fetch(self, request: Request, body_size: int, check_headers: CheckHeaders) -> Response:
        headers = CaseInsensitiveDict(request.headers or {})
        if "Accept-Encoding" not in headers:
            headers["Accept-Encoding"] = "gzip"
        if request.host:
            headers["Host"] = request.host
        proxies = None
        if request.proxy_url:
            proxies = {"http": request.proxy_url, "https": request.proxy_url}
        res = self.client.request(
            request.method or "GET",
            request.url,
            data=request.body,
            headers=dict(headers),
            proxies=proxies,
            timeout=self.timeout,
            stream=True,
        )
        with res:
            if res.url:
                request.url = res.url
            if res.request is not None and res.request.method:
                request.method = res.request.method
            if not check_headers(request, res.status_code, res.headers):
                raise AbortedAfterHeadersError()
            if body_size > 0:
                body = res.raw.read(body_size, decode_content=False)
            else:
                body = res.raw.read(decode_content=False)
            if _is_gzipped(res.headers, request.url):
                body = gzip.decompress(body)
            return Response(
                status_code=res.status_code,
                body=body,
                headers=CaseInsensitiveDict(res.headers),
            )

    def limit(self, rule: LimitRule) -> None:
        """Add a limit rule and initialise it."""
        with self._lock:
            self.limit_rules.append(rule)
        rule.init()

    def limits(self, rules: Iterable[LimitRule]) -> None:
        """Add several limit rules, stopping at the first invalid one."""
        for rule in rules:
            self.limit(rule)