"""The HTTP request a collector makes, and its serialised form."""

from __future__ import annotations

import base64
import json
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlsplit, urlunsplit

from requests.structures import CaseInsensitiveDict

_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp", "file"})
_EDGE_CHARS = "".join(chr(c) for c in range(0x21))
_INNER_WHITESPACE = re.compile(r"[\t\n\r]")


def _normalise(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme in _SPECIAL_SCHEMES and parts.netloc and not parts.path:
        parts = parts._replace(path="/")
    return urlunsplit(parts)


def _read_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    read = getattr(body, "read", None)
    if callable(read):
        data = read()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)
    raise TypeError(f"unsupported request body: {type(body).__name__}")


@dataclass
class Request:
    """A request made by a collector, carrying context between callbacks."""

    url: str = ""
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    host: str = ""
    ctx: dict[str, Any] | None = None
    depth: int = 0
    method: str = "GET"
    body: Any = None
    response_character_encoding: str = ""
    id: int = 0
    collector: Any = None
    aborted: bool = False
    base_url: str | None = None
    proxy_url: str = ""

    def abort(self) -> None:
        """Cancel the request when called from a request callback."""
        self.aborted = True

    def absolute_url(self, url: str) -> str:
        """Resolve a URL chunk against the page.

        Returns an empty string for fragments and for URLs that cannot
        be parsed.
        """
        if url.startswith("#"):
            return ""
        base = self.base_url if self.base_url is not None else self.url
        cleaned = _INNER_WHITESPACE.sub("", url.strip(_EDGE_CHARS))
        try:
            return _normalise(urljoin(base, cleaned))
        except ValueError:
            return ""

    def marshal(self) -> bytes:
        """Serialise the request as JSON."""
        body = _read_body(self.body)
        if body is not None:
            self.body = body
        headers = None
        if self.headers is not None:
            headers = {key: [value] for key, value in self.headers.items()}
        document = {
            "URL": self.url,
            "Method": self.method,
            "Depth": self.depth,
            "Body": base64.b64encode(body).decode("ascii") if body is not None else None,
            "ID": self.id,
            "Ctx": dict(self.ctx or {}),
            "Headers": headers,
            "Host": self.host,
        }
        return json.dumps(document).encode("utf-8")

    @classmethod
    def unmarshal(cls, data: bytes | str) -> Request:
        """Rebuild a request from the output of :meth:`marshal`."""
        document = json.loads(data)
        if not isinstance(document, dict):
            raise ValueError("serialised request must be a JSON object")
        raw_body = document.get("Body")
        headers = CaseInsensitiveDict()
        for key, values in (document.get("Headers") or {}).items():
            if isinstance(values, list):
                headers[key] = ", ".join(str(v) for v in values)
            else:
                headers[key] = str(values)
        return cls(
            url=document.get("URL", ""),
            method=document.get("Method", "GET") or "GET",
            depth=int(document.get("Depth", 0) or 0),
            body=base64.b64decode(raw_body) if raw_body is not None else None,
            id=int(document.get("ID", 0) or 0),
            ctx=dict(document.get("Ctx") or {}),
            headers=headers,
            host=document.get("Host", "") or "",
        )