"""The HTTP response a collector receives."""

from __future__ import annotations

import codecs
import os
import re
from dataclasses import dataclass, field
from email.message import Message
from email.utils import collapse_rfc2231_value
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from charset_normalizer import from_bytes
from requests.structures import CaseInsensitiveDict

from gleaner.request import Request

_NON_TEXT_TYPES = ("image/", "video/", "audio/", "font/")
_WEB_ALIASES = {
    "iso-8859-1": "cp1252",
    "iso8859-1": "cp1252",
    "latin1": "cp1252",
    "latin-1": "cp1252",
    "l1": "cp1252",
    "ascii": "cp1252",
    "us-ascii": "cp1252",
}
_UNSAFE = re.compile(r"[^A-Za-z0-9._]+")


def sanitize_file_name(name: str) -> str:
    """Turn an arbitrary string into a safe file name with an extension."""
    stem, ext = os.path.splitext(name)
    clean_stem = _UNSAFE.sub("_", stem.replace("-", "_")).strip("_.")
    clean_ext = re.sub(r"[^A-Za-z0-9]", "", ext[1:]).lower()
    return f"{clean_stem}.{clean_ext or 'unknown'}"


def _header_param(value: str, header: str, param: str) -> str | None:
    message = Message()
    message[header] = value
    found = message.get_param(param, header=header)
    if found is None:
        return None
    return collapse_rfc2231_value(found)


def _transcode(body: bytes, label: str) -> bytes:
    label = label.strip().strip("\"'").lower()
    codec = codecs.lookup(_WEB_ALIASES.get(label, label))
    return body.decode(codec.name, errors="replace").encode("utf-8")


@dataclass
class Response:
    """A response received by a collector."""

    status_code: int = 0
    body: bytes = b""
    ctx: dict[str, Any] | None = None
    request: Request | None = None
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    trace: Any = None

    def save(self, file_name: str | os.PathLike[str]) -> None:
        """Write the body to a file."""
        Path(file_name).write_bytes(self.body)

    def file_name(self) -> str:
        """Return a sanitised file name from Content-Disposition or the URL."""
        disposition = (self.headers or {}).get("Content-Disposition", "")
        if disposition:
            name = _header_param(disposition, "content-disposition", "filename")
            if name:
                return sanitize_file_name(name)
        parts = urlsplit(self.request.url if self.request is not None else "")
        if parts.query:
            return sanitize_file_name(f"{parts.path}_{parts.query}")
        return sanitize_file_name(parts.path.removeprefix("/"))

    def fix_charset(self, detect_charset: bool = False, default_encoding: str = "") -> None:
        """Convert the body to UTF-8.

        ``default_encoding`` overrides everything else; otherwise the
        charset comes from Content-Type or, if ``detect_charset`` is set,
        from the body itself. Raises LookupError for unknown charsets.
        """
        if not self.body:
            return
        if default_encoding:
            self.body = _transcode(self.body, default_encoding)
            return
        content_type = (self.headers or {}).get("Content-Type", "").lower()
        if any(kind in content_type for kind in _NON_TEXT_TYPES):
            return
        if "charset" not in content_type:
            if not detect_charset:
                return
            best = from_bytes(self.body).best()
            if best is None:
                raise ValueError("character encoding could not be detected")
            content_type = "text/plain; charset=" + best.encoding
        if "utf-8" in content_type or "utf8" in content_type:
            return
        label = _header_param(content_type, "content-type", "charset")
        if not label:
            return
        if codecs.lookup(_WEB_ALIASES.get(label, label)).name == "utf-8":
            return
        self.body = _transcode(self.body, label)