"""Exceptions raised by the crawler and its helpers."""

from __future__ import annotations


class GleanerError(Exception):
    """Base class of every error this package raises on purpose."""

    default_message = "crawler error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoPatternError(GleanerError, ValueError):
    """A limit rule was given neither a domain regexp nor a domain glob."""

    default_message = "No pattern defined in LimitRule"


class AbortedAfterHeadersError(GleanerError):
    """The download was cancelled after the response headers arrived."""

    default_message = "Aborted after receiving response headers"


class EmptyProxyURLError(GleanerError, ValueError):
    """A proxy switcher was created without any proxy URL."""

    default_message = "Proxy URL list is empty"


class QueueFullError(GleanerError):
    """The request queue has reached its maximum size."""

    default_message = "Queue MaxSize reached"