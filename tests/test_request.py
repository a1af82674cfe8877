import base64
import io
import json

import pytest

from gleaner.request import Request


def test_abort_marks_request():
    request = Request(url="http://example.com/")
    assert request.aborted is False
    request.abort()
    assert request.aborted is True


def test_absolute_url_fragment_is_empty():
    request = Request(url="http://example.com/page")
    assert request.absolute_url("#section") == ""


def test_absolute_url_resolves_relative_path():
    request = Request(url="http://example.com/a/b")
    assert request.absolute_url("c") == "http://example.com/a/c"


def test_absolute_url_keeps_absolute_url():
    request = Request(url="http://example.com/a/b")
    assert request.absolute_url("https://example.org/x?y=1") == "https://example.org/x?y=1"


def test_absolute_url_prefers_base_url():
    request = Request(url="http://example.com/a/b", base_url="http://example.org/root/")
    assert request.absolute_url("leaf").startswith("http://example.org/root/")


def test_absolute_url_strips_surrounding_whitespace():
    request = Request(url="http://example.com/a/b")
    assert request.absolute_url("  c\n") == request.absolute_url("c")


def test_absolute_url_unparseable_is_empty():
    request = Request(url="http://example.com/")
    assert request.absolute_url("http://[::1") == ""


def test_marshal_uses_documented_field_names():
    request = Request(url="http://example.com/", method="POST", body=b"hello")
    document = json.loads(request.marshal())
    assert set(document) == {"URL", "Method", "Depth", "Body", "ID", "Ctx", "Headers", "Host"}
    assert base64.b64decode(document["Body"]) == b"hello"


def test_marshal_without_body_is_null():
    document = json.loads(Request(url="http://example.com/").marshal())
    assert document["Body"] is None


def test_marshal_reads_file_like_body():
    request = Request(url="http://example.com/", body=io.BytesIO(b"stream"))
    restored = Request.unmarshal(request.marshal())
    assert restored.body == b"stream"


def test_round_trip():
    request = Request(
        url="http://example.com/path?q=1",
        method="POST",
        depth=3,
        body=b"data",
        id=42,
        ctx={"key": "value", "n": 7},
        host="example.com",
    )
    request.headers["X-Test"] = "yes"
    restored = Request.unmarshal(request.marshal())
    assert restored.url == request.url
    assert restored.method == "POST"
    assert restored.depth == 3
    assert restored.body == b"data"
    assert restored.id == 42
    assert restored.ctx == {"key": "value", "n": 7}
    assert restored.host == "example.com"
    assert restored.headers["x-test"] == "yes"


def test_unmarshal_rejects_invalid_json():
    with pytest.raises(ValueError):
        Request.unmarshal(b"error request")