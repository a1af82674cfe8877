import pytest

from gleaner.request import Request
from gleaner.response import Response, sanitize_file_name


def _response(url="http://example.com/", body=b"", **headers):
    response = Response(status_code=200, body=body, request=Request(url=url))
    for key, value in headers.items():
        response.headers[key.replace("_", "-")] = value
    return response


def test_save_writes_body(tmp_path):
    target = tmp_path / "out.bin"
    _response(body=b"payload").save(target)
    assert target.read_bytes() == b"payload"


def test_file_name_from_content_disposition():
    response = _response(Content_Disposition='attachment; filename="report.pdf"')
    assert response.file_name() == "report.pdf"


def test_file_name_from_path():
    response = _response(url="http://example.com/files/report.pdf")
    assert response.file_name() == sanitize_file_name("files/report.pdf")
    assert "/" not in response.file_name()


def test_file_name_with_query_joins_path_and_query():
    response = _response(url="http://example.com/data?page=2")
    assert response.file_name() == sanitize_file_name("/data_page=2")


def test_sanitize_keeps_extension():
    assert sanitize_file_name("archive.tar").endswith(".tar")


def test_sanitize_without_extension_is_unknown():
    assert sanitize_file_name("README").endswith(".unknown")


def test_sanitize_removes_path_separators_and_dashes():
    result = sanitize_file_name("../etc/some-file.txt")
    assert "/" not in result
    assert "-" not in result
    assert result.endswith(".txt")


def test_fix_charset_default_encoding():
    response = _response(body=b"caf\xe9")
    response.fix_charset(False, "iso-8859-1")
    assert response.body == "café".encode("utf-8")


def test_fix_charset_from_content_type():
    response = _response(body="naïve".encode("cp1252"), Content_Type="text/html; charset=windows-1252")
    response.fix_charset(False, "")
    assert response.body.decode("utf-8") == "naïve"


def test_fix_charset_leaves_utf8_alone():
    body = "żółw".encode("utf-8")
    response = _response(body=body, Content_Type="text/html; charset=UTF-8")
    response.fix_charset(True, "")
    assert response.body == body


def test_fix_charset_skips_binary_types():
    body = b"\x89PNG\xff\xfe"
    response = _response(body=body, Content_Type="image/png")
    response.fix_charset(True, "")
    assert response.body == body


def test_fix_charset_without_charset_and_no_detection():
    body = b"caf\xe9"
    response = _response(body=body, Content_Type="text/html")
    response.fix_charset(False, "")
    assert response.body == body


def test_fix_charset_detection_yields_utf8():
    text = "Plain text with accents: café, naïve, résumé. " * 5
    response = _response(body=text.encode("utf-8"), Content_Type="text/html")
    response.fix_charset(True, "")
    assert response.body.decode("utf-8") == text


def test_fix_charset_empty_body_untouched():
    response = _response(body=b"", Content_Type="text/html; charset=windows-1252")
    response.fix_charset(True, "")
    assert response.body == b""


def test_fix_charset_unknown_encoding_raises():
    response = _response(body=b"abc")
    with pytest.raises(LookupError):
        response.fix_charset(False, "no-such-charset")