import io

import httpx
import pytest

from docextract.exceptions import ExtractionError
from docextract.extraction import ExtractionClient


def make_client(handler):
    return ExtractionClient(
        "http://tika.test/tika",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_extract_sends_bytes_and_content_type():
    captured = {}

    def handler(request):
        captured["method"] = request.method
        captured["body"] = request.read()
        captured["headers"] = request.headers
        return httpx.Response(200, text="hello text")

    text = make_client(handler).extract(io.BytesIO(b"0123456789"), "text/plain")

    assert text == "hello text"
    assert captured["method"] == "PUT"
    assert captured["body"] == b"0123456789"
    assert captured["headers"]["content-type"] == "text/plain"
    assert captured["headers"]["accept"] == "text/plain"


def test_extract_error_status_raises():
    def handler(request):
        return httpx.Response(422, text="Unprocessable")

    with pytest.raises(ExtractionError) as excinfo:
        make_client(handler).extract(io.BytesIO(b"data"), "application/pdf")
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


def test_extract_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ExtractionError) as excinfo:
        make_client(handler).extract(io.BytesIO(b"data"), "application/pdf")
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
