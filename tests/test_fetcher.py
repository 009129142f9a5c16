"""Tests for articleparser.fetcher - urllib-based retrieval (network mocked)."""

from __future__ import annotations

import gzip
import urllib.error
import zlib
from unittest.mock import MagicMock, patch

import pytest

from articleparser.errors import FetchError, RequestFailedError, TransportError
from articleparser.fetcher import Fetcher, FetchOptions, UrllibFetcher, fetch_bytes


def _make_mock_response(
    body: bytes = b"<html><body>ok</body></html>",
    encoding: str = "",
    status: int = 200,
) -> MagicMock:
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = body
    resp.headers = {"Content-Encoding": encoding} if encoding else {}
    resp.__enter__ = lambda s: s
    resp.__exit__ = MagicMock(return_value=False)
    return resp


class TestFetchBytes:
    def test_returns_raw_bytes(self):
        body = "<p>Café</p>".encode("latin-1")
        with patch("urllib.request.urlopen", return_value=_make_mock_response(body)):
            assert fetch_bytes("https://example.com/post") == body

    def test_gzip_decoded(self):
        body = gzip.compress(b"<p>zipped</p>")
        with patch("urllib.request.urlopen", return_value=_make_mock_response(body, "gzip")):
            assert fetch_bytes("https://example.com/post") == b"<p>zipped</p>"

    def test_deflate_decoded(self):
        body = zlib.compress(b"<p>deflated</p>")
        with patch("urllib.request.urlopen", return_value=_make_mock_response(body, "deflate")):
            assert fetch_bytes("https://example.com/post") == b"<p>deflated</p>"

    def test_corrupt_gzip_raises_transport_error(self):
        resp = _make_mock_response(b"definitely not gzip", "gzip")
        with patch("urllib.request.urlopen", return_value=resp), pytest.raises(TransportError):
            fetch_bytes("https://example.com/post")

    def test_default_headers_sent(self):
        with patch(
            "urllib.request.urlopen", return_value=_make_mock_response(),
        ) as mock_urlopen:
            fetch_bytes("https://example.com/post")
        req = mock_urlopen.call_args[0][0]
        assert "Firefox" in req.get_header("User-agent")
        assert req.get_header("Accept-encoding") == "gzip, deflate"
        assert mock_urlopen.call_args[1]["timeout"] == 30

    def test_custom_headers_and_user_agent(self):
        options = FetchOptions(
            headers={"X-Token": "abc"}, user_agent="TestBot/1.0", timeout=5,
        )
        with patch(
            "urllib.request.urlopen", return_value=_make_mock_response(),
        ) as mock_urlopen:
            fetch_bytes("https://example.com/post", options)
        req = mock_urlopen.call_args[0][0]
        assert req.get_header("User-agent") == "TestBot/1.0"
        assert req.get_header("X-token") == "abc"
        assert mock_urlopen.call_args[1]["timeout"] == 5

    def test_http_error_raises_request_failed(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.HTTPError(
                "https://example.com", 404, "Not Found", {}, None,
            ),
        ), pytest.raises(RequestFailedError) as exc_info:
            fetch_bytes("https://example.com/missing")
        assert exc_info.value.status == 404
        assert exc_info.value.url == "https://example.com/missing"
        assert isinstance(exc_info.value, FetchError)

    def test_delivered_response_body_returned(self):
        # urlopen raises HTTPError for 4xx/5xx, so any response it hands back is read
        resp = _make_mock_response(b"partial info", status=203)
        with patch("urllib.request.urlopen", return_value=resp):
            assert fetch_bytes("https://example.com/post") == b"partial info"

    def test_url_error_raises_transport_error(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.URLError("Connection refused"),
        ), pytest.raises(TransportError):
            fetch_bytes("https://example.com/post")

    def test_timeout_raises_transport_error(self):
        with patch("urllib.request.urlopen", side_effect=TimeoutError()), \
             pytest.raises(TransportError):
            fetch_bytes("https://example.com/post")

    def test_invalid_scheme(self):
        with pytest.raises(FetchError) as exc_info:
            fetch_bytes("ftp://example.com/file.txt")
        assert "scheme" in str(exc_info.value).lower()

    def test_no_retries_by_default(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.HTTPError("https://example.com", 503, "Busy", {}, None),
        ) as mock_urlopen, patch("time.sleep") as mock_sleep, pytest.raises(RequestFailedError):
            fetch_bytes("https://example.com/post")
        assert mock_urlopen.call_count == 1
        mock_sleep.assert_not_called()

    def test_retries_transient_status(self):
        responses = [
            urllib.error.HTTPError("https://example.com", 503, "Busy", {}, None),
            _make_mock_response(b"finally"),
        ]
        with patch("urllib.request.urlopen", side_effect=responses) as mock_urlopen, \
             patch("time.sleep") as mock_sleep:
            result = fetch_bytes("https://example.com/post", FetchOptions(max_retries=2))
        assert result == b"finally"
        assert mock_urlopen.call_count == 2
        mock_sleep.assert_called_once()

    def test_does_not_retry_client_error(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.HTTPError("https://example.com", 404, "Nope", {}, None),
        ) as mock_urlopen, patch("time.sleep"), pytest.raises(RequestFailedError):
            fetch_bytes("https://example.com/post", FetchOptions(max_retries=3))
        assert mock_urlopen.call_count == 1

    def test_retries_exhausted(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.URLError("down"),
        ) as mock_urlopen, patch("time.sleep"), pytest.raises(TransportError):
            fetch_bytes("https://example.com/post", FetchOptions(max_retries=2))
        assert mock_urlopen.call_count == 3


class TestFetchBytesProxy:
    def test_no_proxy_uses_urlopen(self):
        with patch(
            "urllib.request.urlopen", return_value=_make_mock_response(),
        ) as mock_urlopen, patch("urllib.request.build_opener") as mock_build:
            fetch_bytes("https://example.com/post")
        mock_urlopen.assert_called_once()
        mock_build.assert_not_called()

    def test_proxy_uses_opener(self):
        mock_opener = MagicMock()
        mock_opener.open.return_value = _make_mock_response()
        with patch("urllib.request.ProxyHandler") as mock_ph, \
             patch("urllib.request.build_opener", return_value=mock_opener), \
             patch("urllib.request.urlopen") as mock_urlopen:
            fetch_bytes("https://example.com/post", FetchOptions(proxy="http://p1:8080"))
        mock_ph.assert_called_once_with({"http": "http://p1:8080", "https": "http://p1:8080"})
        mock_opener.open.assert_called_once()
        mock_urlopen.assert_not_called()


class TestUrllibFetcher:
    def test_satisfies_protocol(self):
        assert isinstance(UrllibFetcher(), Fetcher)

    def test_uses_constructor_options(self):
        fetcher = UrllibFetcher(FetchOptions(user_agent="Custom/2.0"))
        with patch(
            "urllib.request.urlopen", return_value=_make_mock_response(b"x"),
        ) as mock_urlopen:
            assert fetcher.fetch("https://example.com/") == b"x"
        assert mock_urlopen.call_args[0][0].get_header("User-agent") == "Custom/2.0"
