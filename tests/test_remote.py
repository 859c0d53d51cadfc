"""Tests for benchdiff.remote — HTTP client for a benchdiff server."""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

import requests

from benchdiff.errors import NotFound, RemoteError, Unauthorized
from benchdiff.remote import RemoteClient
from benchdiff.verify import HmacVerifier


def _mock_response(status_code: int = 200, text: str = "", content: bytes = b"") -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.text = text
    resp.content = content or text.encode("utf-8")
    return resp


class TestRemoteClientInit(unittest.TestCase):
    def test_requires_url(self) -> None:
        with self.assertRaises(ValueError):
            RemoteClient("")

    def test_strips_trailing_slash(self) -> None:
        self.assertEqual(RemoteClient("http://bench.test/").base_url, "http://bench.test")


class TestUpload(unittest.TestCase):
    @patch("benchdiff.remote.requests.request")
    def test_upload_returns_id(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(201, "17\n")
        run_id = RemoteClient("http://bench.test").upload(" BenchmarkFoo 1 2 ns/op\n", "abc")
        self.assertEqual(run_id, 17)
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "http://bench.test/upload/"))
        self.assertEqual(kwargs["data"], {"commit": "abc"})
        self.assertEqual(kwargs["files"]["content"][1], b"BenchmarkFoo 1 2 ns/op")
        self.assertNotIn("signature", kwargs["headers"])
        self.assertIn("User-Agent", kwargs["headers"])

    @patch("benchdiff.remote.requests.request")
    def test_upload_signs_with_secret(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(201, "1")
        RemoteClient("http://bench.test", secret="s3cret").upload("BenchmarkFoo 1 2 ns/op", "abc")
        headers = mock_request.call_args.kwargs["headers"]
        self.assertEqual(
            headers["signature"], HmacVerifier.sign("BenchmarkFoo 1 2 ns/op", "s3cret")
        )

    @patch("benchdiff.remote.requests.request")
    def test_upload_unauthorized(self, mock_request: MagicMock) -> None:
        """A 401 from the server is a signature rejection, not a transport failure."""
        mock_request.return_value = _mock_response(401)
        with self.assertRaises(Unauthorized) as cm:
            RemoteClient("http://bench.test").upload("content here", "abc")
        self.assertEqual(cm.exception.kind, "unauthorized")

    @patch("benchdiff.remote.requests.request")
    def test_upload_bad_request(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(400, "commit is required")
        with self.assertRaises(RemoteError) as cm:
            RemoteClient("http://bench.test").upload("content here", "abc")
        self.assertIn("commit is required", str(cm.exception))

    @patch("benchdiff.remote.requests.request")
    def test_upload_unexpected_success_status(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(200, "1")
        with self.assertRaises(RemoteError):
            RemoteClient("http://bench.test").upload("content here", "abc")

    @patch("benchdiff.remote.requests.request")
    def test_upload_invalid_id(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(201, "<html>")
        with self.assertRaises(RemoteError):
            RemoteClient("http://bench.test").upload("content here", "abc")


class TestFetchAndCompare(unittest.TestCase):
    @patch("benchdiff.remote.requests.request")
    def test_fetch(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(200, "BenchmarkFoo 1 2 ns/op")
        content = RemoteClient("http://bench.test").fetch(5)
        self.assertEqual(content, "BenchmarkFoo 1 2 ns/op")
        self.assertEqual(mock_request.call_args.args, ("GET", "http://bench.test/benchmarks/5"))

    @patch("benchdiff.remote.requests.request")
    def test_fetch_not_found(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(404, "benchmark not found")
        with self.assertRaises(NotFound):
            RemoteClient("http://bench.test").fetch(5)

    @patch("benchdiff.remote.requests.request")
    def test_fetch_server_error(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(500, "boom")
        with self.assertRaises(RemoteError):
            RemoteClient("http://bench.test").fetch(5)

    @patch("benchdiff.remote.requests.request")
    def test_compare(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(200, content=b"report bytes")
        data = RemoteClient("http://bench.test").compare(1, 2)
        self.assertEqual(data, b"report bytes")
        self.assertEqual(mock_request.call_args.kwargs["params"], {"a": 1, "b": 2})

    @patch("benchdiff.remote.requests.request")
    def test_connection_error(self, mock_request: MagicMock) -> None:
        mock_request.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(RemoteError) as cm:
            RemoteClient("http://bench.test").fetch(1)
        self.assertEqual(cm.exception.kind, "remote")

    @patch("benchdiff.remote.requests.request")
    def test_timeout(self, mock_request: MagicMock) -> None:
        mock_request.side_effect = requests.Timeout("timed out")
        with self.assertRaises(RemoteError):
            RemoteClient("http://bench.test", timeout=0.1).fetch(1)

    @patch("benchdiff.remote.requests.request")
    def test_timeout_passed_through(self, mock_request: MagicMock) -> None:
        mock_request.return_value = _mock_response(200, "x")
        RemoteClient("http://bench.test", timeout=3.5).fetch(1)
        self.assertEqual(mock_request.call_args.kwargs["timeout"], 3.5)


if __name__ == "__main__":
    unittest.main()
