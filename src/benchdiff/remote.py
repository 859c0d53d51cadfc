"""HTTP client for a remote benchdiff server.

Endpoints::

    POST /upload/                  multipart: file "content", field "commit";
                                   header "signature"; 201 + new id
    GET  /benchmarks/<id>          raw content; 404 when unknown
    GET  /compare/?a=<id>&b=<id>   comparison report bytes
"""

from __future__ import annotations

from typing import Any

import requests

from benchdiff import __version__
from benchdiff.errors import NotFound, RemoteError, Unauthorized
from benchdiff.logging import get_logger
from benchdiff.verify import HmacVerifier

log = get_logger("remote")

_USER_AGENT = f"benchdiff/{__version__}"


class RemoteClient:
    """Client for a benchdiff server rooted at *base_url*."""

    def __init__(self, base_url: str, *, timeout: float = 10.0, secret: str = "") -> None:
        if not base_url:
            raise ValueError("remote URL is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.secret = secret

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        headers.setdefault("User-Agent", _USER_AGENT)
        log.debug("%s %s", method, url)
        try:
            return requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.ConnectionError as exc:
            raise RemoteError(f"cannot connect to {self.base_url}") from exc
        except requests.Timeout as exc:
            raise RemoteError(f"timeout talking to {self.base_url}") from exc
        except requests.RequestException as exc:
            raise RemoteError(f"request to {url} failed: {exc}") from exc

    @staticmethod
    def _check(resp: requests.Response, what: str) -> None:
        if resp.status_code == 404:
            raise NotFound(f"{what} not found")
        if resp.status_code >= 400:
            raise RemoteError(f"server returned {resp.status_code} for {what}: {resp.text.strip()}")

    def upload(self, content: str, commit: str) -> int:
        """Upload a run and return the id the server assigned to it."""
        content = content.strip()
        headers: dict[str, str] = {}
        if self.secret:
            headers["signature"] = HmacVerifier.sign(content, self.secret)
        resp = self._request(
            "POST",
            "/upload/",
            files={"content": ("content", content.encode("utf-8"))},
            data={"commit": commit},
            headers=headers,
        )
        if resp.status_code == 401:
            raise Unauthorized("server rejected the upload signature")
        self._check(resp, "upload endpoint")
        if resp.status_code != 201:
            raise RemoteError(f"unexpected status {resp.status_code} for upload")
        try:
            run_id = int(resp.text.strip())
        except ValueError as exc:
            raise RemoteError(f"invalid run id in response: {resp.text.strip()!r}") from exc
        log.info("Uploaded commit %s as remote run #%d", commit, run_id)
        return run_id

    def fetch(self, run_id: int) -> str:
        """Fetch the raw content of a remote run."""
        resp = self._request("GET", f"/benchmarks/{run_id}")
        self._check(resp, f"benchmark {run_id}")
        return resp.text

    def compare(self, a_id: int, b_id: int) -> bytes:
        """Ask the server to compare two of its runs."""
        resp = self._request("GET", "/compare/", params={"a": a_id, "b": b_id})
        self._check(resp, f"benchmark {a_id} or {b_id}")
        return resp.content
