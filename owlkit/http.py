"""Minimal JSON-over-HTTP request helper."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any

_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class RequestError(Exception):
    """Raised when a JSON request cannot be completed."""


def request(url: str, data: Any = None) -> Any:
    """GET url, or POST data as JSON when given, and return the decoded JSON reply."""
    method = "GET"
    body = None
    if data is not None:
        try:
            body = json.dumps(data).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise RequestError(f"failed to marshal request body {url} : {exc}") from exc
        method = "POST"

    try:
        req = urllib.request.Request(url, data=body, method=method, headers=_HEADERS)
    except ValueError as exc:
        raise RequestError(f"error creating request {url} : {exc}") from exc

    try:
        with urllib.request.urlopen(req) as resp:
            status = resp.status
            payload = resp.read()
    except urllib.error.HTTPError as exc:
        exc.close()
        raise RequestError(f"unexpected status code {url} : {exc.code}") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise RequestError(f"error sending request {url} : {exc}") from exc

    if status != 200:
        raise RequestError(f"unexpected status code {url} : {status}")

    try:
        return json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestError(f"error read body {url} : {exc} - {payload!r}") from exc