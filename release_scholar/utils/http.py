# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Minimal JSON-over-HTTP helper for the deposit and forge API clients.

Built on urllib so the core has no HTTP dependency. Idempotent requests (GET,
PUT) are retried with exponential backoff on rate limiting, server errors and
network failures; POST is never retried because it creates things.
"""

import json
import logging
import time
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from release_scholar import __version__
from release_scholar.exceptions import RemoteServiceError
from release_scholar.logging.logger import get_logger

_logger: logging.Logger = get_logger(__name__)

HTTP_TIMEOUT_SECONDS = 60
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 2.0
USER_AGENT = f"release-scholar/{__version__}"

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


def _decode_body(raw: bytes) -> Any:
    if not raw.strip():
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise RemoteServiceError(f"Response is not valid JSON: {err}") from err


def request_json(
    method: str,
    url: str,
    headers: dict[str, str],
    payload: Optional[Any] = None,
    data: Optional[bytes] = None,
    content_type: str = "application/json",
) -> Any:
    """
    Send one request and return the decoded JSON response (None if empty).

    Pass `payload` for a JSON body or `data` for raw bytes, not both.

    Raises:
        RemoteServiceError: Non-2xx status (with .status set), network
            failure after retries, or an undecodable response.
    """
    body = data
    request_headers = {"Accept": "application/json", "User-Agent": USER_AGENT, **headers}
    if payload is not None:
        body = json.dumps(payload).encode("utf-8")
    if body is not None:
        request_headers["Content-Type"] = content_type

    attempts = MAX_RETRIES if method.upper() in _IDEMPOTENT_METHODS else 1
    backoff = INITIAL_BACKOFF_SECONDS
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        try:
            req = Request(url, data=body, headers=request_headers, method=method.upper())
            with urlopen(req, timeout=HTTP_TIMEOUT_SECONDS) as resp:
                return _decode_body(resp.read())
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", "replace").strip()
            if exc.code in _RETRYABLE_STATUS and attempt < attempts:
                _logger.warning(
                    "Retryable HTTP status",
                    extra={"status": exc.code, "url": url, "attempt": attempt, "backoff": backoff},
                )
                time.sleep(backoff)
                backoff *= 2
                last_error = exc
                continue
            raise RemoteServiceError(
                f"{method.upper()} {url} failed with HTTP {exc.code}: {detail}", status=exc.code
            ) from exc
        except (URLError, OSError) as exc:
            last_error = exc
            if attempt < attempts:
                _logger.warning(
                    "Network error, retrying",
                    extra={"url": url, "error": str(exc), "attempt": attempt, "backoff": backoff},
                )
                time.sleep(backoff)
                backoff *= 2

    raise RemoteServiceError(
        f"{method.upper()} {url} failed after {attempts} attempt(s): {last_error}"
    ) from last_error
