"""requests.Session wrapper: bearer auth, typed errors, retry with backoff."""

import logging
import time
from typing import Any

import requests

from ._exceptions import STATUS_MAP, APIError, TransportError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE = 0.5  # seconds, doubled per attempt
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})

EVENT_STREAM = "text/event-stream"


def _error_message(resp: requests.Response) -> str:
    """Best message from an error body: {"error": {"message"}}, {"detail"}, or raw text."""
    try:
        body = resp.json()
    except ValueError:
        logger.debug("Error body is not JSON: %s", resp.text[:200] if resp.text else "empty")
        return resp.text or f"HTTP {resp.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {resp.status_code}"
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return str(body.get("detail") or f"HTTP {resp.status_code}")


def _raise_for_status(resp: requests.Response, *, method: str = "", path: str = "") -> None:
    """Map an HTTP error response to its typed exception."""
    message = _error_message(resp)
    request_id = resp.headers.get("x-request-id")
    resp.close()
    exc_cls = STATUS_MAP.get(resp.status_code, APIError)
    raise exc_cls(
        message, status_code=resp.status_code, request_id=request_id, method=method, path=path
    )


def _backoff(attempt: int, resp: requests.Response | None = None) -> float:
    """Delay before the next attempt; a 429 Retry-After header wins."""
    default = BACKOFF_BASE * (2**attempt)
    if resp is None or resp.status_code != 429:
        return default
    retry_after = resp.headers.get("Retry-After")
    if not retry_after:
        return default
    try:
        return float(retry_after)
    except ValueError:
        logger.debug("Unparseable Retry-After header: %s", retry_after)
        return default


class HTTPClient:
    """HTTP client for the Responses API with bearer auth and automatic retry."""

    def __init__(self, api_key: str, base_url: str, timeout: int = 300):
        self._session = requests.Session()
        self._session.headers.update(
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        )
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _send(self, method: str, url: str, *, stream: bool, **kwargs: Any) -> requests.Response:
        """Send with retry on connection errors and retryable statuses."""
        for attempt in range(MAX_ATTEMPTS):
            last_attempt = attempt == MAX_ATTEMPTS - 1
            try:
                resp = self._session.request(
                    method, url, timeout=self._timeout, stream=stream, **kwargs
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                logger.warning("Request failed (attempt %d/%d): %s", attempt + 1, MAX_ATTEMPTS, e)
                if last_attempt:
                    raise TransportError(str(e), cause=e) from e
                time.sleep(_backoff(attempt))
                continue

            if resp.ok:
                return resp
            if last_attempt or resp.status_code not in RETRYABLE_STATUS:
                _raise_for_status(resp, method=method, path=url)

            delay = _backoff(attempt, resp)
            resp.close()
            logger.warning(
                "%s %s returned %d, retrying in %.1fs", method, url, resp.status_code, delay
            )
            time.sleep(delay)

        raise APIError("Max retries exceeded")

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request and raise a typed exception on error."""
        return self._send(method, f"{self._base_url}{path}", stream=False, **kwargs)

    def stream(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Open a streaming request that accepts server-sent events."""
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Accept", EVENT_STREAM)
        return self._send(
            method, f"{self._base_url}{path}", stream=True, headers=headers, **kwargs
        )

    def close(self) -> None:
        self._session.close()
