"""Shared helpers for resource modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .._exceptions import APIError, DecodeError

if TYPE_CHECKING:
    import requests


def _decode(resp: requests.Response, decoder: Any) -> Any:
    """Decode a 2xx JSON body, surfacing error envelopes and malformed bodies."""
    try:
        body = resp.json()
    except ValueError as e:
        raise DecodeError(f"Response body is not JSON: {e}", payload=resp.text, cause=e) from e

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and "id" not in body:
        raise APIError(
            error.get("message") or "Unknown API error",
            status_code=resp.status_code,
            request_id=resp.headers.get("x-request-id"),
        )
    try:
        return decoder(body)
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Unexpected response shape: {e!r}", payload=resp.text, cause=e) from e


def _reject_fields_with_request(request: object | None, **fields: Any) -> None:
    """A prebuilt request object excludes keyword fields; None counts as unset."""
    if request is None:
        return
    given = sorted(name for name, value in fields.items() if value is not None)
    if given:
        raise ValueError(
            f"Pass either request= or keyword fields, not both (got {', '.join(given)})"
        )
