"""Client entry point for the Responses and Chat Completions APIs."""

from __future__ import annotations

import os

from ._exceptions import AuthenticationError
from ._http import HTTPClient
from ._resources import Chat, Responses
from .streaming import DEFAULT_MAX_FRAME_BYTES

DEFAULT_BASE_URL = "https://api.openai.com/v1"


def _max_frame_bytes_from_env() -> int:
    raw = os.environ.get("RESPSTREAM_MAX_FRAME_BYTES")
    if not raw:
        return DEFAULT_MAX_FRAME_BYTES
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"RESPSTREAM_MAX_FRAME_BYTES must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError("RESPSTREAM_MAX_FRAME_BYTES must be positive")
    return value


class Client:
    """Client for the Responses API, with chat completions alongside.

    Usage:
        client = Client(api_key="sk-...")
        for chunk in client.responses.stream_text(input="Tell me a joke"):
            print(chunk, end="")
        for chunk in client.chat.stream_text(messages=[ChatMessage("user", "Hi")]):
            print(chunk, end="")
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int = 300,
        max_frame_bytes: int | None = None,
    ):
        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise AuthenticationError(
                "No API key provided. Pass api_key= or set OPENAI_API_KEY env var."
            )
        base_url = base_url or os.environ.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL

        self._http = HTTPClient(api_key=api_key, base_url=base_url, timeout=timeout)
        max_frame_bytes = max_frame_bytes or _max_frame_bytes_from_env()
        self.responses = Responses(self._http, max_frame_bytes=max_frame_bytes)
        self.chat = Chat(self._http, max_frame_bytes=max_frame_bytes)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
