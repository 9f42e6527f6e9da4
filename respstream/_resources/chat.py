"""Chat resource: chat completions, plain or streamed."""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from .._streaming import ChatCompletionStream
from .._types import ChatCompletion, ChatCompletionRequest, ChatMessage
from ..streaming import DEFAULT_MAX_FRAME_BYTES
from ._utils import _decode, _reject_fields_with_request

if TYPE_CHECKING:
    from .._http import HTTPClient

DEFAULT_CHAT_MODEL = "gpt-4o"


class Chat:
    """client.chat: create chat completions and stream their chunks."""

    def __init__(self, http: HTTPClient, *, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES):
        self._http = http
        self._max_frame_bytes = max_frame_bytes

    def _build_request(
        self,
        request: ChatCompletionRequest | None,
        messages: list[ChatMessage] | None,
        model: str | None,
        **kwargs: Any,
    ) -> ChatCompletionRequest:
        _reject_fields_with_request(request, messages=messages, model=model, **kwargs)
        if request is not None:
            return request
        if not messages:
            raise ValueError("Either request= or a non-empty messages= is required")
        return ChatCompletionRequest(model=model or DEFAULT_CHAT_MODEL, messages=messages, **kwargs)

    def create(
        self,
        request: ChatCompletionRequest | None = None,
        *,
        messages: list[ChatMessage] | None = None,
        model: str | None = None,
        stream: bool = False,
        **kwargs: Any,
    ) -> ChatCompletion | ChatCompletionStream:
        """Create a chat completion.

        With stream=False (default): returns the finished ChatCompletion.
        With stream=True: returns a lazy ChatCompletionStream.
        """
        if stream:
            return self.stream(request, messages=messages, model=model, **kwargs)

        body = self._build_request(request, messages, model, **kwargs).to_dict()
        body.pop("stream", None)
        body.pop("stream_options", None)
        resp = self._http.request("POST", "/chat/completions", json=body)
        return _decode(resp, ChatCompletion.from_dict)

    def stream(
        self,
        request: ChatCompletionRequest | None = None,
        *,
        messages: list[ChatMessage] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> ChatCompletionStream:
        """Create a streaming chat completion."""
        body = self._build_request(request, messages, model, **kwargs).to_dict()
        body["stream"] = True
        return ChatCompletionStream(
            lambda: self._http.stream("POST", "/chat/completions", json=body),
            max_frame_bytes=self._max_frame_bytes,
        )

    def stream_text(
        self,
        request: ChatCompletionRequest | None = None,
        *,
        messages: list[ChatMessage] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> Generator[str, None, None]:
        """Stream a chat completion and yield only content deltas of the first choice."""
        with self.stream(request, messages=messages, model=model, **kwargs) as stream:
            for chunk in stream.events():
                delta = chunk.output_text_delta
                if delta:
                    yield delta

    def create_and_collect_text(
        self,
        request: ChatCompletionRequest | None = None,
        *,
        messages: list[ChatMessage] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        with self.stream(request, messages=messages, model=model, **kwargs) as stream:
            return stream.collect_text()
