"""Responses resource: create, stream, and manage model responses."""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .._streaming import ResponseStream
from .._types import (
    ResponseDeletionResult,
    ResponseInputItem,
    ResponseInputItemsList,
    ResponseObject,
    ResponseRequest,
)
from ..streaming import DEFAULT_MAX_FRAME_BYTES
from ._utils import _decode, _reject_fields_with_request

if TYPE_CHECKING:
    from .._http import HTTPClient

DEFAULT_MODEL = "gpt-5"


def _path(response_id: str, suffix: str = "") -> str:
    return f"/responses/{quote(response_id, safe='')}{suffix}"


class Responses:
    """client.responses: create responses, stream events, manage stored responses."""

    def __init__(self, http: HTTPClient, *, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES):
        self._http = http
        self._max_frame_bytes = max_frame_bytes

    def _build_request(
        self,
        request: ResponseRequest | None,
        input: str | list[ResponseInputItem] | None,
        model: str | None,
        **kwargs: Any,
    ) -> ResponseRequest:
        _reject_fields_with_request(request, input=input, model=model, **kwargs)
        if request is not None:
            return request
        if input is None:
            raise ValueError("Either request= or input= is required")
        return ResponseRequest(model=model or DEFAULT_MODEL, input=input, **kwargs)

    def create(
        self,
        request: ResponseRequest | None = None,
        *,
        input: str | list[ResponseInputItem] | None = None,
        model: str | None = None,
        stream: bool = False,
        **kwargs: Any,
    ) -> ResponseObject | ResponseStream:
        """Create a response.

        Pass either a prebuilt ``request`` or ``input`` plus keyword fields;
        ``model`` defaults to gpt-5.

        With stream=False (default): returns the finished ResponseObject.
        With stream=True: returns a ResponseStream; the request is sent when
            the stream is started or first iterated.

        Raises:
            ValueError: ``request`` was combined with keyword fields, or
                neither was given.
        """
        if stream:
            return self.stream(request, input=input, model=model, **kwargs)

        body = self._build_request(request, input, model, **kwargs).to_dict()
        body.pop("stream", None)
        resp = self._http.request("POST", "/responses", json=body)
        return _decode(resp, ResponseObject.from_dict)

    def stream(
        self,
        request: ResponseRequest | None = None,
        *,
        input: str | list[ResponseInputItem] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> ResponseStream:
        """Create a streaming response."""
        body = self._build_request(request, input, model, **kwargs).to_dict()
        body["stream"] = True
        return ResponseStream(
            lambda: self._http.stream("POST", "/responses", json=body),
            max_frame_bytes=self._max_frame_bytes,
        )

    def stream_text(
        self,
        request: ResponseRequest | None = None,
        *,
        input: str | list[ResponseInputItem] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> Generator[str, None, None]:
        """Create a streaming response and yield only output text deltas.

        Usage:
            for chunk in client.responses.stream_text(input="Summarize news"):
                print(chunk, end="", flush=True)
        """
        with self.stream(request, input=input, model=model, **kwargs) as stream:
            for event in stream.events():
                delta = event.output_text_delta
                if delta:
                    yield delta

    def create_and_collect_text(
        self,
        request: ResponseRequest | None = None,
        *,
        input: str | list[ResponseInputItem] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Stream a response to completion and return its aggregated output text."""
        with self.stream(request, input=input, model=model, **kwargs) as stream:
            return stream.collect_text()

    def retrieve(self, response_id: str) -> ResponseObject:
        resp = self._http.request("GET", _path(response_id))
        return _decode(resp, ResponseObject.from_dict)

    def delete(self, response_id: str) -> ResponseDeletionResult:
        resp = self._http.request("DELETE", _path(response_id))
        return _decode(resp, ResponseDeletionResult.from_dict)

    def list_input_items(self, response_id: str) -> ResponseInputItemsList:
        """List the input items a stored response was created from."""
        resp = self._http.request("GET", _path(response_id, "/input_items"))
        return _decode(resp, ResponseInputItemsList.from_dict)
