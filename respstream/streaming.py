"""
Responses API server-sent event decoding.

Turns an arbitrarily chunked byte stream into typed stream events:

    bytes -> FrameSplitter -> frame -> parse_frame -> payload -> decode_event -> event

and folds events into one aggregate text with ResponseStreamTextAccumulator.
Chat completion streams share the framing and decode with decode_chat_chunk
into ChatStreamAccumulator instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Any, Union

from ._exceptions import APIError, DecodeError, FrameTooLargeError, RespStreamError
from ._types import (
    ChatCompletionChunk,
    ChatFunctionCall,
    ChatToolCall,
    ChatUsage,
    ResponseAPIError,
    ResponseObject,
    ResponseOutputItem,
    _optional,
    decode_output_item,
)

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
FRAME_DELIMITER = b"\n\n"
DEFAULT_MAX_FRAME_BYTES = 8 * 1024 * 1024


class StreamEventType(str, Enum):
    """Responses API stream event kinds."""

    # Response lifecycle
    RESPONSE_CREATED = "response.created"
    RESPONSE_QUEUED = "response.queued"
    RESPONSE_IN_PROGRESS = "response.in_progress"
    RESPONSE_COMPLETED = "response.completed"
    RESPONSE_FAILED = "response.failed"
    RESPONSE_INCOMPLETE = "response.incomplete"

    # Output items and content parts
    OUTPUT_ITEM_ADDED = "response.output_item.added"
    OUTPUT_ITEM_DONE = "response.output_item.done"
    CONTENT_PART_ADDED = "response.content_part.added"
    CONTENT_PART_DONE = "response.content_part.done"

    # Text
    OUTPUT_TEXT_DELTA = "response.output_text.delta"
    OUTPUT_TEXT_DONE = "response.output_text.done"
    REFUSAL_DELTA = "response.refusal.delta"
    REFUSAL_DONE = "response.refusal.done"

    # Function calls
    FUNCTION_CALL_ARGUMENTS_DELTA = "response.function_call_arguments.delta"
    FUNCTION_CALL_ARGUMENTS_DONE = "response.function_call_arguments.done"

    # Reasoning
    REASONING_SUMMARY_PART_ADDED = "response.reasoning_summary_part.added"
    REASONING_SUMMARY_PART_DONE = "response.reasoning_summary_part.done"
    REASONING_SUMMARY_TEXT_DELTA = "response.reasoning_summary_text.delta"
    REASONING_SUMMARY_TEXT_DONE = "response.reasoning_summary_text.done"
    REASONING_TEXT_DELTA = "response.reasoning_text.delta"
    REASONING_TEXT_DONE = "response.reasoning_text.done"

    ERROR = "error"

    # Any kind not listed above; the raw string stays on ResponseStreamEvent.kind
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_kind(cls, kind: str) -> StreamEventType:
        try:
            event_type = cls(kind)
        except ValueError:
            return cls.UNRECOGNIZED
        # "unrecognized" is not a wire kind
        return cls.UNRECOGNIZED if event_type is cls.UNRECOGNIZED else event_type


@dataclass(frozen=True)
class ResponseStreamEvent:
    """One decoded stream event.

    ``kind`` is always the wire string; ``type`` is its enum value, or
    UNRECOGNIZED for kinds this library does not know about.
    """

    kind: str
    type: StreamEventType
    raw: dict[str, Any]
    sequence_number: int | None = None
    item_id: str | None = None
    output_index: int | None = None
    content_index: int | None = None
    response: ResponseObject | None = None
    item: ResponseOutputItem | None = None
    delta: str | None = None
    text: str | None = None
    summary_text: str | None = None
    arguments: str | None = None
    error: ResponseAPIError | None = None

    @property
    def output_text_delta(self) -> str | None:
        if self.type is not StreamEventType.OUTPUT_TEXT_DELTA:
            return None
        return self.delta

    @property
    def output_text_done(self) -> str | None:
        if self.type is not StreamEventType.OUTPUT_TEXT_DONE:
            return None
        return self.text

    @property
    def reasoning_summary_delta(self) -> str | None:
        if self.type is not StreamEventType.REASONING_SUMMARY_TEXT_DELTA:
            return None
        return self.delta if self.delta is not None else self.summary_text

    @property
    def function_call_arguments_delta(self) -> str | None:
        if self.type is not StreamEventType.FUNCTION_CALL_ARGUMENTS_DELTA:
            return None
        return self.delta


StreamRecord = Union[ResponseStreamEvent, ChatCompletionChunk]


@dataclass(frozen=True)
class StreamResult:
    """Outcome of one frame: an event, or the error that replaced it."""

    event: StreamRecord | None = None
    error: RespStreamError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> StreamRecord:
        """Return the event or raise the error."""
        if self.error is not None:
            raise self.error
        if self.event is None:
            raise DecodeError("Stream result carries neither an event nor an error")
        return self.event


class FrameSplitter:
    """
    Reassembles network chunks into SSE frames.

    Bytes are buffered until a blank-line delimiter is fully present; only then
    is the frame decoded as UTF-8. A delimiter or a multi-byte character split
    across two chunks is therefore harmless.

    Each feed only scans the bytes it added (plus one byte of overlap for a
    delimiter straddling the boundary), so a large frame arriving in many
    small chunks costs linear time. Invalid UTF-8 is carried through as
    surrogate escapes and rejected by decode_event.
    """

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES) -> None:
        self._buffer = bytearray()
        self._max_frame_bytes = max_frame_bytes
        # Prefix of _buffer already searched for a delimiter.
        self._scanned = 0
        # CR at the end of the last chunk, not yet known to start a CRLF.
        self._held_cr = False

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet part of a complete frame."""
        return bytes(self._buffer) + (b"\r" if self._held_cr else b"")

    def feed(self, chunk: bytes) -> list[str]:
        """Append a chunk and return every frame it completed, in order."""
        if not chunk:
            return []
        self._buffer += self._normalize_newlines(chunk)

        frames: list[str] = []
        start = 0
        search_from = max(self._scanned - 1, 0)
        while True:
            end = self._buffer.find(FRAME_DELIMITER, search_from)
            if end == -1:
                break
            frames.append(self._buffer[start:end].decode("utf-8", errors="surrogateescape"))
            start = search_from = end + len(FRAME_DELIMITER)
        if start:
            del self._buffer[:start]
        self._scanned = len(self._buffer)

        if len(self._buffer) > self._max_frame_bytes:
            size = len(self._buffer)
            self.reset()
            raise FrameTooLargeError(
                f"Incomplete frame exceeded {self._max_frame_bytes} bytes ({size} buffered)",
                frames=frames,
            )
        return frames

    def reset(self) -> None:
        """Drop any partial frame."""
        self._buffer.clear()
        self._scanned = 0
        self._held_cr = False

    def _normalize_newlines(self, chunk: bytes) -> bytes:
        # CRLF -> LF on the new bytes only. A trailing CR waits for the next chunk.
        if self._held_cr:
            chunk = b"\r" + chunk
            self._held_cr = False
        if b"\r" not in chunk:
            return chunk
        if chunk.endswith(b"\r"):
            chunk = chunk[:-1]
            self._held_cr = True
        return chunk.replace(b"\r\n", b"\n")


def parse_frame(frame: str) -> str | None:
    """Extract the logical payload of a frame.

    Returns None for frames without data lines and for the [DONE] sentinel.
    """
    data_lines = [
        line[len(DATA_PREFIX) :].strip()
        for line in frame.split("\n")
        if line.startswith(DATA_PREFIX)
    ]
    if not data_lines:
        return None
    payload = "\n".join(data_lines)
    if payload == DONE_SENTINEL:
        return None
    return payload


# Mandatory fields per kind. Kinds absent from the table have none.
_REQUIRED_FIELDS: dict[StreamEventType, tuple[str, ...]] = {
    StreamEventType.RESPONSE_CREATED: ("response",),
    StreamEventType.RESPONSE_QUEUED: ("response",),
    StreamEventType.RESPONSE_IN_PROGRESS: ("response",),
    StreamEventType.RESPONSE_COMPLETED: ("response",),
    StreamEventType.RESPONSE_FAILED: ("response",),
    StreamEventType.RESPONSE_INCOMPLETE: ("response",),
    StreamEventType.OUTPUT_TEXT_DELTA: ("delta",),
    StreamEventType.OUTPUT_TEXT_DONE: ("text",),
    StreamEventType.FUNCTION_CALL_ARGUMENTS_DELTA: ("delta",),
    StreamEventType.FUNCTION_CALL_ARGUMENTS_DONE: ("arguments",),
}


def _decode_item(data: dict[str, Any]) -> ResponseOutputItem | None:
    # Best effort: a malformed item is dropped, never fatal to the event.
    raw_item = data.get("item")
    if raw_item is None:
        return None
    try:
        return decode_output_item(raw_item)
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Dropping undecodable output item: %r", e)
        return None


def _decode_fields(
    kind: str, event_type: StreamEventType, data: dict[str, Any]
) -> ResponseStreamEvent:
    for name in _REQUIRED_FIELDS.get(event_type, ()):
        if data.get(name) is None:
            raise KeyError(name)

    response = _optional(data, "response", dict)
    error = _optional(data, "error", dict)
    return ResponseStreamEvent(
        kind=kind,
        type=event_type,
        raw=data,
        sequence_number=_optional(data, "sequence_number", int),
        item_id=_optional(data, "item_id", str),
        output_index=_optional(data, "output_index", int),
        content_index=_optional(data, "content_index", int),
        response=ResponseObject.from_dict(response) if response is not None else None,
        item=_decode_item(data),
        delta=_optional(data, "delta", str),
        text=_optional(data, "text", str),
        summary_text=_optional(data, "summary_text", str),
        arguments=_optional(data, "arguments", str),
        error=ResponseAPIError.from_dict(error) if error is not None else None,
    )


def _load_object(payload: str) -> dict[str, Any]:
    """Parse a payload that must be a JSON object sent as valid UTF-8."""
    try:
        payload.encode("utf-8")
    except UnicodeEncodeError as e:
        # FrameSplitter leaves undecodable bytes as lone surrogates.
        printable = payload.encode("utf-8", errors="surrogateescape").decode(
            "utf-8", errors="replace"
        )
        raise DecodeError("Frame is not valid UTF-8", payload=printable, cause=e) from e

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON payload: {e}", payload=payload, cause=e) from e

    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(data).__name__}", payload=payload
        )
    return data


def decode_event(payload: str) -> ResponseStreamEvent:
    """Decode one payload into a ResponseStreamEvent.

    Raises:
        DecodeError: the payload is not valid UTF-8, is not a JSON object with
            a string ``type``, or a field of a known kind is missing or malformed.
    """
    data = _load_object(payload)
    kind = data.get("type")
    if not isinstance(kind, str):
        raise DecodeError("Event payload has no string 'type'", payload=payload)

    event_type = StreamEventType.from_kind(kind)
    if event_type is StreamEventType.UNRECOGNIZED:
        return ResponseStreamEvent(kind=kind, type=event_type, raw=data)

    try:
        return _decode_fields(kind, event_type, data)
    except KeyError as e:
        raise DecodeError(
            f"{kind}: missing required field {e.args[0]!r}", payload=payload, cause=e
        ) from e
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{kind}: {e}", payload=payload, cause=e) from e


def decode_result(payload: str) -> StreamResult:
    """decode_event, with failures captured instead of raised."""
    try:
        return StreamResult(event=decode_event(payload))
    except DecodeError as e:
        logger.warning("Failed to decode stream event: %s", e.message)
        return StreamResult(error=e)


class ResponseStreamTextAccumulator:
    """
    Folds stream events into the best-known output text.

    Deltas always append. A done event only replaces the aggregate when the
    aggregate is empty, or when the done text is strictly longer and starts
    with the aggregate; shorter or unrelated done events are ignored.
    """

    def __init__(self) -> None:
        self._text = ""

    @property
    def output_text(self) -> str:
        return self._text

    def apply(self, event: ResponseStreamEvent) -> None:
        delta = event.output_text_delta
        if delta is not None:
            self._text += delta

        done = event.output_text_done
        if done is not None:
            if not self._text:
                self._text = done
            elif len(done) > len(self._text) and done.startswith(self._text):
                self._text = done


def decode_chat_chunk(payload: str) -> ChatCompletionChunk:
    """Decode one chat completions payload into a ChatCompletionChunk.

    Raises:
        APIError: the payload is an error envelope instead of a chunk.
        DecodeError: the payload is not valid UTF-8 JSON or not a chunk.
    """
    data = _load_object(payload)
    error = data.get("error")
    if "choices" not in data and isinstance(error, dict):
        message = error.get("message")
        raise APIError(str(message) if message else "Unknown API error")

    try:
        return ChatCompletionChunk.from_dict(data)
    except KeyError as e:
        raise DecodeError(
            f"chat.completion.chunk: missing required field {e.args[0]!r}",
            payload=payload,
            cause=e,
        ) from e
    except (TypeError, ValueError) as e:
        raise DecodeError(f"chat.completion.chunk: {e}", payload=payload, cause=e) from e


def decode_chat_result(payload: str) -> StreamResult:
    """decode_chat_chunk, with failures captured instead of raised."""
    try:
        return StreamResult(event=decode_chat_chunk(payload))
    except (APIError, DecodeError) as e:
        logger.warning("Failed to decode chat chunk: %s", e.message)
        return StreamResult(error=e)


@dataclass
class _PendingToolCall:
    id: str = ""
    name: str = ""
    arguments: str = ""


class ChatStreamAccumulator:
    """
    Folds chat.completion.chunk records into the first choice's message.

    Content deltas append. Tool call fragments are merged by index: id and
    name are taken when first sent, arguments are concatenated. Other choices
    (n > 1) are ignored.
    """

    def __init__(self) -> None:
        self._text = ""
        self._tool_calls: dict[int, _PendingToolCall] = {}
        self.finish_reason: str | None = None
        self.usage: ChatUsage | None = None

    @property
    def output_text(self) -> str:
        return self._text

    @property
    def tool_calls(self) -> list[ChatToolCall]:
        return [
            ChatToolCall(id=call.id, function=ChatFunctionCall(call.name, call.arguments))
            for _, call in sorted(self._tool_calls.items())
        ]

    def apply(self, chunk: ChatCompletionChunk) -> None:
        if chunk.usage is not None:
            self.usage = chunk.usage
        for choice in chunk.choices:
            if choice.index != 0:
                continue
            if choice.delta.content:
                self._text += choice.delta.content
            for fragment in choice.delta.tool_calls:
                call = self._tool_calls.setdefault(fragment.index, _PendingToolCall())
                if fragment.id and not call.id:
                    call.id = fragment.id
                if fragment.name and not call.name:
                    call.name = fragment.name
                if fragment.arguments:
                    call.arguments += fragment.arguments
            if choice.finish_reason is not None:
                self.finish_reason = choice.finish_reason
