"""ResponseStream drives one streaming session; ChatCompletionStream reuses it for chat."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import contextlib
from dataclasses import dataclass
from enum import Enum
import logging
import queue
import threading
from typing import TYPE_CHECKING

from ._exceptions import FrameTooLargeError, RespStreamError, TransportError
from .streaming import (
    DEFAULT_MAX_FRAME_BYTES,
    ChatStreamAccumulator,
    FrameSplitter,
    ResponseStreamEvent,
    ResponseStreamTextAccumulator,
    StreamResult,
    decode_chat_result,
    decode_result,
    parse_frame,
)

if TYPE_CHECKING:
    import requests

    from ._types import ChatToolCall, ChatUsage

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.FAILED, StreamState.CANCELLED)


@dataclass(frozen=True)
class StreamCompletion:
    """The single terminal signal of a session."""

    state: StreamState
    error: RespStreamError | None = None

    @property
    def ok(self) -> bool:
        return self.state is StreamState.COMPLETED


@dataclass(frozen=True)
class _Failure:
    error: RespStreamError


# Terminal marker on the chunk channel.
_END = object()


def _as_stream_error(exc: BaseException) -> RespStreamError:
    if isinstance(exc, RespStreamError):
        return exc
    return TransportError(f"Stream transport failed: {exc}", cause=exc)


class ResponseStream:
    """Iterable stream of decoded events for one Responses API request.

    A reader thread opens the transport and pushes body chunks onto a queue;
    frames are split, parsed and decoded on the iterating thread, so results
    (and callbacks passed to ``run``) are always delivered there, in order.

    Usage:
        with client.responses.stream(input="Hi", model="gpt-5") as stream:
            for result in stream:
                if result.ok:
                    print(result.event.kind)
        print(stream.text)  # accumulated output text
    """

    def __init__(
        self,
        open_transport: Callable[[], requests.Response],
        *,
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
    ):
        self._open_transport = open_transport
        self._splitter = FrameSplitter(max_frame_bytes)
        self._accumulator = self._new_accumulator()
        self._channel: queue.Queue[object] = queue.Queue()
        self._lock = threading.Lock()
        self._closing = threading.Event()
        self._state = StreamState.IDLE
        self._completion: StreamCompletion | None = None
        self._response: requests.Response | None = None
        self._reader: threading.Thread | None = None
        self._iterated = False

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def completion(self) -> StreamCompletion | None:
        """Terminal signal, once the session has ended."""
        return self._completion

    @property
    def text(self) -> str:
        """Output text accumulated from the events delivered so far."""
        return self._accumulator.output_text

    @property
    def output(self) -> str:
        """Alias for text."""
        return self.text

    def start(self) -> None:
        """Open the transport on the reader thread. Iteration calls this lazily."""
        with self._lock:
            if self._state is not StreamState.IDLE:
                return
            self._state = StreamState.CONNECTING
        logger.debug("Stream connecting")
        self._reader = threading.Thread(target=self._read, name="respstream-reader", daemon=True)
        self._reader.start()

    def cancel(self) -> None:
        """Stop the session and abort the transport. Idempotent, thread-safe."""
        with self._lock:
            if self._state.terminal:
                return
            self._state = StreamState.CANCELLED
            self._completion = StreamCompletion(StreamState.CANCELLED)
        logger.debug("Stream cancelled")
        self._stop_reader()

    def _stop_reader(self) -> None:
        self._closing.set()
        with self._lock:
            response = self._response
        if response is not None:
            response.close()
        # Wake a consumer blocked on the channel.
        self._channel.put(_END)

    def _finish(self, state: StreamState, error: RespStreamError | None = None) -> bool:
        with self._lock:
            if self._state.terminal:
                return False
            self._state = state
            self._completion = StreamCompletion(state, error)
        logger.debug("Stream %s", state.value)
        return True

    def _read(self) -> None:
        """Reader thread: open the transport and forward raw chunks."""
        response = None
        try:
            response = self._open_transport()
            with self._lock:
                if not self._closing.is_set():
                    self._response = response
            if self._closing.is_set():
                return
            for chunk in response.iter_content(chunk_size=None):
                if self._closing.is_set():
                    return
                if chunk:
                    self._channel.put(chunk)
        except Exception as e:
            # The consumer owns error reporting; an abort we caused is not an error.
            if not self._closing.is_set():
                self._channel.put(_Failure(_as_stream_error(e)))
        finally:
            if response is not None:
                response.close()
            self._channel.put(_END)

    def _cancelled(self) -> bool:
        return self._state is StreamState.CANCELLED

    def _new_accumulator(self) -> ResponseStreamTextAccumulator:
        return ResponseStreamTextAccumulator()

    def _decode(self, payload: str) -> StreamResult:
        return decode_result(payload)

    def __iter__(self) -> Iterator[StreamResult]:
        if self._iterated:
            raise RuntimeError(f"{type(self).__name__} can only be iterated once")
        self._iterated = True
        self.start()
        try:
            while True:
                item = self._channel.get()
                if self._cancelled():
                    return

                if item is _END:
                    if self._splitter.pending:
                        logger.debug(
                            "Discarding %d bytes of unterminated frame data",
                            len(self._splitter.pending),
                        )
                    self._finish(StreamState.COMPLETED)
                    return

                if isinstance(item, _Failure):
                    if self._finish(StreamState.FAILED, item.error):
                        yield StreamResult(error=item.error)
                    return

                with self._lock:
                    if self._state is StreamState.CONNECTING:
                        self._state = StreamState.STREAMING
                        logger.debug("Stream receiving data")

                failure: FrameTooLargeError | None = None
                try:
                    frames = self._splitter.feed(item)
                except FrameTooLargeError as e:
                    frames, failure = e.frames, e

                for frame in frames:
                    payload = parse_frame(frame)
                    if payload is None:
                        continue
                    result = self._decode(payload)
                    if self._cancelled():
                        return
                    if result.event is not None:
                        self._accumulator.apply(result.event)
                    yield result

                if failure is not None:
                    logger.warning("Stream failed: %s", failure.message)
                    if self._finish(StreamState.FAILED, failure):
                        self._stop_reader()
                        yield StreamResult(error=failure)
                    return
        finally:
            # Consumer walked away early; release the connection.
            if not self._state.terminal:
                self.cancel()

    def run(
        self,
        on_event: Callable[[StreamResult], None],
        on_complete: Callable[[StreamCompletion], None] | None = None,
    ) -> StreamCompletion:
        """Deliver every result to ``on_event``, then the terminal signal to ``on_complete``.

        ``on_complete`` fires exactly once, after the last ``on_event`` call,
        including when the session is cancelled.
        """
        try:
            with contextlib.closing(iter(self)) as results:
                for result in results:
                    on_event(result)
        finally:
            completion = self._completion or StreamCompletion(self._state)
            if on_complete is not None:
                on_complete(completion)
        return completion

    def events(self) -> Iterator[ResponseStreamEvent]:
        """Yield events only; the first decode or transport error is raised."""
        with contextlib.closing(iter(self)) as results:
            for result in results:
                yield result.unwrap()

    def collect_text(self) -> str:
        """Consume the whole stream and return the aggregated output text."""
        for _ in self.events():
            pass
        return self.text

    def __enter__(self) -> ResponseStream:
        return self

    def __exit__(self, *_: object) -> None:
        self.cancel()


class ChatCompletionStream(ResponseStream):
    """Iterable stream of chat.completion.chunk records for one chat request.

    Same lifecycle, threading and cancellation as ResponseStream. Results carry
    ChatCompletionChunk events; ``text``, ``tool_calls``, ``finish_reason`` and
    ``usage`` describe the first choice as accumulated so far.

    Usage:
        with client.chat.stream(messages=[ChatMessage("user", "Hi")]) as stream:
            for chunk in stream.events():
                print(chunk.output_text_delta or "", end="")
    """

    _accumulator: ChatStreamAccumulator

    def _new_accumulator(self) -> ChatStreamAccumulator:  # type: ignore[override]
        return ChatStreamAccumulator()

    def _decode(self, payload: str) -> StreamResult:
        return decode_chat_result(payload)

    @property
    def tool_calls(self) -> list[ChatToolCall]:
        return self._accumulator.tool_calls

    @property
    def finish_reason(self) -> str | None:
        return self._accumulator.finish_reason

    @property
    def usage(self) -> ChatUsage | None:
        return self._accumulator.usage
