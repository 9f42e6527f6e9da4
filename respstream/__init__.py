"""
respstream - Python SDK for the Responses API

Streams model output as typed server-sent events.
"""

__version__ = "0.1.0"

from ._client import Client
from ._exceptions import (
    APIError,
    AuthenticationError,
    ConflictError,
    DecodeError,
    FrameTooLargeError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RespStreamError,
    TransportError,
    ValidationError,
)
from ._streaming import ChatCompletionStream, ResponseStream, StreamCompletion, StreamState
from ._types import (
    ApplyPatchTool,
    ChatCompletion,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatMessage,
    ChatResponseFormat,
    ChatStreamOptions,
    ChatTool,
    ChatToolCall,
    ChatToolChoice,
    CodeInterpreterTool,
    ComputerUsePreviewTool,
    FileSearchTool,
    FunctionTool,
    ImageGenerationTool,
    MCPTool,
    ResponseObject,
    ResponseReasoning,
    ResponseRequest,
    ResponseTextConfiguration,
    ResponseTextFormat,
    ResponseToolChoice,
    ShellTool,
    WebSearchTool,
)
from .streaming import (
    ChatStreamAccumulator,
    FrameSplitter,
    ResponseStreamEvent,
    ResponseStreamTextAccumulator,
    StreamEventType,
    StreamResult,
    decode_chat_chunk,
    decode_event,
    parse_frame,
)

__all__ = [
    "APIError",
    "ApplyPatchTool",
    "AuthenticationError",
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionStream",
    "ChatMessage",
    "ChatResponseFormat",
    "ChatStreamAccumulator",
    "ChatStreamOptions",
    "ChatTool",
    "ChatToolCall",
    "ChatToolChoice",
    # Main client
    "Client",
    "CodeInterpreterTool",
    "ComputerUsePreviewTool",
    "ConflictError",
    "DecodeError",
    "FileSearchTool",
    # Stream decoding
    "FrameSplitter",
    "FrameTooLargeError",
    "FunctionTool",
    "ImageGenerationTool",
    "MCPTool",
    "NotFoundError",
    "PermissionDeniedError",
    "RateLimitError",
    "RespStreamError",
    "ResponseObject",
    "ResponseReasoning",
    "ResponseRequest",
    "ResponseStream",
    "ResponseStreamEvent",
    "ResponseStreamTextAccumulator",
    "ResponseTextConfiguration",
    "ResponseTextFormat",
    "ResponseToolChoice",
    "ShellTool",
    "StreamCompletion",
    "StreamEventType",
    "StreamResult",
    "StreamState",
    "TransportError",
    "ValidationError",
    "WebSearchTool",
    "decode_chat_chunk",
    "decode_event",
    "parse_frame",
]
