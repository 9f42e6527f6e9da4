"""Dataclass models mirroring Responses API and Chat Completions schemas.

``from_dict`` raises ``KeyError``/``TypeError``/``ValueError`` on malformed
input; callers that need a typed failure wrap those in ``DecodeError``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, TypeVar, Union

T = TypeVar("T")


def _require(data: dict, key: str, typ: type[T]) -> T:
    """Return data[key], which must be present, non-null and of ``typ``."""
    if not isinstance(data, dict):
        raise TypeError(f"expected object, got {type(data).__name__}")
    if data.get(key) is None:
        raise KeyError(key)
    return _check(key, data[key], typ)


def _optional(data: dict, key: str, typ: type[T]) -> T | None:
    """Return data[key] if present and non-null; it must be of ``typ``."""
    if not isinstance(data, dict):
        raise TypeError(f"expected object, got {type(data).__name__}")
    value = data.get(key)
    if value is None:
        return None
    return _check(key, value, typ)


def _check(key: str, value: Any, typ: type[T]) -> T:
    # bool is an int subclass; JSON true is never a valid integer field
    if isinstance(value, bool) and typ is not bool:
        raise TypeError(f"field {key!r}: expected {typ.__name__}, got bool")
    if typ is float and isinstance(value, int):
        return float(value)  # type: ignore[return-value]
    if not isinstance(value, typ):
        raise TypeError(f"field {key!r}: expected {typ.__name__}, got {type(value).__name__}")
    return value


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Output items


@dataclass
class OutputText:
    text: str
    type: str = "output_text"


@dataclass
class Refusal:
    refusal: str
    type: str = "refusal"


@dataclass
class UnknownContent:
    type: str


MessageContent = Union[OutputText, Refusal, UnknownContent]


def _decode_content(data: dict) -> MessageContent:
    content_type = _require(data, "type", str)
    if content_type == "output_text":
        text = data.get("text")
        return OutputText(text=text if isinstance(text, str) else "")
    if content_type == "refusal":
        refusal = data.get("refusal")
        return Refusal(refusal=refusal if isinstance(refusal, str) else "")
    return UnknownContent(type=content_type)


@dataclass
class ResponseOutputMessage:
    """Assistant message output item."""

    id: str | None
    role: str | None
    status: str | None
    content: list[MessageContent]
    type: str = "message"

    @classmethod
    def from_dict(cls, data: dict) -> ResponseOutputMessage:
        return cls(
            id=_optional(data, "id", str),
            role=_optional(data, "role", str),
            status=_optional(data, "status", str),
            content=[_decode_content(part) for part in _require(data, "content", list)],
        )

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.content if isinstance(part, OutputText))


@dataclass
class ResponseFunctionCall:
    """A function call the model wants the caller to run."""

    id: str | None
    call_id: str | None
    name: str | None
    arguments: str | None
    status: str | None
    type: str = "function_call"

    @classmethod
    def from_dict(cls, data: dict) -> ResponseFunctionCall:
        return cls(
            id=_optional(data, "id", str),
            call_id=_optional(data, "call_id", str),
            name=_optional(data, "name", str),
            arguments=_optional(data, "arguments", str),
            status=_optional(data, "status", str),
        )


@dataclass
class ReasoningSummary:
    text: str | None


@dataclass
class ResponseReasoningItem:
    id: str | None
    summary: list[ReasoningSummary] | None
    type: str = "reasoning"

    @classmethod
    def from_dict(cls, data: dict) -> ResponseReasoningItem:
        summary = _optional(data, "summary", list)
        return cls(
            id=_optional(data, "id", str),
            summary=(
                [ReasoningSummary(text=_optional(s, "text", str)) for s in summary]
                if summary is not None
                else None
            ),
        )


@dataclass
class ResponseToolCall:
    """Hosted tool invocation (web search, file search, code interpreter, ...)."""

    type: str
    id: str | None
    status: str | None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseToolCall:
        return cls(
            type=_require(data, "type", str),
            id=_optional(data, "id", str),
            status=_optional(data, "status", str),
        )


@dataclass
class UnknownOutputItem:
    type: str


ResponseOutputItem = Union[
    ResponseOutputMessage,
    ResponseFunctionCall,
    ResponseReasoningItem,
    ResponseToolCall,
    UnknownOutputItem,
]

TOOL_CALL_TYPES = frozenset(
    {
        "web_search_call",
        "file_search_call",
        "computer_call",
        "code_interpreter_call",
        "image_generation_call",
        "mcp_call",
        "shell_call",
        "apply_patch_call",
    }
)


def decode_output_item(data: dict) -> ResponseOutputItem:
    """Dispatch an output item on its ``type`` field."""
    item_type = _require(data, "type", str)
    if item_type == "message":
        return ResponseOutputMessage.from_dict(data)
    if item_type == "function_call":
        return ResponseFunctionCall.from_dict(data)
    if item_type == "reasoning":
        return ResponseReasoningItem.from_dict(data)
    if item_type in TOOL_CALL_TYPES:
        return ResponseToolCall.from_dict(data)
    return UnknownOutputItem(type=item_type)


# ---------------------------------------------------------------------------
# Response envelope


@dataclass
class ResponseUsage:
    input_tokens: int | None
    output_tokens: int | None
    total_tokens: int | None
    reasoning_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseUsage:
        details = _optional(data, "output_tokens_details", dict) or {}
        return cls(
            input_tokens=_optional(data, "input_tokens", int),
            output_tokens=_optional(data, "output_tokens", int),
            total_tokens=_optional(data, "total_tokens", int),
            reasoning_tokens=_optional(details, "reasoning_tokens", int),
        )


@dataclass
class ResponseAPIError:
    """Error detail attached to a failed response or an error event."""

    message: str
    type: str
    param: str | None = None
    code: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseAPIError:
        return cls(
            message=_require(data, "message", str),
            type=_require(data, "type", str),
            param=_optional(data, "param", str),
            code=_optional(data, "code", str),
        )


@dataclass
class ResponseIncompleteDetails:
    reason: str | None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseIncompleteDetails:
        return cls(reason=_optional(data, "reason", str))


@dataclass
class ResponseObject:
    """A model response as returned by POST /responses or embedded in stream events."""

    id: str
    object: str
    output: list[ResponseOutputItem]
    created_at: int | None = None
    model: str | None = None
    status: str | None = None
    previous_response_id: str | None = None
    usage: ResponseUsage | None = None
    error: ResponseAPIError | None = None
    incomplete_details: ResponseIncompleteDetails | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseObject:
        usage = _optional(data, "usage", dict)
        error = _optional(data, "error", dict)
        incomplete = _optional(data, "incomplete_details", dict)
        return cls(
            id=_require(data, "id", str),
            object=_require(data, "object", str),
            output=[decode_output_item(item) for item in _require(data, "output", list)],
            created_at=_optional(data, "created_at", int),
            model=_optional(data, "model", str),
            status=_optional(data, "status", str),
            previous_response_id=_optional(data, "previous_response_id", str),
            usage=ResponseUsage.from_dict(usage) if usage is not None else None,
            error=ResponseAPIError.from_dict(error) if error is not None else None,
            incomplete_details=(
                ResponseIncompleteDetails.from_dict(incomplete) if incomplete is not None else None
            ),
        )

    @property
    def output_text(self) -> str:
        """Concatenated text of every output_text part of every message item."""
        return "".join(item.text for item in self.output if isinstance(item, ResponseOutputMessage))


@dataclass
class ResponseDeletionResult:
    id: str
    deleted: bool
    object: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseDeletionResult:
        return cls(
            id=_require(data, "id", str),
            deleted=_require(data, "deleted", bool),
            object=_optional(data, "object", str),
        )


# ---------------------------------------------------------------------------
# Input items and request body


INPUT_ROLES = ("user", "assistant", "system", "developer", "tool")


@dataclass
class ResponseInputMessage:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in INPUT_ROLES:
            raise ValueError(f"Unknown role {self.role!r}; expected one of {INPUT_ROLES}")

    def to_dict(self) -> dict[str, Any]:
        return {"type": "message", "role": self.role, "content": self.content}


@dataclass
class FunctionCallOutput:
    call_id: str
    output: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "function_call_output", "call_id": self.call_id, "output": self.output}


@dataclass
class ReasoningReference:
    id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "reasoning", "id": self.id}


ResponseInputItem = Union[ResponseInputMessage, FunctionCallOutput, ReasoningReference]


def decode_input_item(data: dict) -> ResponseInputItem:
    item_type = _require(data, "type", str)
    if item_type == "message":
        content = data.get("content")
        if isinstance(content, list):
            # Stored messages come back as content parts; keep their text only.
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        return ResponseInputMessage(role=_require(data, "role", str), content=content or "")
    if item_type == "function_call_output":
        return FunctionCallOutput(
            call_id=_require(data, "call_id", str), output=_require(data, "output", str)
        )
    if item_type == "reasoning":
        return ReasoningReference(id=_require(data, "id", str))
    raise ValueError(f"Unsupported input item type: {item_type!r}")


@dataclass
class ResponseInputItemsList:
    data: list[ResponseInputItem]
    has_more: bool | None = None
    first_id: str | None = None
    last_id: str | None = None
    object: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ResponseInputItemsList:
        items = _optional(data, "data", list) or []
        return cls(
            data=[decode_input_item(item) for item in items],
            has_more=_optional(data, "has_more", bool),
            first_id=_optional(data, "first_id", str),
            last_id=_optional(data, "last_id", str),
            object=_optional(data, "object", str),
        )


# ---------------------------------------------------------------------------
# Request configuration: reasoning, text format, tools, tool choice


REASONING_EFFORTS = ("none", "minimal", "low", "medium", "high")
REASONING_SUMMARIES = ("auto", "concise", "detailed")
VERBOSITY_LEVELS = ("low", "medium", "high")
TEXT_FORMAT_TYPES = ("text", "json_object", "json_schema")
TOOL_CHOICE_MODES = ("none", "auto", "required", "function")


def _one_of(name: str, value: str | None, allowed: tuple[str, ...]) -> None:
    if value is not None and value not in allowed:
        raise ValueError(f"Unknown {name} {value!r}; expected one of {allowed}")


def _encode(value: Any) -> Any:
    """Wire form of a request model; plain dicts and strings pass through."""
    if isinstance(value, list):
        return [_encode(item) for item in value]
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if to_dict is not None else value


@dataclass
class ResponseReasoning:
    """Reasoning controls: how hard the model thinks and what summary it returns."""

    effort: str | None = None
    summary: str | None = None

    def __post_init__(self) -> None:
        _one_of("reasoning effort", self.effort, REASONING_EFFORTS)
        _one_of("reasoning summary", self.summary, REASONING_SUMMARIES)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({"effort": self.effort, "summary": self.summary})

    @classmethod
    def from_dict(cls, data: dict) -> ResponseReasoning:
        return cls(effort=_optional(data, "effort", str), summary=_optional(data, "summary", str))


@dataclass
class ResponseTextFormat:
    """Output format: free text, any JSON object, or JSON matching a named schema.

    The Responses API takes the schema fields flat next to ``type``.
    """

    type: str = "text"
    name: str | None = None
    schema: dict[str, Any] | None = None
    description: str | None = None
    strict: bool | None = None

    def __post_init__(self) -> None:
        _one_of("text format", self.type, TEXT_FORMAT_TYPES)
        if self.type == "json_schema" and (self.name is None or self.schema is None):
            raise ValueError("json_schema format requires a name and a schema")

    @classmethod
    def plain(cls) -> ResponseTextFormat:
        return cls()

    @classmethod
    def json_object(cls) -> ResponseTextFormat:
        return cls(type="json_object")

    @classmethod
    def json_schema(
        cls,
        name: str,
        schema: dict[str, Any],
        *,
        description: str | None = None,
        strict: bool | None = None,
    ) -> ResponseTextFormat:
        return cls(
            type="json_schema", name=name, schema=schema, description=description, strict=strict
        )

    def _schema_fields(self) -> dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "schema": self.schema,
                "description": self.description,
                "strict": self.strict,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **self._schema_fields()}

    @classmethod
    def from_dict(cls, data: dict) -> ResponseTextFormat:
        return cls(
            type=_require(data, "type", str),
            name=_optional(data, "name", str),
            schema=_optional(data, "schema", dict),
            description=_optional(data, "description", str),
            strict=_optional(data, "strict", bool),
        )


@dataclass
class ResponseTextConfiguration:
    format: ResponseTextFormat | None = None
    verbosity: str | None = None

    def __post_init__(self) -> None:
        _one_of("verbosity", self.verbosity, VERBOSITY_LEVELS)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "format": self.format.to_dict() if self.format is not None else None,
                "verbosity": self.verbosity,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> ResponseTextConfiguration:
        text_format = _optional(data, "format", dict)
        return cls(
            format=ResponseTextFormat.from_dict(text_format) if text_format is not None else None,
            verbosity=_optional(data, "verbosity", str),
        )


@dataclass
class ResponseToolChoice:
    """none, auto, required, or one named function.

    ``to_dict`` returns the bare mode string for the first three.
    """

    mode: str = "auto"
    function_name: str | None = None

    def __post_init__(self) -> None:
        _one_of("tool choice", self.mode, TOOL_CHOICE_MODES)
        if (self.mode == "function") != (self.function_name is not None):
            raise ValueError("function_name is required for, and only for, mode='function'")

    @classmethod
    def function(cls, name: str) -> ResponseToolChoice:
        return cls(mode="function", function_name=name)

    def to_dict(self) -> str | dict[str, Any]:
        if self.mode == "function":
            return {"type": "function", "name": self.function_name}
        return self.mode


class _Tool:
    """Base for tool definitions: ``type`` plus the set fields of the dataclass."""

    type: ClassVar[str]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **_drop_none(asdict(self))}  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: dict) -> Any:
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        # Missing required fields surface as TypeError from the constructor.
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


@dataclass
class FunctionTool(_Tool):
    """A caller-implemented function the model may call."""

    type: ClassVar[str] = "function"
    name: str
    parameters: dict[str, Any]
    description: str | None = None
    strict: bool = True


@dataclass
class WebSearchTool(_Tool):
    type: ClassVar[str] = "web_search"


@dataclass
class FileSearchTool(_Tool):
    type: ClassVar[str] = "file_search"
    vector_store_ids: list[str]


@dataclass
class CodeInterpreterTool(_Tool):
    type: ClassVar[str] = "code_interpreter"


@dataclass
class ComputerUsePreviewTool(_Tool):
    type: ClassVar[str] = "computer_use_preview"
    display_width: int
    display_height: int
    environment: str


@dataclass
class ImageGenerationTool(_Tool):
    type: ClassVar[str] = "image_generation"


@dataclass
class MCPTool(_Tool):
    """A remote MCP server exposed to the model."""

    type: ClassVar[str] = "mcp"
    server_url: str
    label: str | None = None


@dataclass
class ShellTool(_Tool):
    type: ClassVar[str] = "shell"


@dataclass
class ApplyPatchTool(_Tool):
    type: ClassVar[str] = "apply_patch"


ResponseTool = Union[
    FunctionTool,
    WebSearchTool,
    FileSearchTool,
    CodeInterpreterTool,
    ComputerUsePreviewTool,
    ImageGenerationTool,
    MCPTool,
    ShellTool,
    ApplyPatchTool,
]

_TOOL_CLASSES: dict[str, type[_Tool]] = {
    cls.type: cls
    for cls in (
        FunctionTool,
        WebSearchTool,
        FileSearchTool,
        CodeInterpreterTool,
        ComputerUsePreviewTool,
        ImageGenerationTool,
        MCPTool,
        ShellTool,
        ApplyPatchTool,
    )
}


def decode_response_tool(data: dict) -> ResponseTool:
    """Dispatch a tool definition on its ``type``; unknown types are rejected."""
    tool_type = _require(data, "type", str)
    tool_cls = _TOOL_CLASSES.get(tool_type)
    if tool_cls is None:
        raise ValueError(f"Unknown tool type: {tool_type!r}")
    return tool_cls.from_dict(data)


@dataclass
class ResponseRequest:
    """Body for POST /responses. Unset fields are omitted on the wire."""

    model: str
    input: str | list[ResponseInputItem]
    instructions: str | None = None
    previous_response_id: str | None = None
    store: bool | None = None
    stream: bool | None = None
    text: ResponseTextConfiguration | dict[str, Any] | None = None
    tools: list[ResponseTool] | None = None
    tool_choice: ResponseToolChoice | str | dict[str, Any] | None = None
    parallel_tool_calls: bool | None = None
    reasoning: ResponseReasoning | dict[str, Any] | None = None
    include: list[str] | None = None
    temperature: float | None = None
    top_p: float | None = None
    max_output_tokens: int | None = None
    user: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body = _drop_none(
            {
                "model": self.model,
                "input": _encode(self.input),
                "instructions": self.instructions,
                "previous_response_id": self.previous_response_id,
                "store": self.store,
                "stream": self.stream,
                "text": _encode(self.text),
                "tools": _encode(self.tools),
                "tool_choice": _encode(self.tool_choice),
                "parallel_tool_calls": self.parallel_tool_calls,
                "reasoning": _encode(self.reasoning),
                "include": self.include,
                "temperature": self.temperature,
                "top_p": self.top_p,
                "max_output_tokens": self.max_output_tokens,
                "user": self.user,
            }
        )
        body.update(self.extra)
        return body


# ---------------------------------------------------------------------------
# Chat completions


CHAT_ROLES = ("system", "developer", "user", "assistant", "tool")
SERVICE_TIERS = ("auto", "default", "flex", "priority")

# These model families reject max_tokens and take max_completion_tokens instead.
MAX_COMPLETION_TOKENS_MODELS = ("gpt-5", "o1", "o3", "o4")


@dataclass
class ChatFunctionCall:
    name: str
    arguments: str


@dataclass
class ChatToolCall:
    """A function call requested by the assistant in a chat message."""

    id: str
    function: ChatFunctionCall
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.function.name, "arguments": self.function.arguments},
        }

    @classmethod
    def from_dict(cls, data: dict) -> ChatToolCall:
        function = _require(data, "function", dict)
        return cls(
            id=_require(data, "id", str),
            function=ChatFunctionCall(
                name=_require(function, "name", str),
                arguments=_optional(function, "arguments", str) or "",
            ),
            type=_optional(data, "type", str) or "function",
        )


@dataclass
class ChatMessage:
    role: str
    content: str | None = None
    tool_calls: list[ChatToolCall] | None = None
    tool_call_id: str | None = None

    def __post_init__(self) -> None:
        _one_of("role", self.role, CHAT_ROLES)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "role": self.role,
                "content": self.content,
                "tool_calls": (
                    [call.to_dict() for call in self.tool_calls]
                    if self.tool_calls is not None
                    else None
                ),
                "tool_call_id": self.tool_call_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> ChatMessage:
        tool_calls = _optional(data, "tool_calls", list)
        return cls(
            role=_require(data, "role", str),
            content=_optional(data, "content", str),
            tool_calls=(
                [ChatToolCall.from_dict(call) for call in tool_calls]
                if tool_calls is not None
                else None
            ),
            tool_call_id=_optional(data, "tool_call_id", str),
        )


@dataclass
class ChatTool:
    """A function definition offered to a chat model."""

    name: str
    parameters: dict[str, Any]
    description: str | None = None
    strict: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": _drop_none(
                {
                    "name": self.name,
                    "description": self.description,
                    "parameters": self.parameters,
                    "strict": self.strict,
                }
            ),
        }


class ChatToolChoice(ResponseToolChoice):
    """Tool choice for chat completions; a named function nests under ``function``."""

    def to_dict(self) -> str | dict[str, Any]:
        if self.mode == "function":
            return {"type": "function", "function": {"name": self.function_name}}
        return self.mode


class ChatResponseFormat(ResponseTextFormat):
    """Response format for chat completions; schema fields nest under ``json_schema``."""

    def to_dict(self) -> dict[str, Any]:
        if self.type != "json_schema":
            return {"type": self.type}
        return {"type": self.type, "json_schema": self._schema_fields()}


@dataclass
class ChatStreamOptions:
    include_usage: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"include_usage": self.include_usage}


@dataclass
class ChatCompletionRequest:
    """Body for POST /chat/completions. Unset fields are omitted on the wire."""

    model: str
    messages: list[ChatMessage]
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    stop: str | list[str] | None = None
    max_tokens: int | None = None
    max_completion_tokens: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    logit_bias: dict[int, float] | None = None
    stream: bool | None = None
    stream_options: ChatStreamOptions | None = None
    tools: list[ChatTool] | None = None
    tool_choice: ChatToolChoice | str | dict[str, Any] | None = None
    response_format: ChatResponseFormat | dict[str, Any] | None = None
    reasoning_effort: str | None = None
    parallel_tool_calls: bool | None = None
    store: bool | None = None
    service_tier: str | None = None
    user: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _one_of("reasoning effort", self.reasoning_effort, REASONING_EFFORTS)
        _one_of("service tier", self.service_tier, SERVICE_TIERS)

    def token_limits(self) -> tuple[int | None, int | None]:
        """(max_tokens, max_completion_tokens) as sent for this model.

        A lone max_tokens moves to max_completion_tokens for model families
        that only accept the latter.
        """
        if (
            self.max_completion_tokens is None
            and self.max_tokens is not None
            and self.model.lower().startswith(MAX_COMPLETION_TOKENS_MODELS)
        ):
            return None, self.max_tokens
        return self.max_tokens, self.max_completion_tokens

    def to_dict(self) -> dict[str, Any]:
        max_tokens, max_completion_tokens = self.token_limits()
        body = _drop_none(
            {
                "model": self.model,
                "messages": _encode(self.messages),
                "temperature": self.temperature,
                "top_p": self.top_p,
                "n": self.n,
                "stop": self.stop,
                "max_tokens": max_tokens,
                "max_completion_tokens": max_completion_tokens,
                "presence_penalty": self.presence_penalty,
                "frequency_penalty": self.frequency_penalty,
                # JSON object keys are strings; token ids go over as "50256".
                "logit_bias": (
                    {str(k): v for k, v in self.logit_bias.items()}
                    if self.logit_bias is not None
                    else None
                ),
                "stream": self.stream,
                "stream_options": _encode(self.stream_options),
                "tools": _encode(self.tools),
                "tool_choice": _encode(self.tool_choice),
                "response_format": _encode(self.response_format),
                "reasoning_effort": self.reasoning_effort,
                "parallel_tool_calls": self.parallel_tool_calls,
                "store": self.store,
                "service_tier": self.service_tier,
                "user": self.user,
            }
        )
        body.update(self.extra)
        return body


@dataclass
class ChatUsage:
    prompt_tokens: int | None
    completion_tokens: int | None
    total_tokens: int | None
    reasoning_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatUsage:
        details = _optional(data, "completion_tokens_details", dict) or {}
        return cls(
            prompt_tokens=_optional(data, "prompt_tokens", int),
            completion_tokens=_optional(data, "completion_tokens", int),
            total_tokens=_optional(data, "total_tokens", int),
            reasoning_tokens=_optional(details, "reasoning_tokens", int),
        )


@dataclass
class ChatToolCallDelta:
    """A fragment of a streamed tool call; fragments share an ``index``."""

    index: int
    id: str | None = None
    type: str | None = None
    name: str | None = None
    arguments: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatToolCallDelta:
        function = _optional(data, "function", dict) or {}
        return cls(
            index=_require(data, "index", int),
            id=_optional(data, "id", str),
            type=_optional(data, "type", str),
            name=_optional(function, "name", str),
            arguments=_optional(function, "arguments", str),
        )


@dataclass
class ChatDelta:
    role: str | None = None
    content: str | None = None
    refusal: str | None = None
    tool_calls: list[ChatToolCallDelta] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> ChatDelta:
        return cls(
            role=_optional(data, "role", str),
            content=_optional(data, "content", str),
            refusal=_optional(data, "refusal", str),
            tool_calls=[
                ChatToolCallDelta.from_dict(call)
                for call in _optional(data, "tool_calls", list) or []
            ],
        )


@dataclass
class ChatChunkChoice:
    index: int
    delta: ChatDelta
    finish_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatChunkChoice:
        delta = _optional(data, "delta", dict)
        return cls(
            index=_require(data, "index", int),
            delta=ChatDelta.from_dict(delta) if delta is not None else ChatDelta(),
            finish_reason=_optional(data, "finish_reason", str),
        )


@dataclass
class ChatCompletionChunk:
    """One chat.completion.chunk record of a streamed chat completion."""

    id: str
    choices: list[ChatChunkChoice]
    raw: dict[str, Any] = field(repr=False)
    object: str | None = None
    created: int | None = None
    model: str | None = None
    usage: ChatUsage | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatCompletionChunk:
        usage = _optional(data, "usage", dict)
        return cls(
            id=_require(data, "id", str),
            choices=[ChatChunkChoice.from_dict(c) for c in _require(data, "choices", list)],
            raw=data,
            object=_optional(data, "object", str),
            created=_optional(data, "created", int),
            model=_optional(data, "model", str),
            usage=ChatUsage.from_dict(usage) if usage is not None else None,
        )

    @property
    def kind(self) -> str:
        return self.object or "chat.completion.chunk"

    @property
    def output_text_delta(self) -> str | None:
        """Content delta of the first choice, if this chunk carries one."""
        for choice in self.choices:
            if choice.index == 0:
                return choice.delta.content
        return None


@dataclass
class ChatChoice:
    index: int
    message: ChatMessage
    finish_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatChoice:
        return cls(
            index=_require(data, "index", int),
            message=ChatMessage.from_dict(_require(data, "message", dict)),
            finish_reason=_optional(data, "finish_reason", str),
        )


@dataclass
class ChatCompletion:
    """A finished chat completion as returned by POST /chat/completions."""

    id: str
    choices: list[ChatChoice]
    object: str | None = None
    created: int | None = None
    model: str | None = None
    usage: ChatUsage | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatCompletion:
        usage = _optional(data, "usage", dict)
        return cls(
            id=_require(data, "id", str),
            choices=[ChatChoice.from_dict(c) for c in _require(data, "choices", list)],
            object=_optional(data, "object", str),
            created=_optional(data, "created", int),
            model=_optional(data, "model", str),
            usage=ChatUsage.from_dict(usage) if usage is not None else None,
        )

    @property
    def output_text(self) -> str:
        """Content of the first choice's message."""
        for choice in self.choices:
            if choice.index == 0:
                return choice.message.content or ""
        return ""
