"""Tests for client.responses against a mocked HTTP layer."""

import json

import pytest
import responses

from respstream._exceptions import APIError, DecodeError, NotFoundError, RateLimitError
from respstream._streaming import ResponseStream, StreamState
from respstream._types import (
    FunctionCallOutput,
    FunctionTool,
    ResponseInputMessage,
    ResponseObject,
    ResponseReasoning,
    ResponseRequest,
    ResponseTextConfiguration,
    ResponseTextFormat,
    ResponseToolChoice,
    WebSearchTool,
)
from tests.utils.sse import response_dict, sse_frame, text_delta, text_done

BASE = "https://api.test.example/v1"


def _sse_body(*frames: dict | str) -> bytes:
    return b"".join(sse_frame(f) for f in frames) + sse_frame("[DONE]")


def _body(call) -> dict:
    return json.loads(call.request.body)


class TestCreate:
    @responses.activate
    def test_create_returns_response_object(self, client):
        responses.add(responses.POST, f"{BASE}/responses", json=response_dict("Hi!"), status=200)

        result = client.responses.create(input="Hello", model="gpt-5-mini")

        assert isinstance(result, ResponseObject)
        assert result.output_text == "Hi!"
        assert _body(responses.calls[0]) == {"model": "gpt-5-mini", "input": "Hello"}

    @responses.activate
    def test_create_serializes_input_items_and_options(self, client):
        responses.add(responses.POST, f"{BASE}/responses", json=response_dict(), status=200)

        client.responses.create(
            input=[
                ResponseInputMessage(role="user", content="Weather?"),
                FunctionCallOutput(call_id="call_1", output='{"temp": 20}'),
            ],
            instructions="Be brief",
            previous_response_id="resp_prev",
            max_output_tokens=100,
        )

        body = _body(responses.calls[0])
        assert body["model"] == "gpt-5"
        assert body["input"] == [
            {"type": "message", "role": "user", "content": "Weather?"},
            {"type": "function_call_output", "call_id": "call_1", "output": '{"temp": 20}'},
        ]
        assert body["instructions"] == "Be brief"
        assert body["previous_response_id"] == "resp_prev"
        assert body["max_output_tokens"] == 100
        assert "stream" not in body

    @responses.activate
    def test_create_with_request_object(self, client):
        responses.add(responses.POST, f"{BASE}/responses", json=response_dict(), status=200)
        request = ResponseRequest(model="gpt-5", input="Hi", extra={"metadata": {"k": "v"}})

        client.responses.create(request)

        assert _body(responses.calls[0])["metadata"] == {"k": "v"}

    @responses.activate
    def test_request_object_excludes_keyword_fields(self, client):
        request = ResponseRequest(model="gpt-5", input="Hi")

        with pytest.raises(ValueError, match="instructions"):
            client.responses.create(request, instructions="Be brief")
        with pytest.raises(ValueError, match="model"):
            client.responses.stream(request, model="gpt-5-mini")
        with pytest.raises(ValueError, match="input"):
            client.responses.create_and_collect_text(request, input="Hello")

        assert len(responses.calls) == 0

    @responses.activate
    def test_create_serializes_typed_configuration(self, client):
        responses.add(responses.POST, f"{BASE}/responses", json=response_dict(), status=200)
        schema = {"type": "object", "properties": {"temp": {"type": "number"}}}

        client.responses.create(
            input="Weather in Paris?",
            tools=[FunctionTool(name="get_weather", parameters=schema), WebSearchTool()],
            tool_choice=ResponseToolChoice.function("get_weather"),
            text=ResponseTextConfiguration(
                format=ResponseTextFormat.json_schema("weather", schema, strict=True),
                verbosity="low",
            ),
            reasoning=ResponseReasoning(effort="low", summary="auto"),
        )

        body = _body(responses.calls[0])
        assert body["tools"] == [
            {"type": "function", "name": "get_weather", "parameters": schema, "strict": True},
            {"type": "web_search"},
        ]
        assert body["tool_choice"] == {"type": "function", "name": "get_weather"}
        assert body["text"] == {
            "format": {"type": "json_schema", "name": "weather", "schema": schema, "strict": True},
            "verbosity": "low",
        }
        assert body["reasoning"] == {"effort": "low", "summary": "auto"}

    def test_create_requires_input(self, client):
        with pytest.raises(ValueError):
            client.responses.create()

    @responses.activate
    def test_error_envelope_on_success_status(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            json={"error": {"message": "Model overloaded", "type": "server_error"}},
            status=200,
        )
        with pytest.raises(APIError, match="Model overloaded"):
            client.responses.create(input="Hi")

    @responses.activate
    def test_non_json_body(self, client):
        responses.add(responses.POST, f"{BASE}/responses", body="<html>", status=200)
        with pytest.raises(DecodeError):
            client.responses.create(input="Hi")

    @responses.activate
    def test_unexpected_shape(self, client):
        responses.add(responses.POST, f"{BASE}/responses", json={"id": "resp_1"}, status=200)
        with pytest.raises(DecodeError):
            client.responses.create(input="Hi")

    @responses.activate
    def test_stream_flag_returns_stream(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            body=_sse_body(text_delta("x")),
            content_type="text/event-stream",
        )
        stream = client.responses.create(input="Hi", stream=True)

        assert isinstance(stream, ResponseStream)
        assert stream.collect_text() == "x"


class TestStream:
    @responses.activate
    def test_stream_is_lazy(self, client):
        client.responses.stream(input="Hi")
        assert len(responses.calls) == 0

    @responses.activate
    def test_stream_end_to_end(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            body=_sse_body(
                {"type": "response.created", "response": response_dict("", status="in_progress")},
                text_delta("Hello ", seq=1),
                text_delta("world", seq=2),
                text_done("Hello world", seq=3),
                {"type": "response.completed", "response": response_dict("Hello world")},
            ),
            content_type="text/event-stream",
        )

        with client.responses.stream(input="Hi") as stream:
            kinds = [result.unwrap().kind for result in stream]

        assert kinds == [
            "response.created",
            "response.output_text.delta",
            "response.output_text.delta",
            "response.output_text.done",
            "response.completed",
        ]
        assert stream.text == "Hello world"
        assert stream.state is StreamState.COMPLETED

        request = responses.calls[0].request
        assert json.loads(request.body)["stream"] is True
        assert request.headers["Accept"] == "text/event-stream"

    @responses.activate
    def test_http_error_surfaces_as_failed_stream(self, client, no_sleep):
        for _ in range(3):
            responses.add(
                responses.POST,
                f"{BASE}/responses",
                json={"error": {"message": "Slow down"}},
                status=429,
            )
        stream = client.responses.stream(input="Hi")

        results = list(stream)

        assert len(results) == 1
        assert isinstance(results[0].error, RateLimitError)
        assert stream.completion.state is StreamState.FAILED

    @responses.activate
    def test_stream_text_yields_deltas(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            body=_sse_body(text_delta("a"), text_delta(""), text_delta("b"), text_done("ab")),
            content_type="text/event-stream",
        )
        assert list(client.responses.stream_text(input="Hi")) == ["a", "b"]

    @responses.activate
    def test_create_and_collect_text(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            body=_sse_body(text_delta("Hello "), text_delta("world"), text_done("Hello world!")),
            content_type="text/event-stream",
        )
        assert client.responses.create_and_collect_text(input="Hi") == "Hello world!"

    @responses.activate
    def test_collect_text_raises_on_bad_event(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/responses",
            body=_sse_body(text_delta("a"), "{broken"),
            content_type="text/event-stream",
        )
        with pytest.raises(DecodeError):
            client.responses.create_and_collect_text(input="Hi")


class TestStoredResponses:
    @responses.activate
    def test_retrieve(self, client):
        responses.add(
            responses.GET, f"{BASE}/responses/resp_123", json=response_dict("Stored"), status=200
        )
        assert client.responses.retrieve("resp_123").output_text == "Stored"

    @responses.activate
    def test_retrieve_escapes_id(self, client):
        responses.add(
            responses.GET, f"{BASE}/responses/a%2Fb", json=response_dict(), status=200
        )
        client.responses.retrieve("a/b")
        assert responses.calls[0].request.url == f"{BASE}/responses/a%2Fb"

    @responses.activate
    def test_retrieve_not_found(self, client):
        responses.add(
            responses.GET,
            f"{BASE}/responses/resp_missing",
            json={"error": {"message": "No response found"}},
            status=404,
        )
        with pytest.raises(NotFoundError):
            client.responses.retrieve("resp_missing")

    @responses.activate
    def test_delete(self, client):
        responses.add(
            responses.DELETE,
            f"{BASE}/responses/resp_123",
            json={"id": "resp_123", "object": "response.deleted", "deleted": True},
            status=200,
        )
        result = client.responses.delete("resp_123")
        assert result.deleted is True
        assert result.id == "resp_123"

    @responses.activate
    def test_list_input_items(self, client):
        responses.add(
            responses.GET,
            f"{BASE}/responses/resp_123/input_items",
            json={
                "object": "list",
                "data": [
                    {
                        "type": "message",
                        "role": "user",
                        "content": [{"type": "input_text", "text": "Hello"}],
                    },
                    {"type": "function_call_output", "call_id": "call_1", "output": "42"},
                ],
                "has_more": False,
                "first_id": "msg_1",
                "last_id": "fco_1",
            },
            status=200,
        )

        page = client.responses.list_input_items("resp_123")

        assert page.data[0] == ResponseInputMessage(role="user", content="Hello")
        assert page.data[1] == FunctionCallOutput(call_id="call_1", output="42")
        assert page.has_more is False
