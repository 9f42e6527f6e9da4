import io
import json

from rich.console import Console

from respstream._exceptions import DecodeError
from respstream._streaming import StreamCompletion, StreamState
from respstream.cli.display import (
    CompactDisplay,
    JsonDisplay,
    VerboseDisplay,
    _normalize_markdown,
    create_display,
)
from respstream.streaming import StreamResult, decode_event
from tests.utils.sse import response_dict, text_delta, text_done

COMPLETED = StreamCompletion(StreamState.COMPLETED)


def _result(data: dict) -> StreamResult:
    return StreamResult(event=decode_event(json.dumps(data)))


def _verbose() -> tuple[VerboseDisplay, io.StringIO]:
    buffer = io.StringIO()
    display = VerboseDisplay(
        console=Console(file=buffer, force_terminal=False, color_system=None, width=100)
    )
    return display, buffer


def test_verbose_display_stops_spinner_on_first_output(monkeypatch):
    """The waiting spinner goes away once anything is rendered."""
    active = {"count": 0}

    class DummyProgress:
        def __init__(self, *args, **kwargs):
            pass

        def start(self) -> None:
            active["count"] += 1

        def add_task(self, *args, **kwargs):
            return "dummy-task"

        def stop(self) -> None:
            active["count"] -= 1

    monkeypatch.setattr("respstream.cli.display.Progress", DummyProgress)
    display, _ = _verbose()

    display.start()
    assert active["count"] == 1

    # Lifecycle events alone keep the spinner running.
    display.on_result(
        _result({"type": "response.created", "response": response_dict("", status="in_progress")})
    )
    assert active["count"] == 1

    display.on_result(_result(text_delta("Hi")))
    assert active["count"] == 0

    display.finish(COMPLETED)
    assert active["count"] == 0


def test_verbose_display_streams_text_and_final_panel():
    display, buffer = _verbose()

    for data in (text_delta("Hello "), text_delta("world"), text_done("Hello world!")):
        display.on_result(_result(data))
    display.finish(COMPLETED)

    output = buffer.getvalue()
    assert output.startswith("Hello")
    assert "world!" in output
    assert "Response" in output
    assert display.get_final_text() == "Hello world!"


def test_verbose_display_renders_function_call():
    display, buffer = _verbose()

    display.on_result(
        _result(
            {
                "type": "response.output_item.done",
                "output_index": 0,
                "item": {
                    "type": "function_call",
                    "id": "fc_1",
                    "call_id": "call_1",
                    "name": "get_weather",
                    "arguments": '{"city":"Paris"}',
                },
            }
        )
    )

    output = buffer.getvalue()
    assert "get_weather" in output
    assert '"city": "Paris"' in output


def test_verbose_display_reasoning_summary():
    display, buffer = _verbose()

    display.on_result(
        _result({"type": "response.reasoning_summary_text.delta", "delta": "Weighing options"})
    )
    display.on_result(_result(text_delta("Answer")))

    output = buffer.getvalue()
    assert "Reasoning" in output
    assert "Weighing options" in output
    assert output.rstrip().endswith("Answer")


def test_verbose_display_errors():
    display, buffer = _verbose()

    display.on_result(StreamResult(error=DecodeError("payload was garbage")))
    display.on_result(
        _result({"type": "error", "error": {"message": "Server hiccup", "type": "server_error"}})
    )

    output = buffer.getvalue()
    assert "payload was garbage" in output
    assert "Server hiccup" in output


def test_verbose_display_usage_and_cancel():
    display, buffer = _verbose()
    usage = {"input_tokens": 5, "output_tokens": 7, "total_tokens": 12}

    display.on_result(_result(text_delta("partial")))
    display.on_result(
        _result({"type": "response.completed", "response": response_dict("partial", usage=usage)})
    )
    display.finish(StreamCompletion(StreamState.CANCELLED))

    output = buffer.getvalue()
    assert "Usage: input=5, output=7" in output
    assert "Stream cancelled." in output
    assert "Response" not in output


def test_compact_display_prints_only_text(capsys):
    display = CompactDisplay(console=Console(file=io.StringIO()))

    display.start()
    for data in (
        {"type": "response.created", "response": response_dict("", status="in_progress")},
        text_delta("Hello "),
        text_delta("world"),
        text_done("Hello world!"),
    ):
        display.on_result(_result(data))
    display.finish(COMPLETED)

    assert capsys.readouterr().out == "Hello world!\n"


def test_compact_display_silent_without_text(capsys):
    display = CompactDisplay(console=Console(file=io.StringIO()))
    display.finish(COMPLETED)
    assert capsys.readouterr().out == ""


def test_json_display_emits_raw_events(capsys):
    display = JsonDisplay()

    display.on_result(_result(text_delta("a", seq=1)))
    display.on_result(_result({"type": "response.brand_new", "x": 1}))
    display.on_result(StreamResult(error=DecodeError("bad frame")))

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert lines[0] == text_delta("a", seq=1)
    assert lines[1] == {"type": "response.brand_new", "x": 1}
    assert lines[2] == {"type": "client.error", "message": "bad frame"}


def test_normalize_markdown_task_lists():
    text = "- [ ] todo\n- [x] done"
    assert _normalize_markdown(text) == "- ☐ todo\n- ☑ done"


def test_create_display():
    assert isinstance(create_display("compact"), CompactDisplay)
    assert isinstance(create_display("json"), JsonDisplay)
    assert isinstance(create_display("verbose"), VerboseDisplay)
    assert isinstance(create_display(), VerboseDisplay)
