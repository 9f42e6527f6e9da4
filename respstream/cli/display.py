"""
CLI display components for streaming response output.

Provides different output formats for rendering stream results:
- VerboseDisplay: Rich terminal UI with spinners, colors, and formatting
- CompactDisplay: Minimal output showing only the output text
- JsonDisplay: Raw JSON events for scripting and debugging
"""

from abc import ABC, abstractmethod
import json
import re

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

from .._streaming import StreamCompletion, StreamState
from .._types import ResponseFunctionCall, ResponseUsage
from ..streaming import (
    ResponseStreamEvent,
    ResponseStreamTextAccumulator,
    StreamEventType,
    StreamResult,
)


class StreamDisplay(ABC):
    """Base class for stream display renderers."""

    def __init__(self, console: Console | None = None) -> None:
        self.accumulator = ResponseStreamTextAccumulator()
        self.console = console or Console()

    def on_result(self, result: StreamResult) -> None:
        """Route one stream outcome to on_event or on_error."""
        if result.event is not None:
            self.accumulator.apply(result.event)
            self.on_event(result.event)
        elif result.error is not None:
            self.on_error(result.error)

    @abstractmethod
    def on_event(self, event: ResponseStreamEvent) -> None:
        """Handle a decoded stream event."""
        pass

    def on_error(self, error: Exception) -> None:
        """Handle a decode or transport error."""
        self.console.print(f"\n[red]❌ Error: {error}[/red]")

    @abstractmethod
    def start(self) -> None:
        """Start the display (called before first event)."""
        pass

    @abstractmethod
    def finish(self, completion: StreamCompletion) -> None:
        """Finish the display (called once, after the last event)."""
        pass

    def get_final_text(self) -> str:
        return self.accumulator.output_text


class CompactDisplay(StreamDisplay):
    """
    Compact display showing only output text.

    No reasoning, tool call details or progress indicators.
    """

    def __init__(self, console: Console | None = None) -> None:
        super().__init__(console=console)
        self.text_chars_emitted = 0

    def start(self) -> None:
        """Start compact display (no-op)."""
        pass

    def on_event(self, event: ResponseStreamEvent) -> None:
        """Print whatever the accumulator gained from this event."""
        text = self.accumulator.output_text
        if len(text) > self.text_chars_emitted:
            print(text[self.text_chars_emitted :], end="", flush=True)
            self.text_chars_emitted = len(text)

    def finish(self, completion: StreamCompletion) -> None:
        """Finish with newline."""
        if self.accumulator.output_text:
            print()


class VerboseDisplay(StreamDisplay):
    """
    Verbose display with rich terminal UI.

    Shows:
    - A spinner until the first output arrives
    - Real-time text streaming
    - Reasoning summaries in a distinct style
    - Function calls in formatted panels
    - Errors and usage
    """

    def __init__(self, console: Console | None = None) -> None:
        super().__init__(console=console)
        self.progress: Progress | None = None
        self.task_id: TaskID | None = None
        self.reasoning_active: bool = False
        self.text_chars_emitted: int = 0
        self.latest_usage: ResponseUsage | None = None

    def start(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=True,
        )
        self.progress.start()
        self.task_id = self.progress.add_task("[yellow]Waiting for response...[/yellow]", total=None)

    def on_event(self, event: ResponseStreamEvent) -> None:
        """Display event with rich formatting."""
        if event.type in (StreamEventType.RESPONSE_CREATED, StreamEventType.RESPONSE_IN_PROGRESS):
            return

        self._stop_progress()

        if event.type is StreamEventType.OUTPUT_TEXT_DELTA:
            self._end_reasoning()
            self._render_text()
            return

        if event.type is StreamEventType.OUTPUT_TEXT_DONE:
            # A done snapshot may extend what the deltas produced.
            self._render_text()
            return

        summary = event.reasoning_summary_delta
        if summary is not None:
            if not self.reasoning_active:
                self.console.print("\n[dim cyan]🧠 Reasoning...[/dim cyan]")
                self.reasoning_active = True
            self.console.print(summary, end="", style="dim italic cyan")
            return

        if event.type is StreamEventType.OUTPUT_ITEM_DONE and isinstance(
            event.item, ResponseFunctionCall
        ):
            self._end_reasoning()
            self._render_function_call(event.item)
            return

        if event.type is StreamEventType.ERROR:
            message = event.error.message if event.error else event.raw.get("message")
            self._render_error(str(message or "Unknown error"))
            return

        if event.response is not None and event.response.usage is not None:
            self.latest_usage = event.response.usage

        if event.type is StreamEventType.RESPONSE_FAILED and event.response is not None:
            error = event.response.error
            self._render_error(error.message if error else "Response failed")

    def on_error(self, error: Exception) -> None:
        self._stop_progress()
        self._render_error(str(error))

    def _render_text(self) -> None:
        text = self.accumulator.output_text
        new_segment = text[self.text_chars_emitted :]
        if new_segment:
            self.console.print(new_segment, end="", style="white")
            self.text_chars_emitted = len(text)

    def _end_reasoning(self) -> None:
        if self.reasoning_active:
            self.console.print()
            self.reasoning_active = False

    def _render_function_call(self, call: ResponseFunctionCall) -> None:
        self.console.print()
        display_name = call.name or "Unknown function"
        self.console.print(
            Panel(
                _format_arguments(call.arguments),
                title=f"[bold cyan]⚡ {display_name}[/bold cyan]",
                border_style="cyan",
            )
        )

    def _render_error(self, message: str) -> None:
        self.console.print(
            Panel(f"[red]{message}[/red]", title="[red]❌ Error[/red]", border_style="red")
        )

    def finish(self, completion: StreamCompletion) -> None:
        self._stop_progress()
        self._end_reasoning()

        if self.latest_usage is not None:
            usage = self.latest_usage
            details: list[str] = []
            if usage.input_tokens is not None:
                details.append(f"input={usage.input_tokens}")
            if usage.output_tokens is not None:
                details.append(f"output={usage.output_tokens}")
            if usage.reasoning_tokens:
                details.append(f"reasoning={usage.reasoning_tokens}")
            if details:
                self.console.print("\n[dim]Usage: " + ", ".join(details) + "[/dim]")

        if completion.state is StreamState.CANCELLED:
            self.console.print("\n[yellow]Stream cancelled.[/yellow]")
            return

        final_text = self.accumulator.output_text
        if final_text.strip():
            self.console.print()
            self.console.print(_build_markdown_panel(final_text))
        elif final_text:
            self.console.print()

    def _stop_progress(self) -> None:
        """Safely stop the active spinner."""
        if self.progress:
            self.progress.stop()
            self.progress = None
        self.task_id = None


class JsonDisplay(StreamDisplay):
    """
    JSON display for raw event streaming.

    Outputs each event payload as a JSON line for machine consumption.
    """

    def start(self) -> None:
        """Start JSON display (no-op)."""
        pass

    def on_event(self, event: ResponseStreamEvent) -> None:
        print(json.dumps(event.raw), flush=True)

    def on_error(self, error: Exception) -> None:
        print(json.dumps({"type": "client.error", "message": str(error)}), flush=True)

    def finish(self, completion: StreamCompletion) -> None:
        """Finish JSON display (no-op)."""
        pass


def _format_arguments(arguments: str | None) -> str:
    if not arguments:
        return "[dim](no arguments)[/dim]"
    try:
        return json.dumps(json.loads(arguments), indent=2)
    except ValueError:
        return arguments


_TASK_LIST_PATTERN = re.compile(r"^(\s*[-*]\s+)\[([ xX])\]\s+(.*)$", flags=re.MULTILINE)


def _normalize_markdown(text: str) -> str:
    """Apply small GitHub-flavored markdown tweaks Rich lacks natively."""

    def replace(match: re.Match[str]) -> str:
        prefix, state, content = match.groups()
        symbol = "☑" if state.lower() == "x" else "☐"
        return f"{prefix}{symbol} {content}"

    return _TASK_LIST_PATTERN.sub(replace, text)


def _build_markdown_panel(text: str, *, title: str = "[cyan]Response[/cyan]") -> Panel:
    """Convert raw markdown text into a Rich panel with consistent styling."""
    content = Markdown(_normalize_markdown(text), code_theme="monokai", justify="left")
    return Panel(content, title=title, border_style="cyan", expand=True)


def create_display(format: str = "verbose") -> StreamDisplay:
    """
    Factory function to create appropriate display.

    Args:
        format: Display format ("verbose", "compact", or "json")
    """
    if format == "compact":
        return CompactDisplay()
    elif format == "json":
        return JsonDisplay()
    else:  # "verbose" is default
        return VerboseDisplay()
