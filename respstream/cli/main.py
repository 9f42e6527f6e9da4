"""
respstream command line: stream one model response to the terminal.

    respstream "Explain SSE in one paragraph" --model gpt-5 --output compact
"""

from __future__ import annotations

import argparse
from collections.abc import Generator
import contextlib
import logging
import signal
import sys
from typing import Any

from respstream import __version__

from .._client import Client
from .._exceptions import RespStreamError
from .._streaming import StreamState
from .display import create_display

CANCELLED_EXIT = 130  # POSIX: 128 + SIGINT (2)


@contextlib.contextmanager
def _sigterm_as_interrupt() -> Generator[None, None, None]:
    """Treat SIGTERM like Ctrl-C while streaming."""

    def _term(_signum: int, _frame: Any) -> None:
        raise KeyboardInterrupt()

    old_term = signal.getsignal(signal.SIGTERM)
    signal.signal(signal.SIGTERM, _term)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, old_term)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="respstream",
        description="Stream a Responses API answer to the terminal",
    )
    parser.add_argument("prompt", help="Input text for the model")
    parser.add_argument("--api-key", help="API key (or set OPENAI_API_KEY environment variable)")
    parser.add_argument("--base-url", help="Custom API base URL (or set OPENAI_BASE_URL)")
    parser.add_argument("--model", default="gpt-5", help="Model name (default: gpt-5)")
    parser.add_argument("--instructions", help="System-level instructions")
    parser.add_argument("--previous-response-id", help="Chain onto a stored response")
    parser.add_argument(
        "--output",
        choices=("verbose", "compact", "json"),
        default="verbose",
        help="Display format (default: verbose)",
    )
    parser.add_argument("--debug", action="store_true", help="Log stream internals to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(argv: list[str]) -> int:
    """Parse arguments, stream the response, and return an exit code."""
    args = build_parser().parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        client = Client(api_key=args.api_key, base_url=args.base_url)
    except RespStreamError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    display = create_display(args.output)
    stream = client.responses.stream(
        input=args.prompt,
        model=args.model,
        instructions=args.instructions,
        previous_response_id=args.previous_response_id,
    )
    display.start()
    try:
        with _sigterm_as_interrupt():
            completion = stream.run(display.on_result, display.finish)
    except KeyboardInterrupt:
        stream.cancel()
        sys.stderr.write("\n✖ Cancelled by user\n")
        return CANCELLED_EXIT
    finally:
        client.close()

    if completion.state is StreamState.FAILED:
        return 1
    if completion.state is StreamState.CANCELLED:
        return CANCELLED_EXIT
    return 0


def main() -> None:
    """Console script entry point."""
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
