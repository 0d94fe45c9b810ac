"""
Command-line interface.

``fib`` prints the arrow-joined sequence, ``access`` reads an index from
standard input and prints the matching element, ``serve`` runs the gRPC
service.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from bounded_fib.accessor import BoundedIndexAccessor
from bounded_fib.config import load_config
from bounded_fib.errors import BoundedFibError, ConfigurationError
from bounded_fib.sequence import MAX_COUNT, generate, render

logger = logging.getLogger(__name__)

PROMPT = "Please enter an array index."


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def print_sequence(count: int, width: Optional[int] = None, stdout: Optional[TextIO] = None,
                   max_count: int = MAX_COUNT) -> str:
    """
    Print the rendered sequence for ``count`` followed by a newline.

    The whole sequence is computed before anything is written, so an overflow
    leaves no partial line behind.

    Returns:
        The rendered line, without the newline
    """
    stdout = stdout or sys.stdout
    line = render(generate(count, width, max_count))
    stdout.write(line + "\n")
    return line


def prompt_index(accessor: BoundedIndexAccessor, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None, raw_index: Optional[str] = None):
    """
    Ask for an index, then print and return the element it selects.

    Args:
        accessor: Accessor over the collection to index
        stdin: Stream to read the index line from when ``raw_index`` is None
        stdout: Stream for the prompt and the result
        raw_index: Index text supplied up front instead of reading a line

    Raises:
        ParseError: If the line is not a non-negative integer
        IndexOutOfRange: If the index is past the end of the collection
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stdout.write(PROMPT + "\n")
    stdout.flush()
    if raw_index is None:
        raw_index = stdin.readline()

    result = accessor.try_access(raw_index)
    if not result.ok:
        raise result.error

    stdout.write(f"The value of the element at index {result.index} is: {result.value}\n")
    return result.value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bounded-fib",
        description="Print a bounded Fibonacci sequence or look up a collection element.",
    )
    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable DEBUG level logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    fib_parser = subparsers.add_parser("fib", help="Print the sequence for COUNT")
    fib_parser.add_argument("count", nargs="?", type=int, help="Length parameter (default from config)")
    fib_parser.add_argument("--width", "-w", type=int, help="Unsigned bit width terms must fit in")

    access_parser = subparsers.add_parser("access", help="Read an index and print the element")
    access_parser.add_argument("--index", "-i", help="Index text; read from stdin when omitted")

    serve_parser = subparsers.add_parser("serve", help="Run the gRPC service")
    serve_parser.add_argument("--host", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, help="Port to bind to")

    return parser


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        stderr.write(f"Error: {e}\n")
        return 1

    if args.command == "fib":
        count = config["count"] if args.count is None else args.count
        width = config["width"] if args.width is None else args.width
        try:
            print_sequence(count, width, stdout, config["max_count"])
        except (BoundedFibError, ValueError) as e:
            logger.error(f"Sequence generation failed for count {count}: {e}")
            stderr.write(f"Error: {e}\n")
            return 1
        return 0

    if args.command == "access":
        accessor = BoundedIndexAccessor(config["collection"])
        try:
            prompt_index(accessor, stdin, stdout, args.index)
        except BoundedFibError as e:
            logger.error(f"Access failed: {e}")
            stderr.write(f"Error: {e}\n")
            return 1
        return 0

    from bounded_fib_service import serve

    if args.host:
        config["host"] = args.host
    if args.port is not None:
        config["port"] = args.port
    logging.getLogger().setLevel(logging.DEBUG if args.debug else logging.INFO)
    serve(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
