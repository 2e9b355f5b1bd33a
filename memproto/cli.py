#!/usr/bin/env python3
"""
memproto Command-Line Entry Point

Runs a single memcached text-protocol command and prints the result.

Usage:
    python -m memproto.cli version
    python -m memproto.cli set mykey "hello world" --expiry 60
    python -m memproto.cli get mykey
    python -m memproto.cli incr counter 5
    python -m memproto.cli --host 10.0.0.5 --port 11211 stats
    python -m memproto.cli --debug delete mykey

Environment Variables:
    MEMPROTO_HOST             - Server address
    MEMPROTO_PORT             - Server port
    MEMPROTO_SOCKET_TIMEOUT   - Read/write timeout in seconds
    MEMPROTO_DEBUG            - Enable debug mode (true/false)
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config.settings import settings
from .errors import MemprotoError
from .protocol.commands import (
    ARITHMETIC_COMMANDS,
    RETRIEVAL_COMMANDS,
    STORAGE_COMMANDS,
    CommandType,
    CommunicationFailure,
)
from .protocol.operations import (
    ArithmeticCommandProcessor,
    RetrievalCommandProcessor,
    StorageCommandProcessor,
)
from .protocol.processor import CommandProcessor


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="memproto: run one memcached text-protocol command",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Server address",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Server port",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.SOCKET_TIMEOUT,
        help="Socket timeout in seconds (blocks indefinitely if unset)",
    )

    parser.add_argument(
        "--expiry",
        type=int,
        default=0,
        help="Expiration in seconds for storage commands",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    parser.add_argument(
        "command",
        type=str.lower,
        choices=[command.name.lower() for command in CommandType],
        help="Command to execute",
    )

    parser.add_argument(
        "arguments",
        nargs="*",
        help="Command arguments",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the requested command. Returns the process exit code."""
    command = CommandType[args.command.upper()]
    failures: List[CommunicationFailure] = []

    def on_failure(sender, failure: CommunicationFailure) -> None:
        failures.append(failure)

    if command in STORAGE_COMMANDS:
        if len(args.arguments) != 2:
            print(f"usage: {args.command} <key> <value>", file=sys.stderr)
            return 2
        processor = StorageCommandProcessor(logger, command, args.host, args.port, timeout=args.timeout)
        processor.set_storage_parameters(args.arguments[0], args.arguments[1], expiry=args.expiry)
    elif command in RETRIEVAL_COMMANDS:
        processor = RetrievalCommandProcessor(logger, command, args.host, args.port, timeout=args.timeout)
        processor.set_keys(*args.arguments)
    elif command in ARITHMETIC_COMMANDS:
        processor = ArithmeticCommandProcessor(logger, command, args.host, args.port, timeout=args.timeout)
        processor.set_command_parameters(*args.arguments)
    else:
        processor = CommandProcessor(logger, command, args.host, args.port, timeout=args.timeout)
        processor.set_command_parameters(*args.arguments)

    processor.subscribe(on_failure)
    with processor:
        response = processor.execute_command()

    for failure in failures:
        print(failure.message, file=sys.stderr)

    print(f"Status: {response.status.name}")
    if isinstance(processor, RetrievalCommandProcessor) and response.is_ok:
        for key, value in processor.get_values(response).items():
            print(f"{key} = {value!r}")
    elif response.response_text:
        print(response.response_text, end="")
    elif response.raw_data:
        print(response.raw_data.decode("ascii", errors="replace"), end="")

    return 0 if response.is_ok else 1


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the command-line client."""
    args = parse_args(argv)

    # Setup logging
    setup_logging(debug=args.debug)
    logger = logging.getLogger("memproto")

    try:
        code = run(args, logger)
    except (MemprotoError, ValueError, IndexError) as e:
        logger.error(f"Invalid command: {e}")
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
