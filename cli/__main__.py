"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from .recall_cli import main


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find the chat messages you are trying to remember",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Query to run once; omit for an interactive session",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Server port (default: 8080)",
    )
    parser.add_argument(
        "--user-id",
        type=int,
        required=True,
        help="Your user id (sent as X-User-Id)",
    )
    parser.add_argument(
        "--room-id",
        type=int,
        default=None,
        help="Search only this room (default: every room you belong to)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (shows response headers)",
    )

    return parser.parse_args(argv)


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(
            main(
                host=args.host,
                port=args.port,
                user_id=args.user_id,
                room_id=args.room_id,
                query=args.query,
                debug=args.debug,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
