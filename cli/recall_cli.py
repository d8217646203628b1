"""Interactive loop: type what you are trying to remember, get the messages."""

import logging
import sys
from typing import TextIO

from .client import ContextAPIClient
from .config import CLIConfig
from .formatter import ContextFormatter

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")


class RecallCLI:
    """Interactive CLI for the context endpoints."""

    def __init__(
        self,
        config: CLIConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        client: ContextAPIClient | None = None,
    ):
        self.config = config
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.client = client or ContextAPIClient(config)
        self.formatter = ContextFormatter(output_stream)

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            while True:
                try:
                    query = self._get_user_input()
                    if not query.strip():
                        continue

                    if query.strip().lower() in EXIT_COMMANDS:
                        self._print("Goodbye!\n")
                        break

                    await self.ask(query)

                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
        finally:
            await self.client.close()

    async def ask(self, query: str) -> None:
        """Send one query and print the result."""
        result = await self.client.find_context(query)
        self.formatter.handle_result(result)
        self._print("\n")

    def _get_user_input(self) -> str:
        self._print("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        scope = (
            "all of your rooms"
            if self.config.room_id is None
            else f"room {self.config.room_id}"
        )
        self._print("Chatrecall CLI - find the messages you are thinking of\n")
        self._print(f"Connected to: {self.config.context_url} (searching {scope})\n")
        self._print("Describe what you remember and press Enter. Type 'exit' to quit.\n\n")

    def _print(self, text: str) -> None:
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    host: str = "localhost",
    port: int = 8080,
    user_id: int = 1,
    room_id: int | None = None,
    query: str | None = None,
    debug: bool = False,
) -> None:
    """Main entry point for the CLI.

    Parameters
    ----------
    host
        Server host.
    port
        Server port.
    user_id
        Requester id sent in the identity header.
    room_id
        Room to search; ``None`` searches every room of the user.
    query
        One-shot query; when omitted the CLI runs interactively.
    debug
        Enable debug logging.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = CLIConfig(host=host, port=port, user_id=user_id, room_id=room_id)
    cli = RecallCLI(config)

    if query is None:
        await cli.run()
        return

    try:
        await cli.ask(query)
    finally:
        await cli.client.close()
