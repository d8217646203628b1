"""Renders context responses for the terminal."""

from typing import TextIO

# Long messages are cut in the listing; the full text stays on the server.
MAX_CONTENT_LEN = 200


class ContextFormatter:
    """Prints a summary followed by the matched messages."""

    def __init__(self, output: TextIO):
        self.output = output

    def handle_result(self, result: dict) -> None:
        """Display one ``find_context`` result (success or error)."""
        if result.get("type") == "error":
            message = result.get("message", "Unknown error")
            code = result.get("code", "UNKNOWN")
            self._print(f"\n❌ Error [{code}]: {message}\n")
            return

        summary = result.get("summary", "")
        self._print(f"\nSummary: {summary}\n")

        messages = result.get("messages") or []
        if not messages:
            self._print("(no matching messages)\n")
            return

        for message in messages:
            self._print(self.format_message(message) + "\n")

    @staticmethod
    def format_message(message: dict) -> str:
        """One line per message: ``#id [room R] timestamp  content``."""
        content = " ".join(str(message.get("content", "")).splitlines())
        if len(content) > MAX_CONTENT_LEN:
            content = content[:MAX_CONTENT_LEN] + "..."
        return (
            f"  #{message.get('id', '?')} "
            f"[room {message.get('roomId', '?')}] "
            f"{message.get('createdAt', '')}  {content}"
        )

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
