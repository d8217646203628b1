"""Prompt construction for context retrieval.

The prompt is a pure function of its inputs: no clock reads, no
randomness, no reordering.  The same window and query always produce
byte-identical text.
"""

from __future__ import annotations

from collections.abc import Sequence

from chatrecall.configs.system import ContextConfig

from .errors import InvalidInputError
from .models import ContextMode, Message

INSTRUCTION_PROMPT = """You are a work assistant that remembers a team's internal chat.
The goal is to find the conversation that is most relevant to the question in context, rather than exact evidence.
Always answer in {language}, and return JSON only.
Note: messageIds must only contain the real message IDs shown inside [] in the chat message list below.
"""

GLOBAL_MODE_PROMPT = """
Messages from several chat rooms are mixed together here.
Every message is tagged with (roomId=<number>).
Pick the messages most relevant to the user's question; if several rooms are involved, concentrate on the 1-2 dominant rooms.
"""

MESSAGE_LIST_HEADER = "\n\n[Chat messages]\n"
QUESTION_HEADER = "\n[User question]\n"

ANSWER_FORMAT_PROMPT = """
Select at most {max_ids} messages that are most relevant to the question above,
and write a one-line summary of what was being discussed.
Respond in JSON format.

{{
  "summary": "...",
  "messageIds": [100, 99, 97]
}}
"""

DEFAULT_LANGUAGE = "Korean"
DEFAULT_MAX_IDS = 3


def format_message_line(message: Message) -> str:
    """Render one message as ``[id] (roomId=R) (timestamp) sender_<id>: content``."""
    # One message per line, whatever the content holds.
    content = " ".join(message.content.splitlines())
    return (
        f"[{message.id}] "
        f"(roomId={message.room_id}) "
        f"({message.created_at.isoformat()}) "
        f"sender_{message.sender_id}: "
        f"{content}"
    )


def build_prompt(
    messages: Sequence[Message],
    query: str,
    mode: ContextMode,
    *,
    language: str = DEFAULT_LANGUAGE,
    max_ids: int = DEFAULT_MAX_IDS,
) -> str:
    """Build the instruction text for one retrieval request.

    Raises:
        InvalidInputError: if *messages* is empty or *query* is blank.
    """
    if not messages:
        raise InvalidInputError("cannot build a prompt from an empty message window")
    if query is None or not query.strip():
        raise InvalidInputError("query is required")

    parts = [INSTRUCTION_PROMPT.format(language=language)]
    if mode is ContextMode.GLOBAL:
        parts.append(GLOBAL_MODE_PROMPT)

    parts.append(MESSAGE_LIST_HEADER)
    parts.extend(format_message_line(m) + "\n" for m in messages)

    parts.append(QUESTION_HEADER)
    parts.append(query.strip())
    parts.append("\n")
    parts.append(ANSWER_FORMAT_PROMPT.format(max_ids=max_ids))

    return "".join(parts)


class PromptBuilder:
    """``build_prompt`` bound to the configured language and id budget."""

    def __init__(self, config: ContextConfig) -> None:
        self._language = config.language
        self._max_ids = config.max_message_ids

    def build(
        self, messages: Sequence[Message], query: str, mode: ContextMode
    ) -> str:
        return build_prompt(
            messages,
            query,
            mode,
            language=self._language,
            max_ids=self._max_ids,
        )
