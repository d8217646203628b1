"""Tolerant extraction of ``{summary, messageIds}`` from model text.

The model is told to return bare JSON, but routinely wraps it in code
fences or adds a sentence before / after.  Extraction is loose (strip
fences, slice the outermost braces) and validation is strict (the slice
must be a JSON object).

This module knows nothing about which messages exist.  Ids come back
exactly as the model wrote them (after coercion); grounding them against
the real window happens in the orchestrator.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .errors import UnparsableResponseError
from .models import LlmResult

logger = logging.getLogger(__name__)

# ```json, ```JSON, ``` python, bare ``` -- opening or closing.
CODE_FENCE_PATTERN = re.compile(r"```[^\S\n]*(?:[A-Za-z][\w+.-]*)?\s*")

# Plain ASCII decimal, optionally signed; no underscores or other digit sets.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)

KEY_SUMMARY = "summary"
KEY_MESSAGE_IDS = "messageIds"

DEFAULT_MAX_IDS = 3


def strip_code_fences(text: str) -> str:
    """Remove every fenced code-block marker from *text*."""
    return CODE_FENCE_PATTERN.sub("", text).strip()


def slice_json_object(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` (inclusive).

    Raises:
        UnparsableResponseError: if no such span exists.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise UnparsableResponseError("model response contains no JSON object")
    return text[start : end + 1]


def coerce_message_id(value: Any) -> int | None:
    """Coerce one ``messageIds`` entry to ``int``; ``None`` if impossible."""
    # bool is an int subclass, but ``true`` is never a message id.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        return int(text) if INTEGER_PATTERN.fullmatch(text) else None
    return None


def parse_llm_result(raw: str, *, max_ids: int = DEFAULT_MAX_IDS) -> LlmResult:
    """Parse raw model text into an ``LlmResult``.

    Missing or mistyped ``summary`` becomes ``""``; missing or mistyped
    ``messageIds`` becomes ``[]``.  Individual ids that cannot be
    coerced are skipped.  Duplicates are dropped and the list is cut to
    *max_ids*, keeping the model's order.

    Raises:
        UnparsableResponseError: no brace-delimited object, or the
            object is not valid JSON.
    """
    if raw is None:
        raise UnparsableResponseError("model response is empty")

    candidate = slice_json_object(strip_code_fences(raw))

    try:
        payload = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError) as e:
        raise UnparsableResponseError(f"model response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise UnparsableResponseError("model response is not a JSON object")

    summary = payload.get(KEY_SUMMARY)
    if not isinstance(summary, str):
        summary = ""

    raw_ids = payload.get(KEY_MESSAGE_IDS)
    if not isinstance(raw_ids, list):
        raw_ids = []

    message_ids: list[int] = []
    skipped = 0
    for entry in raw_ids:
        message_id = coerce_message_id(entry)
        if message_id is None:
            skipped += 1
            continue
        if message_id not in message_ids:
            message_ids.append(message_id)

    if skipped:
        logger.debug("Skipped %d non-integer messageIds entries", skipped)

    return LlmResult(summary=summary, message_ids=message_ids[:max_ids])
