"""JSON extraction and repair for model output.

Models wrap JSON in markdown fences, add prose before and after it, leave
trailing commas, and get cut off mid-structure when they hit a token
limit. parse_ai_json() handles all four, in this order:

1. Strip ```json / ``` fences.
2. Slice out the first JSON value: from the first ``{`` or ``[`` to its
   balanced closer (or to the end of the text, if it never closes).
3. Parse. On failure, repair: drop trailing commas before ``}``/``]``; if
   structures are still open, cut back to the last complete
   comma-delimited element and close what remains open, innermost first.
4. Parse again. Failure here raises AIParseError — partial or guessed
   data is never returned.

Tier 1 leaf: stdlib only.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_CLOSERS = {"{": "}", "[": "]"}


class AIParseError(ValueError):
    """Model output could not be parsed as JSON, even after repair.

    Attributes:
        preview: The first 300 characters of the raw text, for logs.
    """

    def __init__(self, message: str, preview: str = "") -> None:
        super().__init__(message)
        self.preview = preview


def _open_structures(text: str) -> list[str]:
    """Returns the stack of unclosed ``{``/``[`` in text, ignoring strings."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]" and stack and _CLOSERS[stack[-1]] == char:
            stack.pop()
    return stack


def _extract_json_value(text: str) -> str:
    """Slices the first JSON object or array out of surrounding prose."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    # Never closed — truncated output. Keep everything for the repair pass.
    return text[start:]


def _repair(text: str) -> str:
    """Applies trailing-comma removal and truncation closing."""
    repaired = _TRAILING_COMMA_RE.sub(r"\1", text)

    if not _open_structures(repaired):
        return repaired

    last_comma = repaired.rfind(",")
    last_closer = max(repaired.rfind("]"), repaired.rfind("}"))
    if last_comma > last_closer:
        repaired = repaired[:last_comma]
    repaired = repaired.rstrip()

    stack = _open_structures(repaired)
    return repaired + "".join(_CLOSERS[opener] for opener in reversed(stack))


def parse_ai_json(text: str | None) -> Any:
    """Parses JSON from raw model output, repairing common damage.

    Args:
        text: Raw completion text.

    Returns:
        The parsed JSON value (usually a dict or list).

    Raises:
        AIParseError: If the text is empty or cannot be repaired.
    """
    if text is None or not text.strip():
        raise AIParseError("Empty response from AI")

    cleaned = _extract_json_value(_FENCE_RE.sub("", text).strip())

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("Initial JSON parse failed, attempting repair")

    repaired = _repair(cleaned)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        preview = text[:300]
        logger.warning("Unrepairable AI JSON. First 300 chars: %s", preview)
        raise AIParseError(f"Failed to parse AI response: {exc.msg}", preview) from exc
