# clai/ai/parser.py
"""
Extraction of shell commands from untrusted model output.

Models do not reliably follow formatting instructions, so extraction falls
back through several shapes before treating the whole text as one command.
"""
import json
import re
from typing import Any, List, Optional

from clai.errors import EmptyResponseError
from clai.utils.logging import get_logger

logger = get_logger(__name__)

FENCE = "```"

_SINGLE_LINE_FENCE = re.compile(r"^```(?:(?:bash|sh|shell|zsh|fish|console)\s+)?(.+?)\s*```$", re.DOTALL)
_EMBEDDED_OBJECT = re.compile(r"\{.*\"commands\".*\}", re.DOTALL)
_EMBEDDED_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """
    Remove one outer markdown fence.

    Handles a fenced block whose first line opens with three backticks and
    whose last line is exactly three backticks, and the single-line form
    ```` ```lang cmd``` ````. Anything else is returned unchanged.
    """
    if not text.startswith(FENCE):
        return text

    lines = text.split("\n")
    if len(lines) > 1 and lines[-1].strip() == FENCE:
        return "\n".join(lines[1:-1]).strip()

    match = _SINGLE_LINE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def _clean_list(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def _load_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError, RecursionError):
        return None


def _commands_from_object(text: str) -> List[str]:
    data = _load_json(text)
    if isinstance(data, dict):
        return _clean_list(data.get("commands"))
    return []


def _commands_from_array(text: str) -> List[str]:
    data = _load_json(text)
    if isinstance(data, list):
        return _clean_list(data)
    return []


def _embedded(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(0) if match else None


def parse_multiple_commands(text: str) -> List[str]:
    """
    Try every structured shape in turn.

    Order: a ``{"commands": [...]}`` object, a bare array, an object
    embedded in surrounding text, then an array embedded in surrounding
    text. Returns an empty list when none yields a command.
    """
    commands = _commands_from_object(text)
    if commands:
        return commands

    commands = _commands_from_array(text)
    if commands:
        return commands

    embedded = _embedded(_EMBEDDED_OBJECT, text)
    if embedded:
        commands = _commands_from_object(embedded)
        if commands:
            return commands

    embedded = _embedded(_EMBEDDED_ARRAY, text)
    if embedded:
        commands = _commands_from_array(embedded)
        if commands:
            return commands

    return []


def extract_commands(content: str, expect_multiple: bool) -> List[str]:
    """
    Extract command candidates from a model response.

    Args:
        content: The raw response content.
        expect_multiple: Whether several commands were requested.

    Returns:
        A non-empty list of trimmed commands.

    Raises:
        EmptyResponseError: If nothing usable remains after cleaning.
    """
    cleaned = content.strip() if content else ""
    if not cleaned:
        raise EmptyResponseError("AI returned empty response")

    cleaned = strip_code_fences(cleaned)
    if not cleaned:
        raise EmptyResponseError("AI returned empty response after parsing")

    if expect_multiple:
        commands = parse_multiple_commands(cleaned)
        if commands:
            logger.debug(f"Extracted {len(commands)} commands from structured response")
            return commands
        logger.debug("No structured command list found, using the whole response")

    return [cleaned]
