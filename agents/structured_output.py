# =============================================================================
# agents/structured_output.py - JSON Extraction from Assistant Replies
# =============================================================================
# The assistant is asked for JSON in plain prompt text (no function calling),
# so replies often wrap the object in prose or markdown fences. This module
# pulls the object out and validates it:
#
#   1. extract_json_object(): first top-level balanced {...} substring
#   2. json.loads()
#   3. pydantic validation against the expected shape
#
# Every failure raises InvalidFormatError. Nothing here retries or repairs.
#
# Usage:
#   data = parse_json_reply(reply, "quiz")
#   questions = validate_items(data.get("questions"), QuizQuestion, "quiz", ...)
# =============================================================================

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def invalid_format(thing: str, details: dict[str, Any] | None = None) -> InvalidFormatError:
    """Build the standard 'Invalid <thing> format received' error."""
    return InvalidFormatError(f"Invalid {thing} format received", details=details)


def extract_json_object(text: str | None) -> str | None:
    """
    Return the first top-level balanced ``{...}`` substring of `text`.

    Braces inside JSON string literals (including escaped quotes) are not
    counted. Returns None if no complete object is found.

    Example:
        extract_json_object('Sure! {"a": {"b": "}"}} Enjoy')  # '{"a": {"b": "}"}}'
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
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
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]

        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)

    return None


def parse_json_reply(text: str | None, thing: str) -> dict[str, Any]:
    """
    Extract and decode the JSON object in an assistant reply.

    Args:
        text: Raw assistant reply
        thing: Human label for errors, e.g. "meal plan" or "quiz"

    Returns:
        Decoded JSON object

    Raises:
        InvalidFormatError: No object found, malformed JSON, or not an object
    """
    candidate = extract_json_object(text)
    if candidate is None:
        logger.error(f"No JSON object found in {thing} reply: {(text or '')[:200]}")
        raise invalid_format(thing)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"Malformed JSON in {thing} reply: {e}")
        raise invalid_format(thing, details={"error": str(e)})

    if not isinstance(data, dict):
        raise invalid_format(thing)

    return data


_LIST_MARKER = re.compile(r"^(\d+\.|•|-|\*)")


def extract_list_items(text: str | None, limit: int = 5) -> list[str]:
    """
    Pull numbered or bulleted lines out of free text.

    Example:
        extract_list_items("Tips:\\n1. Drink water\\n- Sleep well")  # ["Drink water", "Sleep well"]
    """
    items = []
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped or not _LIST_MARKER.match(stripped):
            continue
        item = _LIST_MARKER.sub("", stripped, count=1).strip()
        if item:
            items.append(item)
    return items[:limit]


def validate_model(data: Any, model: type[ModelT], thing: str) -> ModelT:
    """
    Validate one decoded JSON value into `model`.

    Raises:
        InvalidFormatError: If validation fails
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{thing} reply does not match {model.__name__}: {e}")
        raise invalid_format(thing, details={"errors": e.errors(include_url=False, include_context=False)})


def validate_items(
    items: Any,
    model: type[ModelT],
    thing: str,
    make_id: Callable[[int], str],
) -> list[ModelT]:
    """
    Validate a JSON list into models, assigning each item a positional id.

    Args:
        items: Decoded JSON value expected to be a list of objects
        model: Pydantic model for one item (must have an `id` field)
        thing: Human label for errors
        make_id: index -> id, e.g. ``lambda i: f"q_{i}"``

    Raises:
        InvalidFormatError: If `items` is not a list or any item is invalid
    """
    if not isinstance(items, list):
        raise invalid_format(thing)

    validated = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise invalid_format(thing)
        validated.append(validate_model({**item, "id": make_id(index)}, model, thing))

    return validated
