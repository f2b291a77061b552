import json
import re
from typing import Any

from vitalflow.utils.errors import MalformedResponseError

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fence(text: str) -> str:
    """Removes a markdown code fence (optionally tagged json) around the text."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_structured(text: str) -> Any:
    """
    Parses provider output as JSON after stripping any code fence.
    Only JSON syntax is checked here; shape validation belongs to the caller.
    """
    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Provider returned invalid JSON: {e}", text=text) from e
