"""
Recovering JSON objects from free-form model output.

Models asked for JSON often wrap it in prose or markdown fences. The
parser looks for balanced-brace spans, tries a strict parse of each in
order, and checks the expected keys.
"""

import json
from typing import Any, Dict, Iterable, Iterator, Optional

from .errors import ParseError


def iter_brace_spans(text: str) -> Iterator[str]:
    """Yield balanced ``{...}`` spans in order of their opening brace.

    Braces inside JSON string literals are ignored. An opening brace that
    never balances yields nothing.
    """
    start = text.find("{")
    while start != -1:
        end = _match_brace(text, start)
        if end is not None:
            yield text[start:end + 1]
        start = text.find("{", start + 1)


def find_json_span(text: str) -> Optional[str]:
    """Return the first balanced brace span, or None."""
    return next(iter_brace_spans(text), None)


def _match_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def parse_json_object(text: str, required_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """Extract the first JSON object in ``text`` that has ``required_keys``.

    Args:
        text: Raw model output
        required_keys: Keys the object must contain

    Returns:
        The decoded object

    Raises:
        ParseError: If no span decodes to an object with the required keys
    """
    required = list(required_keys)
    last_problem = "no JSON object found"

    for span in iter_brace_spans(text):
        try:
            data = json.loads(span)
        except json.JSONDecodeError as e:
            last_problem = f"invalid JSON: {e.msg}"
            continue
        except RecursionError:
            last_problem = "invalid JSON: nested too deeply"
            continue
        missing = [key for key in required if key not in data]
        if missing:
            last_problem = f"missing keys: {missing}"
            continue
        return data

    raise ParseError(f"Could not parse model output: {last_problem}", raw_text=text)
