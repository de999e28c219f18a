"""Best-effort recovery of a JSON array embedded in free-form tool output.

Order of attempts, first success wins:
  1. The whole text parses as a JSON array.
  2. Locate the first '[' and scan forward, tracking bracket depth and
     string state, to the point where depth returns to zero.
  3. Parse that balanced slice.

Brackets inside string literals (including escaped quotes) do not move the
depth counter, so trailing prose or brackets after the array are harmless.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ExtractionFailure(Enum):
    NO_ARRAY_FOUND = "no_array_found"
    INCOMPLETE_ARRAY = "incomplete_array"


@dataclass(frozen=True)
class Extraction:
    value: list | None = None
    failure: ExtractionFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _loads(text: str) -> Any:
    """json.loads restricted to strict JSON. Raises ValueError on any failure."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise ValueError("JSON nested too deeply") from exc


def find_balanced_array(text: str, start: int) -> int | None:
    """Return the index of the ']' closing the array that opens at ``start``.

    Returns None if the text ends before depth returns to zero.
    """
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]

        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return i

    return None


def extract_json_array(text: Any) -> Extraction:
    """Recover the JSON array embedded in ``text``. Never raises."""
    if not isinstance(text, str):
        return Extraction(failure=ExtractionFailure.NO_ARRAY_FOUND)

    try:
        parsed = _loads(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, list):
        return Extraction(value=parsed)

    start = text.find("[")
    if start == -1:
        return Extraction(failure=ExtractionFailure.NO_ARRAY_FOUND)

    end = find_balanced_array(text, start)
    if end is None:
        return Extraction(failure=ExtractionFailure.INCOMPLETE_ARRAY)

    try:
        parsed = _loads(text[start:end + 1])
    except ValueError:
        return Extraction(failure=ExtractionFailure.INCOMPLETE_ARRAY)
    if not isinstance(parsed, list):
        return Extraction(failure=ExtractionFailure.INCOMPLETE_ARRAY)
    return Extraction(value=parsed)
