"""Pull a single JSON object out of free-form model output.

Models are asked for bare JSON but routinely wrap it in markdown fences or
surround it with prose. ``extract_json_object`` prefers a fenced block and
otherwise scans from the first ``{`` to its matching ``}``, ignoring braces
that appear inside string literals.
"""

import re
from enum import Enum

from ..errors import MalformedModelOutput

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


class _ScanState(Enum):
    SCANNING = "scanning"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def _fenced_block(text: str) -> str | None:
    for match in _FENCE_RE.finditer(text):
        body = match.group(1).strip()
        if body.startswith("{"):
            return body
    return None


def scan_balanced_object(text: str) -> str:
    """Return the first balanced ``{...}`` in text.

    Raises MalformedModelOutput when there is no ``{`` or it is never closed.
    """
    start = text.find("{")
    if start == -1:
        raise MalformedModelOutput("Model output contains no JSON object")

    state = _ScanState.SCANNING
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if state is _ScanState.ESCAPED:
            state = _ScanState.IN_STRING
        elif state is _ScanState.IN_STRING:
            if ch == "\\":
                state = _ScanState.ESCAPED
            elif ch == '"':
                state = _ScanState.SCANNING
        elif ch == '"':
            state = _ScanState.IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    raise MalformedModelOutput("Model output has an unterminated JSON object")


def extract_json_object(text: str) -> str:
    """Fenced JSON block if present, else the first balanced object in text."""
    if not text or not text.strip():
        raise MalformedModelOutput("Model output is empty")
    fenced = _fenced_block(text)
    if fenced is not None:
        return fenced
    return scan_balanced_object(text)
