from __future__ import annotations

import json
import re

from ..game.models import ContentEntry
from .supplier import SupplierError


_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def _candidates(text: str) -> list[str]:
    fenced = [block.strip() for block in _FENCE_RE.findall(text)]
    if fenced:
        return [b for b in fenced if b]

    # No fences: collect every balanced top-level {...} span.
    spans: list[str] = []
    depth = 0
    start = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and depth > 0:
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                spans.append(text[start:i + 1])
                start = None
    return spans


def extract_json_object(text: str) -> dict:
    """Pull exactly one JSON object out of free-form generator output.

    Accepts a fenced code block or a bare object surrounded by prose. Raises
    SupplierError when there is no object, more than one, or it does not
    parse.
    """
    if not isinstance(text, str) or not text.strip():
        raise SupplierError("empty generator response")

    candidates = _candidates(text)
    if not candidates:
        raise SupplierError("no JSON object in generator response")
    if len(candidates) > 1:
        raise SupplierError(f"ambiguous generator response ({len(candidates)} JSON blocks)")

    try:
        data = json.loads(candidates[0])
    except json.JSONDecodeError as exc:
        raise SupplierError(f"malformed JSON in generator response: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise SupplierError("generator response is not a JSON object")
    return data


def _optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SupplierError("year must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SupplierError(f"year must be an integer, got {value!r}") from exc


def extract_entry(text: str, slot_number: int) -> ContentEntry:
    data = extract_json_object(text)

    number = data.get("number", slot_number)
    if isinstance(number, bool) or not isinstance(number, int) or number != slot_number:
        raise SupplierError(f"generator answered for slot {number!r}, expected {slot_number}")

    title = str(data.get("song") or data.get("title") or "").strip()
    if not title:
        raise SupplierError("generator response has no song title")

    return ContentEntry(
        slot_number=slot_number,
        title=title,
        performer=str(data.get("artist") or "").strip(),
        movie=str(data.get("movie") or "").strip(),
        year=_optional_int(data.get("year")),
        language=str(data.get("language") or "").strip(),
        clue=str(data.get("clue") or "").strip(),
        video_id=str(data.get("videoId") or "").strip(),
    )
