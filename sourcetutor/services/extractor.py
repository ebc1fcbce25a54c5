from __future__ import annotations

import json
import math
import re
import time
from collections.abc import Mapping
from typing import Any, List, Optional

from sourcetutor.models import Flashcard

SUMMARY_QUESTION = "Summary"

# First "[" through the last "]"
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _parse_array(text: str) -> Optional[list]:
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError):
        return None
    return parsed if isinstance(parsed, list) else None


def extract_json_array(text: str) -> Optional[list]:
    """Parse ``text`` as a JSON array, or the first bracketed array inside it."""
    items = _parse_array(text)
    if items is not None:
        return items
    match = _ARRAY_RE.search(text)
    if match:
        return _parse_array(match.group(0))
    return None


def _format_scalar(value: Any) -> str:
    # JSON scalars render the way a JavaScript client would show them
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _as_text(item: Any, key: str) -> str:
    if not isinstance(item, Mapping):
        return ""
    value = item.get(key)
    if value is None:
        return ""
    return _format_scalar(value).strip()


def extract_flashcards(text: str, max_answer_chars: Optional[int] = 1000, now_ms: Optional[int] = None) -> List[Flashcard]:
    """
    Turn model output into flashcards.
    Always returns at least one card: when no JSON array can be recovered the
    raw text becomes a single "Summary" card.
    """
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    items = extract_json_array(text) or []

    cards = [
        Flashcard(
            id=f"flashcard-{stamp}-{i}",
            question=_as_text(item, "question"),
            answer=_as_text(item, "answer"),
        )
        for i, item in enumerate(items)
    ]
    if cards:
        return cards

    answer = text if max_answer_chars is None else text[:max_answer_chars]
    return [Flashcard(id=f"flashcard-{stamp}-0", question=SUMMARY_QUESTION, answer=answer)]
