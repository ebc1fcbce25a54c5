"""
Best-effort text extraction from Gemini SDK responses.

The SDKs hand back differently shaped objects depending on version: some
expose ``text`` as a method, some as a property, and the raw payload always
carries ``candidates[0].content.parts``. Each strategy below is pure and is
tried in order; the first non-empty string wins.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, List, Optional


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    try:
        return getattr(obj, name, None)
    except Exception:
        # SDK properties such as ``text`` raise when the reply was blocked
        return None


def _is_sequence(value: Any) -> bool:
    # proto RepeatedComposite containers are Sequences, not lists
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _first(items: Any) -> Any:
    if _is_sequence(items) and len(items) > 0:
        return items[0]
    return None


def _text_from_callable(response: Any) -> Optional[str]:
    accessor = _field(response, "text")
    if not callable(accessor):
        return None
    try:
        value = accessor()
    except Exception:
        return None
    return value if isinstance(value, str) else None


def _text_from_string(response: Any) -> Optional[str]:
    value = _field(response, "text")
    return value if isinstance(value, str) else None


def _text_from_candidates(response: Any) -> Optional[str]:
    candidate = _first(_field(response, "candidates"))
    parts = _field(_field(candidate, "content"), "parts")
    if not _is_sequence(parts):
        return None
    texts: List[str] = []
    for part in parts:
        text = _field(part, "text")
        if isinstance(text, str) and text:
            texts.append(text)
    return "\n".join(texts)


STRATEGIES: List[Callable[[Any], Optional[str]]] = [
    _text_from_callable,
    _text_from_string,
    _text_from_candidates,
]


def normalize_response_text(response: Any) -> str:
    """Return the reply text of ``response``, or ``""`` when none can be found."""
    inner = _field(response, "response")
    target = inner if inner is not None else response
    for strategy in STRATEGIES:
        text = strategy(target)
        if text:
            return text
    return ""
