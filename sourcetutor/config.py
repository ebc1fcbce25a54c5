from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from sourcetutor.errors import ConfigurationError

BACKENDS = ("gemini", "ollama")
GEMINI_SDKS = ("genai", "generativeai")

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434/api/generate"
DEFAULT_OLLAMA_MODEL = "qwen2.5:7b-instruct-q4_0"


@dataclass(frozen=True)
class Settings:
    backend: str = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_sdk: str = "genai"
    ollama_url: str = DEFAULT_OLLAMA_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    # None means the stream is read without a timeout
    ollama_timeout: Optional[float] = None
    flashcard_summary_max_chars: Optional[int] = 1000
    log_level: str = "INFO"


def _optional_float(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _summary_cap(env: Mapping[str, str]) -> Optional[int]:
    raw = env.get("FLASHCARD_SUMMARY_MAX_CHARS", "").strip()
    if not raw:
        return 1000
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"FLASHCARD_SUMMARY_MAX_CHARS must be an integer, got {raw!r}")
    return value if value > 0 else None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from the environment once, at process start.
    Raises ConfigurationError instead of deferring problems to the first request.
    """
    env = os.environ if environ is None else environ

    backend = env.get("LLM_BACKEND", "gemini").strip().lower()
    if backend not in BACKENDS:
        raise ConfigurationError(f"LLM_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")

    sdk = env.get("GEMINI_SDK", "genai").strip().lower()
    if sdk not in GEMINI_SDKS:
        raise ConfigurationError(f"GEMINI_SDK must be one of {', '.join(GEMINI_SDKS)}, got {sdk!r}")

    api_key = env.get("GEMINI_API_KEY") or None
    if backend == "gemini" and not api_key:
        raise ConfigurationError("GEMINI_API_KEY environment variable is not set")

    return Settings(
        backend=backend,
        gemini_api_key=api_key,
        gemini_sdk=sdk,
        ollama_url=env.get("OLLAMA_URL") or DEFAULT_OLLAMA_URL,
        ollama_model=env.get("OLLAMA_MODEL") or DEFAULT_OLLAMA_MODEL,
        ollama_timeout=_optional_float(env, "OLLAMA_TIMEOUT"),
        flashcard_summary_max_chars=_summary_cap(env),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
