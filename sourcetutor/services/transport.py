"""
Backend transports.

``CloudTransport`` talks to Gemini through a small ``GenerativeClient``
capability; the two SDK generations are wrapped by adapters chosen once at
configuration time. ``LocalTransport`` posts to an Ollama server and reads its
newline-delimited JSON stream.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Protocol

import httpx
import structlog

from sourcetutor.errors import TransportError
from sourcetutor.services.logging import log_performance
from sourcetutor.services.normalizer import normalize_response_text

logger = structlog.get_logger(__name__)


class ModelTier(str, Enum):
    FAST = "fast"
    DEEP = "deep"


GEMINI_MODELS: Dict[ModelTier, str] = {
    ModelTier.FAST: "gemini-2.5-flash",
    ModelTier.DEEP: "gemini-2.5-pro",
}


class Transport(Protocol):
    name: str

    def complete(self, prompt: str, tier: ModelTier = ModelTier.FAST) -> str:
        ...


class GenerativeClient(Protocol):
    def generate_content(self, model_name: str, prompt: str) -> Any:
        ...


# ----------------- Gemini SDK adapters -----------------
class GenAIClientAdapter:
    """google-genai: ``client.models.generate_content(model=..., contents=...)``"""

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_api_key(cls, api_key: str) -> "GenAIClientAdapter":
        from google import genai

        return cls(genai.Client(api_key=api_key))

    def generate_content(self, model_name: str, prompt: str) -> Any:
        return self._client.models.generate_content(model=model_name, contents=prompt)


class GenerativeModelAdapter:
    """google-generativeai: ``GenerativeModel(name).generate_content(prompt)``"""

    def __init__(self, sdk):
        self._sdk = sdk

    @classmethod
    def from_api_key(cls, api_key: str) -> "GenerativeModelAdapter":
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        return cls(genai)

    def generate_content(self, model_name: str, prompt: str) -> Any:
        return self._sdk.GenerativeModel(model_name).generate_content(prompt)


class CloudTransport:
    name = "gemini"

    def __init__(self, client: GenerativeClient, models: Optional[Dict[ModelTier, str]] = None):
        self.client = client
        self.models = dict(models or GEMINI_MODELS)

    def model_for(self, tier: ModelTier) -> str:
        return self.models[tier]

    @log_performance("gemini_generate_content")
    def complete(self, prompt: str, tier: ModelTier = ModelTier.FAST) -> str:
        model_name = self.model_for(tier)
        try:
            response = self.client.generate_content(model_name, prompt)
        except Exception as e:
            raise TransportError(f"Gemini request failed: {e}") from e
        return normalize_response_text(response)


# ----------------- Ollama -----------------
def read_ndjson_stream(lines: Iterable[str]) -> str:
    """
    Concatenate the ``response`` fragments of an Ollama NDJSON stream.
    Lines that are not valid JSON objects are skipped.
    """
    parts = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except ValueError:
            logger.debug("ollama_stream_line_skipped", line=line[:200])
            continue
        if not isinstance(payload, dict):
            continue
        fragment = payload.get("response")
        if isinstance(fragment, str) and fragment:
            parts.append(fragment)
    return "".join(parts).strip()


class LocalTransport:
    name = "ollama"

    def __init__(self, url: str, model: str, client: Optional[httpx.Client] = None, timeout: Optional[float] = None):
        self.url = url
        self.model = model
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    @log_performance("ollama_generate")
    def complete(self, prompt: str, tier: ModelTier = ModelTier.FAST) -> str:
        # A single local model serves both tiers
        try:
            with self._client.stream("POST", self.url, json={"model": self.model, "prompt": prompt}) as response:
                if not response.is_success:
                    response.read()
                    body = response.text
                    raise TransportError(
                        f"Ollama error {response.status_code}: {body}",
                        status_code=response.status_code,
                        body=body,
                    )
                return read_ndjson_stream(response.iter_lines())
        except httpx.HTTPError as e:
            raise TransportError(f"Ollama request failed: {e}") from e
