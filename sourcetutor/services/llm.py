from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

import structlog

from sourcetutor.config import Settings
from sourcetutor.errors import ConfigurationError, ErrorKind, Result, TransportError
from sourcetutor.models import Flashcard
from sourcetutor.services.extractor import extract_flashcards
from sourcetutor.services.monitoring import AI_GENERATION_REQUESTS
from sourcetutor.services.prompts import TEMPLATES, PromptTemplates
from sourcetutor.services.transport import (
    CloudTransport,
    GenAIClientAdapter,
    GenerativeModelAdapter,
    LocalTransport,
    ModelTier,
    Transport,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NO_ANSWER = "I couldn’t produce an answer."
ASK_FAILED = "Sorry, I encountered an error while processing your question."
NO_REPORT = "No report text returned."
REPORT_FAILED = "Sorry, I encountered an error while generating the report."
NO_PING_TEXT = "(no text)"


def _build_cloud_client(settings: Settings):
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
    adapter = GenAIClientAdapter if settings.gemini_sdk == "genai" else GenerativeModelAdapter
    try:
        client = adapter.from_api_key(settings.gemini_api_key)
    except ImportError as e:
        raise ConfigurationError(f"Gemini SDK '{settings.gemini_sdk}' is not installed: {e}") from e
    logger.debug("gemini_client_ready", sdk=settings.gemini_sdk, api_key_prefix=settings.gemini_api_key[:6])
    return client


def build_transport(settings: Settings) -> Transport:
    if settings.backend == "gemini":
        return CloudTransport(_build_cloud_client(settings))
    if settings.backend == "ollama":
        return LocalTransport(settings.ollama_url, settings.ollama_model, timeout=settings.ollama_timeout)
    raise ConfigurationError(f"Unknown LLM backend: {settings.backend!r}")


def build_assistant(settings: Settings) -> "SourceAssistant":
    """Create the assistant once at startup; configuration problems surface here."""
    transport = build_transport(settings)
    return SourceAssistant(transport, settings=settings)


class SourceAssistant:
    """
    Question answering, reports and flashcards over a piece of source text.

    Every operation returns a ``Result``. Failures are logged and turned into
    the operation's fallback value; nothing is raised to the caller.
    """

    def __init__(self, transport: Transport, templates: Optional[PromptTemplates] = None, settings: Optional[Settings] = None):
        self.transport = transport
        self.templates = templates or TEMPLATES.get(transport.name, TEMPLATES["gemini"])
        self.settings = settings or Settings(backend=transport.name)

    @property
    def backend(self) -> str:
        return self.transport.name

    def _run(self, kind: str, fallback: T, call: Callable[[], T]) -> Result[T]:
        try:
            value = call()
        except TransportError as e:
            logger.error(f"{kind}_failed", backend=self.backend, error=str(e), status_code=e.status_code)
            AI_GENERATION_REQUESTS.labels(type=kind, status="error").inc()
            return Result.failure(fallback, ErrorKind.TRANSPORT, str(e))
        except Exception as e:
            logger.exception(f"{kind}_failed", backend=self.backend, error=str(e))
            AI_GENERATION_REQUESTS.labels(type=kind, status="error").inc()
            return Result.failure(fallback, ErrorKind.UNEXPECTED, str(e))
        AI_GENERATION_REQUESTS.labels(type=kind, status="success").inc()
        return Result.success(value)

    def ask_question(self, question: str, source_text: str, thinking_mode: bool = False) -> Result[str]:
        def call() -> str:
            prompt = self.templates.ask(question, source_text, thinking_mode)
            tier = ModelTier.DEEP if thinking_mode else ModelTier.FAST
            return self.transport.complete(prompt, tier) or NO_ANSWER

        return self._run("ask_question", ASK_FAILED, call)

    def generate_report(self, source_text: str) -> Result[str]:
        def call() -> str:
            prompt = self.templates.report(source_text)
            return self.transport.complete(prompt, ModelTier.DEEP) or NO_REPORT

        return self._run("generate_report", REPORT_FAILED, call)

    def generate_flashcards(self, source_text: str) -> Result[List[Flashcard]]:
        def call() -> List[Flashcard]:
            prompt = self.templates.flashcards(source_text)
            text = self.transport.complete(prompt, ModelTier.FAST).strip()
            return extract_flashcards(text, max_answer_chars=self.settings.flashcard_summary_max_chars)

        return self._run("generate_flashcards", [], call)

    def ping(self) -> Result[str]:
        def call() -> str:
            return self.transport.complete(self.templates.ping(), ModelTier.FAST) or NO_PING_TEXT

        return self._run("ping", NO_PING_TEXT, call)
