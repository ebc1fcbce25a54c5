"""
Fixed-template prompts.

Every task prompt has the same shape: instruction lines, the source text
between ``--- SOURCE ---`` / ``--- END SOURCE ---`` markers, then an optional
task tail. The source text is passed through verbatim, whatever its size;
callers that need a limit must enforce it before calling.

Two wordings exist, one tuned for the Gemini cloud models and one for the
local Ollama model.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

SOURCE_START = "--- SOURCE ---"
SOURCE_END = "--- END SOURCE ---"

PING_PROMPT = "Say 'ready' if you can hear me."

FLASHCARD_JSON_EXAMPLE = """[
  {"question":"...", "answer":"..."},
  {"question":"...", "answer":"..."}
]"""

LOCAL_FLASHCARD_JSON_EXAMPLE = """[
  {"question":"...","answer":"..."}
]"""


def build_prompt(hint_lines: Sequence[str], source_text: str, tail_lines: Sequence[str] = ()) -> str:
    lines: List[str] = list(hint_lines)
    lines.append(SOURCE_START)
    lines.append(source_text)
    lines.append(SOURCE_END)
    lines.extend(tail_lines)
    return "\n".join(lines)


@dataclass(frozen=True)
class PromptTemplates:
    ask_hint: str
    ask_thinking_hint: str
    ask_preamble: Sequence[str]
    report_lines: Sequence[str]
    flashcard_lines: Sequence[str]

    def ask(self, question: str, source_text: str, thinking_mode: bool = False) -> str:
        hint = self.ask_thinking_hint if thinking_mode else self.ask_hint
        return build_prompt(
            [hint, *self.ask_preamble, ""],
            source_text,
            ["", f"QUESTION: {question}"],
        )

    def report(self, source_text: str) -> str:
        return build_prompt([*self.report_lines, ""], source_text)

    def flashcards(self, source_text: str) -> str:
        return build_prompt([*self.flashcard_lines, ""], source_text)

    def ping(self) -> str:
        return PING_PROMPT


CLOUD_TEMPLATES = PromptTemplates(
    ask_hint="Answer concisely and clearly.",
    ask_thinking_hint="Think step by step, state key assumptions, then answer concisely.",
    ask_preamble=("Use the SOURCE when relevant. If the SOURCE lacks the answer, say so briefly.",),
    report_lines=(
        "Create a crisp, well-structured report with short sections:",
        "- Key ideas",
        "- Evidence",
        "- Uncertainties / open questions",
        "End with 3 actionable next steps.",
    ),
    flashcard_lines=(
        "From the SOURCE, produce 8–12 flashcards as pure JSON (no prose):",
        FLASHCARD_JSON_EXAMPLE,
        "Short Q/A, one idea per card. No markdown, only JSON.",
    ),
)

LOCAL_TEMPLATES = PromptTemplates(
    ask_hint="Answer clearly and concisely.",
    ask_thinking_hint="Think step by step, state assumptions clearly, then answer concisely.",
    ask_preamble=(),
    report_lines=(
        "Write a short, well-structured report with sections:",
        "- Key ideas",
        "- Evidence",
        "- Open questions",
        "End with 3 actionable next steps.",
    ),
    flashcard_lines=(
        "Create 8–12 concise Q/A flashcards as JSON:",
        LOCAL_FLASHCARD_JSON_EXAMPLE,
        "Keep answers short and factual.",
    ),
)

TEMPLATES: Dict[str, PromptTemplates] = {
    "gemini": CLOUD_TEMPLATES,
    "ollama": LOCAL_TEMPLATES,
}
