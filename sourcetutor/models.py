from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    id: str
    question: str
    answer: str


# ----------------- API schemas -----------------
class AskRequest(BaseModel):
    question: str
    source: str = ""
    thinking_mode: bool = False


class SourceRequest(BaseModel):
    source: str = ""


class AskResponse(BaseModel):
    answer: str
    ok: bool
    error: Optional[str] = None


class ReportResponse(BaseModel):
    report: str
    ok: bool
    error: Optional[str] = None


class FlashcardsResponse(BaseModel):
    cards: List[Flashcard] = Field(default_factory=list)
    ok: bool
    error: Optional[str] = None


class PingResponse(BaseModel):
    reply: str
    ok: bool
    error: Optional[str] = None
