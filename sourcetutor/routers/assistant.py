from fastapi import APIRouter, Depends, HTTPException, Request

from sourcetutor.models import (
    AskRequest,
    AskResponse,
    FlashcardsResponse,
    PingResponse,
    ReportResponse,
    SourceRequest,
)
from sourcetutor.services.llm import SourceAssistant


router = APIRouter(prefix="/api", tags=["assistant"])


def get_assistant(request: Request) -> SourceAssistant:
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None:
        raise HTTPException(status_code=503, detail="Assistant not initialized")
    return assistant


def _error(result):
    return result.error.value if result.error else None


@router.post("/ask", response_model=AskResponse)
def ask(body: AskRequest, assistant: SourceAssistant = Depends(get_assistant)):
    """Answer a question about the given source"""
    result = assistant.ask_question(body.question, body.source, body.thinking_mode)
    return AskResponse(answer=result.value, ok=result.ok, error=_error(result))


@router.post("/report", response_model=ReportResponse)
def report(body: SourceRequest, assistant: SourceAssistant = Depends(get_assistant)):
    """Write a structured report of the source"""
    result = assistant.generate_report(body.source)
    return ReportResponse(report=result.value, ok=result.ok, error=_error(result))


@router.post("/flashcards", response_model=FlashcardsResponse)
def flashcards(body: SourceRequest, assistant: SourceAssistant = Depends(get_assistant)):
    """Generate question/answer flashcards from the source"""
    result = assistant.generate_flashcards(body.source)
    return FlashcardsResponse(cards=result.value, ok=result.ok, error=_error(result))


@router.get("/ping", response_model=PingResponse)
def ping(assistant: SourceAssistant = Depends(get_assistant)):
    result = assistant.ping()
    return PingResponse(reply=result.value, ok=result.ok, error=_error(result))
