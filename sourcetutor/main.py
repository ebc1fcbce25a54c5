import time
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sourcetutor.config import Settings, load_settings
from sourcetutor.routers import assistant as assistant_router
from sourcetutor.services.llm import SourceAssistant, build_assistant
from sourcetutor.services.logging import configure_logging, log_api_request
from sourcetutor.services.monitoring import REQUEST_COUNT, REQUEST_DURATION, get_metrics, health_checker

logger = structlog.get_logger()


def create_app(assistant: Optional[SourceAssistant] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Run with ``uvicorn sourcetutor.main:create_app --factory``.

    Settings and the backend client are resolved here, once, so a missing API
    key stops the process at startup.
    """
    if assistant is None:
        settings = settings or load_settings()
        configure_logging(settings.log_level)
        assistant = build_assistant(settings)
    else:
        configure_logging(settings.log_level if settings else "INFO")

    app = FastAPI(
        title="Source Tutor",
        description="Ask questions, write reports and make flashcards from source text with Gemini or Ollama",
        version="1.0.0"
    )
    app.state.assistant = assistant

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        log_api_request(request)

        try:
            response = await call_next(request)
        except Exception as e:
            log_api_request(request, duration=time.time() - start_time, error=e)
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(process_time)

        log_api_request(request, status_code=response.status_code, duration=process_time)
        return response

    # ----------------- Health & Monitoring -----------------
    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        return health_checker.get_health_status(request.app.state.assistant)

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint"""
        return get_metrics()

    # ----------------- Shutdown -----------------
    @app.on_event("shutdown")
    def on_shutdown():
        close = getattr(assistant.transport, "close", None)
        if callable(close):
            close()
            logger.info("transport_closed", backend=assistant.backend)

    app.include_router(assistant_router.router)

    logger.info("app_started", backend=assistant.backend)
    return app
