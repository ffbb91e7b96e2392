"""
API handlers: call the orchestrator and map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.agent.graph import ChatOrchestrator
from app.core.errors import AppError
from app.schemas.chat import ChatRequest, ChatResponse, TranslateRequest, TranslateResponse

logger = logging.getLogger(__name__)


async def handle_chat(body: ChatRequest, request: Request, orchestrator: ChatOrchestrator) -> ChatResponse:
    """Run the chat pipeline. The client disconnect check lets polling stop early."""
    result = await orchestrator.answer(
        body.query,
        language=body.language,
        image=body.image,
        is_cancelled=request.is_disconnected,
    )
    return ChatResponse(
        answer=result.answer,
        sources=result.sources,
        confidence=result.confidence.value,
        detected_language=result.detected_language.value,
    )


async def handle_translate(body: TranslateRequest, orchestrator: ChatOrchestrator) -> TranslateResponse:
    translated = await orchestrator.translate(body.text, body.target_lang)
    return TranslateResponse(translated_text=translated)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render AppError subclasses as {"error": message} with their status code."""
    if exc.status_code >= 500:
        logger.error("[api] %s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("[api] %s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
