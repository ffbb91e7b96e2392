"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Request

from app.agent.graph import ChatOrchestrator
from app.agent.llm import GenerationClient
from app.api.handlers import handle_chat, handle_translate
from app.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    TranslateRequest,
    TranslateResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

orchestrator = ChatOrchestrator(GenerationClient.from_config())

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Krishi Mitra backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat ---

@router.post(
    "/chat",
    response_model=ChatResponse,
    responses=_ERRORS,
    tags=["chat"],
    summary="Ask the farming assistant",
    description="Detects the query language, grounds it in the knowledge base and asks the remote model. "
    "Always answers (falls back to a canned answer when the model is unavailable). "
    "400 on empty query, 500 when no provider credential is configured.",
)
async def post_chat(body: ChatRequest, request: Request) -> ChatResponse:
    logger.info("[api:post_chat] IN  query_len=%d language=%s has_image=%s",
                len(body.query or ""), body.language, bool(body.image))
    response = await handle_chat(body, request, orchestrator)
    logger.info("[api:post_chat] OUT confidence=%s sources=%d", response.confidence, len(response.sources))
    return response


@router.post(
    "/translate",
    response_model=TranslateResponse,
    responses=_ERRORS,
    tags=["chat"],
    summary="Translate text to English, Hindi or Marathi",
)
async def post_translate(body: TranslateRequest) -> TranslateResponse:
    logger.info("[api:post_translate] IN  target_lang=%s text_len=%d", body.target_lang, len(body.text or ""))
    return await handle_translate(body, orchestrator)
