"""
Minimal MCP-style tool server: exposes keyword retrieval and knowledge-base
introspection as a standardized tool interface for external agents.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.services.knowledge_base import by_category, categories, list_sources
from app.services.retrieval_service import retrieve

logger = logging.getLogger(__name__)

# MCP tool schema for discovery / documentation
tools = [
    {
        "name": "search_documents",
        "description": "Keyword search over the farming knowledge base (top 3 matches)",
        "input_schema": {"query": "string"},
    },
    {
        "name": "list_sources",
        "description": "List source attributions in the knowledge base (document introspection)",
        "input_schema": {},
    },
    {
        "name": "documents_by_category",
        "description": "List documents of one category: crops, weather, pest_control, market_prices, soil",
        "input_schema": {"category": "string"},
    },
    {
        "name": "system_stats",
        "description": "Knowledge base status: document count, per-category counts, source count",
        "input_schema": {},
    },
]

mcp_router = APIRouter(tags=["mcp"])


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": tools}


class SearchDocumentsRequest(BaseModel):
    """Request body for MCP tool search_documents."""
    query: str = ""


@mcp_router.post(
    "/tools/search_documents",
    summary="MCP tool: search_documents",
    description="Keyword retrieval over the knowledge base, same scoring as the chat pipeline.",
)
def mcp_search_documents(body: SearchDocumentsRequest) -> dict[str, list[dict[str, Any]]]:
    logger.info("MCP tool called: search_documents")
    query = (body.query or "").strip()
    if not query:
        return {"results": []}
    result = retrieve(query)
    results = [
        {
            "title": s.document.title,
            "text": s.document.content,
            "category": s.document.category,
            "source": s.document.source,
            "score": s.score,
        }
        for s in result.ranked
    ]
    return {"results": results}


# --- list_sources ---

@mcp_router.post(
    "/tools/list_sources",
    summary="MCP tool: list_sources",
    description="List source attributions in the knowledge base (document introspection).",
)
def mcp_list_sources() -> dict[str, list[str]]:
    logger.info("MCP tool called: list_sources")
    return {"sources": list_sources()}


# --- documents_by_category ---

class DocumentsByCategoryRequest(BaseModel):
    """Request body for MCP tool documents_by_category."""
    category: str = ""


@mcp_router.post(
    "/tools/documents_by_category",
    summary="MCP tool: documents_by_category",
    description="Documents whose category matches (case-insensitive). Unknown categories return an empty list.",
)
def mcp_documents_by_category(body: DocumentsByCategoryRequest) -> dict[str, list[dict[str, str]]]:
    logger.info("MCP tool called: documents_by_category category=%r", body.category)
    docs = by_category(body.category)
    return {
        "documents": [
            {"title": d.title, "content": d.content, "category": d.category, "source": d.source}
            for d in docs
        ]
    }


# --- system_stats ---

@mcp_router.post(
    "/tools/system_stats",
    summary="MCP tool: system_stats",
    description="Knowledge base status: document count, per-category counts, source count.",
)
def mcp_system_stats() -> dict[str, Any]:
    """Return knowledge base status for system observability."""
    logger.info("MCP tool called: system_stats")
    counts = categories()
    sources = list_sources()
    return {
        "total_documents": sum(counts.values()),
        "categories": counts,
        "source_count": len(sources),
        "sources": sources,
    }
