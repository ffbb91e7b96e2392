"""
LangGraph pipeline: detect language → annotate query → retrieve → assemble prompt → generate.

Strictly sequential per request; only the generate node does I/O. Confidence
is derived from how many knowledge-base sources were retrieved, not from the
model.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from app.agent.llm import CancelCheck, GenerationClient, JobStatus
from app.agent.prompts import PromptTemplate, build_prompt, build_translation_prompt
from app.core.errors import ClientInputError
from app.services.language_service import (
    Language,
    annotate_query,
    detect_language,
    translate_from_english,
)
from app.services.retrieval_service import retrieve

logger = logging.getLogger(__name__)


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def confidence_for(source_count: int) -> Confidence:
    if source_count >= 3:
        return Confidence.HIGH
    if source_count >= 1:
        return Confidence.MEDIUM
    return Confidence.LOW


class ChatState(TypedDict, total=False):
    query: str
    requested_language: Language | None
    image: str | None
    detected_language: Language
    target_language: Language
    annotated_query: str
    retrieval_query: str
    context: list[str]
    sources: list[str]
    template: PromptTemplate
    prompt: str
    answer: str


@dataclass
class ChatResult:
    answer: str
    sources: list[str] = field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    detected_language: Language = Language.EN


class ChatOrchestrator:
    """Runs the per-request chat pipeline against one generation client."""

    def __init__(self, client: GenerationClient) -> None:
        self.client = client
        self._graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(ChatState)

        graph.add_node("detect_language", self._detect_language)
        graph.add_node("annotate_query", self._annotate_query)
        graph.add_node("retrieve_context", self._retrieve_context)
        graph.add_node("assemble_prompt", self._assemble_prompt)
        graph.add_node("generate_answer", self._generate_answer)

        graph.set_entry_point("detect_language")
        graph.add_edge("detect_language", "annotate_query")
        graph.add_edge("annotate_query", "retrieve_context")
        graph.add_edge("retrieve_context", "assemble_prompt")
        graph.add_edge("assemble_prompt", "generate_answer")
        graph.add_edge("generate_answer", END)

        return graph.compile()

    async def _detect_language(self, state: ChatState) -> dict:
        detected = detect_language(state["query"])
        target = state.get("requested_language") or detected
        logger.info("[graph:detect_language] OUT detected=%s target=%s", detected.value, target.value)
        return {"detected_language": detected, "target_language": target}

    async def _annotate_query(self, state: ChatState) -> dict:
        annotated = annotate_query(state["query"], state["detected_language"])
        return {"annotated_query": annotated.text, "retrieval_query": annotated.retrieval_text}

    async def _retrieve_context(self, state: ChatState) -> dict:
        result = retrieve(state["retrieval_query"])
        logger.info("[graph:retrieve_context] OUT sources=%s", result.sources)
        return {"context": result.contents, "sources": result.sources}

    async def _assemble_prompt(self, state: ChatState) -> dict:
        has_image = bool(state.get("image"))
        prompt = build_prompt(
            state["annotated_query"],
            state["context"],
            state["target_language"],
            has_image,
        )
        logger.info("[graph:assemble_prompt] OUT prompt_len=%d has_image=%s", len(prompt), has_image)
        return {"prompt": prompt, "template": PromptTemplate.for_request(has_image)}

    async def _generate_answer(self, state: ChatState, config: RunnableConfig) -> dict:
        is_cancelled = (config.get("configurable") or {}).get("is_cancelled")
        answer = await self.client.generate(
            state["prompt"],
            query=state["query"],
            context=state["context"],
            language=state["target_language"],
            template=state["template"],
            image=state.get("image"),
            is_cancelled=is_cancelled,
        )
        logger.info("[graph:generate_answer] OUT answer_len=%d", len(answer))
        return {"answer": answer}

    async def answer(
        self,
        query: str,
        language: str | None = None,
        image: str | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> ChatResult:
        """
        Answer one farmer query.

        Raises ClientInputError for an empty query (before any network call) and
        CredentialMissingError when the provider is not configured. Any other
        upstream trouble ends in a fallback answer.
        """
        if not query or not query.strip():
            raise ClientInputError("Query cannot be empty")
        q = query.strip()
        logger.info("[orchestrator:answer] START query=%r language=%s has_image=%s", q, language, bool(image))
        initial: ChatState = {
            "query": q,
            "requested_language": Language.parse(language),
            "image": image or None,
        }
        final = await self._graph.ainvoke(
            initial, config={"configurable": {"is_cancelled": is_cancelled}}
        )
        sources = final.get("sources") or []
        result = ChatResult(
            answer=final.get("answer") or "",
            sources=sources,
            confidence=confidence_for(len(sources)),
            detected_language=final["detected_language"],
        )
        logger.info("[orchestrator:answer] END sources=%d confidence=%s", len(sources), result.confidence.value)
        return result

    async def translate(self, text: str, target_lang: str | None) -> str:
        """Translate with the remote model; fall back to dictionary annotation."""
        if not text or not text.strip():
            raise ClientInputError("Text cannot be empty")
        target = Language.parse(target_lang) or Language.EN
        logger.info("[orchestrator:translate] IN  target=%s text_len=%d", target.value, len(text))
        job = await self.client.complete(build_translation_prompt(text.strip(), target))
        if job.status is JobStatus.SUCCEEDED and job.output:
            return job.output
        logger.warning("[orchestrator:translate] remote translation unavailable status=%s", job.status.value)
        return translate_from_english(text.strip(), target)
