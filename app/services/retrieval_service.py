"""
Retrieval: keyword scoring over the static knowledge base.

Responsibility: Score every document against the query, keep the top matches
and their sources for the prompt. Pure and synchronous; no I/O.
"""

import logging
from dataclasses import dataclass, field

from app.core.config import RETRIEVAL_TOP_K
from app.services.knowledge_base import CORPUS, Document

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 2.0
CATEGORY_BONUS = 1.5


@dataclass(frozen=True)
class ScoredDocument:
    document: Document
    score: float


@dataclass
class RetrievalResult:
    """Top documents in rank order, formatted for the prompt."""

    contents: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    ranked: list[ScoredDocument] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sources)


def score_document(terms: list[str], doc: Document) -> float:
    """
    Sum over terms of content hits + 2 x title hits + 1.5 if the category contains the term.

    Hits are non-overlapping substring counts on lower-cased text.
    """
    content = doc.content.lower()
    title = doc.title.lower()
    category = doc.category.lower()
    score = 0.0
    for term in terms:
        score += content.count(term)
        score += TITLE_WEIGHT * title.count(term)
        if term in category:
            score += CATEGORY_BONUS
    return score


def rank_documents(
    query: str, corpus: tuple[Document, ...] = CORPUS
) -> list[ScoredDocument]:
    """Score all documents and return those with score > 0, best first. Ties keep corpus order."""
    terms = (query or "").lower().split()
    if not terms:
        return []
    scored = [ScoredDocument(doc, score_document(terms, doc)) for doc in corpus]
    scored = [s for s in scored if s.score > 0]
    # sorted() is stable, so equal scores stay in corpus order
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def retrieve(
    query: str,
    corpus: tuple[Document, ...] = CORPUS,
    top_k: int = RETRIEVAL_TOP_K,
) -> RetrievalResult:
    """
    Pipeline: split query → score corpus → drop zero scores → stable rank → top k.

    Returns contents as "[title] content" and the matching sources. An empty
    result means no grounding is available; it is not an error.
    """
    logger.info("[retrieval:retrieve] IN  query=%r top_k=%d", query, top_k)
    ranked = rank_documents(query, corpus)[:top_k]
    result = RetrievalResult(
        contents=[f"[{s.document.title}] {s.document.content}" for s in ranked],
        sources=[s.document.source for s in ranked],
        ranked=ranked,
    )
    logger.info(
        "[retrieval:retrieve] OUT hits=%d titles=%s scores=%s",
        len(ranked),
        [s.document.title for s in ranked],
        [s.score for s in ranked],
    )
    return result
