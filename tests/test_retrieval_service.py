"""
Unit tests for keyword retrieval over the knowledge base.
"""

from app.services.knowledge_base import CORPUS, Document, by_category, categories, list_sources
from app.services.retrieval_service import rank_documents, retrieve, score_document


def _doc(title: str, content: str, category: str = "crops", source: str = "src") -> Document:
    return Document(title=title, content=content, category=category, source=source)


class TestRetrieve:
    """Tests for retrieve()."""

    def test_no_matching_terms_returns_empty(self) -> None:
        result = retrieve("xylophone quasar")
        assert result.contents == []
        assert result.sources == []
        assert len(result) == 0

    def test_empty_query_returns_empty(self) -> None:
        assert retrieve("   ").sources == []

    def test_never_more_than_three_and_scores_non_increasing(self) -> None:
        result = retrieve("a e i o u")
        assert len(result.contents) == 3
        scores = [s.score for s in result.ranked]
        assert scores == sorted(scores, reverse=True)
        assert all(score > 0 for score in scores)

    def test_formats_title_content_and_source(self) -> None:
        result = retrieve("tomato")
        assert result.sources[0] == "TNAU Agritech Portal"
        assert result.contents[0].startswith("[Tomato Farming] Tomatoes can be grown")

    def test_market_query_ranking(self) -> None:
        result = retrieve("tomato price")
        assert result.sources == ["AgriMarket Portal", "Ministry of Agriculture", "TNAU Agritech Portal"]

    def test_equal_scores_keep_corpus_order(self) -> None:
        corpus = (
            _doc("First", "neem spray", source="one"),
            _doc("Second", "no match here", source="two"),
            _doc("Third", "neem spray", source="three"),
            _doc("Fourth", "neem neem", source="four"),
        )
        result = retrieve("neem", corpus=corpus)
        assert result.sources == ["four", "one", "three"]

    def test_zero_scores_excluded_even_below_k(self) -> None:
        corpus = (_doc("Only", "neem"), _doc("Other", "nothing"))
        assert len(retrieve("neem", corpus=corpus)) == 1


class TestScoreDocument:
    def test_weights(self) -> None:
        doc = _doc("Onion onion", "onion storage", category="market_prices")
        # content 1 + title 2x2 = 5; "price" is in the category
        assert score_document(["onion"], doc) == 5.0
        assert score_document(["price"], doc) == 1.5

    def test_non_overlapping_substring_count(self) -> None:
        assert score_document(["aa"], _doc("x", "aaaa", category="soil")) == 2.0

    def test_rank_documents_case_insensitive(self) -> None:
        ranked = rank_documents("WHEAT")
        assert ranked[0].document.title == "Wheat Cultivation - Rabi Season"


class TestKnowledgeBase:
    def test_corpus_categories(self) -> None:
        assert categories() == {"crops": 4, "weather": 3, "pest_control": 3, "market_prices": 2, "soil": 2}
        assert len(CORPUS) == 14

    def test_by_category_is_case_insensitive_exact(self) -> None:
        assert [d.title for d in by_category("SOIL")] == ["Soil Testing Importance", "Organic Matter Management"]
        assert by_category("soi") == []

    def test_list_sources_distinct_in_order(self) -> None:
        sources = list_sources()
        assert sources[0] == "ICAR Wheat Guidelines"
        assert sources.count("IMD Advisory") == 1
