"""
Tests for the document analyzer.

These tests verify:
- The three remote analyses run concurrently
- A failing analysis is replaced by its fallback, never failing the report
- Grammar corrections and readability are folded into the report
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.analyzer import DocumentAnalyzer, analyze_document
from src.integrations import ExternalAPIClients
from src.models import (
    ConfidenceTier,
    DocumentAnalysisReport,
    Entity,
    EntityAnalysis,
    GrammarFinding,
    SentimentLabel,
    SentimentResult,
    Topic,
)


TYPO_TEXT = "Ths is great."

TYPO = GrammarFinding(
    message="Possible spelling mistake found.",
    short_message="Spelling mistake",
    suggestions=("This",),
    offset=0,
    length=3,
    rule_id="MORFOLOGIK_RULE_EN_US",
    category="Possible Typo",
    original_text="Ths",
)

ENTITIES = EntityAnalysis(
    entities=(Entity("Ada Lovelace", "Person", 91, 76),),
    topics=(Topic("Computing", 99),),
)


def make_analyzer(grammar=None, sentiment=None, entities=None) -> DocumentAnalyzer:
    grammar_client = MagicMock()
    grammar_client.check_grammar = grammar or AsyncMock(return_value=[])
    sentiment_client = MagicMock()
    sentiment_client.analyze_sentiment = sentiment or AsyncMock(
        return_value=SentimentResult.neutral()
    )
    entity_client = MagicMock()
    entity_client.analyze_entities = entities or AsyncMock(return_value=EntityAnalysis.empty())
    return DocumentAnalyzer(grammar_client, sentiment_client, entity_client)


# =============================================================================
# REPORT ASSEMBLY
# =============================================================================

class TestReport:

    @pytest.mark.asyncio
    async def test_sections_come_from_each_service(self):
        positive = SentimentResult(SentimentLabel.POSITIVE, 91, ConfidenceTier.HIGH)
        analyzer = make_analyzer(
            grammar=AsyncMock(return_value=[TYPO]),
            sentiment=AsyncMock(return_value=positive),
            entities=AsyncMock(return_value=ENTITIES),
        )

        report = await analyzer.analyze_document(TYPO_TEXT)

        assert report.grammar.error_count == 1
        assert report.grammar.errors == (TYPO,)
        assert report.grammar.corrected_text == "This is great."
        assert report.sentiment == positive
        assert report.entities == ENTITIES
        assert report.stats.word_count == 3
        assert report.stats.sentence_count == 1

        analyzer.grammar.check_grammar.assert_awaited_once_with(TYPO_TEXT)
        analyzer.sentiment.analyze_sentiment.assert_awaited_once_with(TYPO_TEXT)
        analyzer.entities.analyze_entities.assert_awaited_once_with(TYPO_TEXT)

    @pytest.mark.asyncio
    async def test_no_findings_means_no_corrected_text(self):
        report = await make_analyzer().analyze_document("All good here.")

        assert report.grammar.error_count == 0
        assert report.grammar.errors == ()
        assert report.grammar.corrected_text is None

    @pytest.mark.asyncio
    async def test_empty_document(self):
        report = await make_analyzer().analyze_document("")

        assert report.stats.word_count == 0
        assert report.readability.score == 100
        assert report.readability.grade_level == "Elementary"
        assert report.readability.reading_time == 0
        assert report.sentiment == SentimentResult.neutral()

    @pytest.mark.asyncio
    async def test_to_dict_is_json_ready(self):
        analyzer = make_analyzer(
            grammar=AsyncMock(return_value=[TYPO]),
            entities=AsyncMock(return_value=ENTITIES),
        )
        data = (await analyzer.analyze_document(TYPO_TEXT)).to_dict()

        assert set(data) == {"grammar", "sentiment", "entities", "readability", "stats"}
        assert data["sentiment"] == {"label": "NEUTRAL", "score": 50, "confidence": "Low"}
        assert data["grammar"]["errors"][0]["suggestions"] == ["This"]
        assert data["entities"]["topics"] == [{"label": "Computing", "score": 99}]


# =============================================================================
# CONCURRENCY AND FALLBACKS
# =============================================================================

class TestFanOut:

    @pytest.mark.asyncio
    async def test_services_run_concurrently(self):
        """Each call waits until all three have started."""
        started = []
        all_started = asyncio.Event()

        def waiting(result):
            async def call(text):
                started.append(text)
                if len(started) == 3:
                    all_started.set()
                await asyncio.wait_for(all_started.wait(), timeout=1)
                return result
            return call

        analyzer = make_analyzer(
            grammar=waiting([]),
            sentiment=waiting(SentimentResult.neutral()),
            entities=waiting(EntityAnalysis.empty()),
        )

        report = await analyzer.analyze_document("Some text.")
        assert len(started) == 3
        assert isinstance(report, DocumentAnalysisReport)

    @pytest.mark.asyncio
    async def test_failures_use_fallbacks(self):
        analyzer = make_analyzer(
            grammar=AsyncMock(side_effect=RuntimeError("grammar down")),
            sentiment=AsyncMock(side_effect=RuntimeError("sentiment down")),
            entities=AsyncMock(side_effect=RuntimeError("entities down")),
        )

        report = await analyzer.analyze_document("What a wonderful, amazing release.")

        assert report.grammar.error_count == 0
        assert report.grammar.corrected_text is None
        # sentiment falls back to the local lexicon
        assert report.sentiment.label == SentimentLabel.POSITIVE
        assert report.sentiment.score == 40
        assert report.entities == EntityAnalysis.empty()
        assert report.stats.word_count == 5

    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_others(self):
        analyzer = make_analyzer(
            grammar=AsyncMock(return_value=[TYPO]),
            entities=AsyncMock(side_effect=TimeoutError()),
        )

        report = await analyzer.analyze_document(TYPO_TEXT)

        assert report.grammar.error_count == 1
        assert report.entities == EntityAnalysis.empty()


# =============================================================================
# WITH REAL CLIENTS
# =============================================================================

class TestWithClients:

    @pytest.mark.asyncio
    async def test_unreachable_services_still_produce_report(self, make_config, sample_document):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        config = make_config(textrazor_api_key="tr-key", huggingface_api_key="hf-key")
        async with ExternalAPIClients(config, transport=httpx.MockTransport(handler)) as clients:
            report = await analyze_document(sample_document, clients=clients)

        assert report.grammar.error_count == 0
        assert report.sentiment.label == SentimentLabel.POSITIVE  # "love"
        assert report.entities == EntityAnalysis.empty()
        assert report.stats.word_count == 22
        assert report.stats.paragraph_count == 2

    @pytest.mark.asyncio
    async def test_analyzer_uses_client_adapters(self, make_config, languagetool_payload):
        def handler(request):
            if request.url.host == "api.languagetool.org":
                return httpx.Response(200, json=languagetool_payload)
            return httpx.Response(500)

        async with ExternalAPIClients(
            make_config(), transport=httpx.MockTransport(handler)
        ) as clients:
            analyzer = DocumentAnalyzer.from_clients(clients)
            report = await analyzer.analyze_document("Ths is an tset sentence.")

        assert report.grammar.error_count == 3
        assert report.grammar.corrected_text == "This is a test sentence."
        assert report.sentiment == SentimentResult.neutral()
