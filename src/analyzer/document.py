"""
Document Analyzer

Runs grammar, sentiment and entity analysis concurrently, then derives
readability and statistics locally and assembles one report.

Each sub-analysis resolves to a value even when its service is down, so
the report always has every section filled in.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar

from src.integrations.config import ExternalAPIClients
from src.integrations.languagetool import apply_corrections
from src.models import (
    DocumentAnalysisReport,
    EntityAnalysis,
    GrammarFinding,
    GrammarSummary,
    SentimentResult,
)
from src.utils.text import lexicon_sentiment

from .readability import compute_readability

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GrammarChecker(Protocol):
    async def check_grammar(self, text: str, language: str = ...) -> List[GrammarFinding]:
        ...


class SentimentAnalyzer(Protocol):
    async def analyze_sentiment(self, text: str) -> SentimentResult:
        ...


class EntityExtractor(Protocol):
    async def analyze_entities(self, text: str) -> EntityAnalysis:
        ...


class DocumentAnalyzer:
    """
    Fan-out/join analysis of a single document.

    Usage:
        async with ExternalAPIClients() as clients:
            analyzer = DocumentAnalyzer.from_clients(clients)
            report = await analyzer.analyze_document(text)
    """

    def __init__(
        self,
        grammar: GrammarChecker,
        sentiment: SentimentAnalyzer,
        entities: EntityExtractor,
    ):
        self.grammar = grammar
        self.sentiment = sentiment
        self.entities = entities

    @classmethod
    def from_clients(cls, clients: ExternalAPIClients) -> "DocumentAnalyzer":
        return cls(
            grammar=clients.languagetool,
            sentiment=clients.huggingface,
            entities=clients.textrazor,
        )

    async def analyze_document(self, text: str) -> DocumentAnalysisReport:
        """
        Analyze a document.

        Args:
            text: Document text (may be empty)

        Returns:
            DocumentAnalysisReport with grammar, sentiment, entities,
            readability and stats
        """
        start_time = datetime.utcnow()
        logger.info(f"Analyzing document ({len(text)} chars)")

        findings, sentiment, entities = await asyncio.gather(
            self._run_safe("grammar", lambda: self.grammar.check_grammar(text), list),
            self._run_safe(
                "sentiment",
                lambda: self.sentiment.analyze_sentiment(text),
                lambda: lexicon_sentiment(text),
            ),
            self._run_safe(
                "entities",
                lambda: self.entities.analyze_entities(text),
                EntityAnalysis.empty,
            ),
        )

        readability, stats = compute_readability(text)

        grammar = GrammarSummary(
            error_count=len(findings),
            errors=tuple(findings),
            corrected_text=apply_corrections(text, findings) if findings else None,
        )

        duration = (datetime.utcnow() - start_time).total_seconds()
        logger.info(
            f"Document analyzed in {duration:.2f}s: {stats.word_count} words, "
            f"{grammar.error_count} grammar issues, sentiment={sentiment.label.value}"
        )

        return DocumentAnalysisReport(
            grammar=grammar,
            sentiment=sentiment,
            entities=entities,
            readability=readability,
            stats=stats,
        )

    async def _run_safe(
        self,
        name: str,
        call: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """Run one sub-analysis; any failure becomes its fallback value."""
        try:
            return await call()
        except Exception as e:
            logger.error(f"{name} analysis failed, using fallback: {e}")
            return fallback()


async def analyze_document(
    text: str,
    clients: Optional[ExternalAPIClients] = None,
) -> DocumentAnalysisReport:
    """
    Analyze a document with clients built from the environment.

    Pass ``clients`` to reuse open connections; otherwise a temporary
    set is created and closed.
    """
    if clients is not None:
        return await DocumentAnalyzer.from_clients(clients).analyze_document(text)

    async with ExternalAPIClients() as owned:
        return await DocumentAnalyzer.from_clients(owned).analyze_document(text)
