"""
Document AI Services - Data Models

Normalized result shapes shared by the analysis adapters and the
document analyzer. Every model is immutable once built.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SentimentLabel(str, Enum):
    """Overall polarity of a text."""
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class ConfidenceTier(str, Enum):
    """Qualitative confidence derived from a raw 0-1 score."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_score(cls, score: float) -> "ConfidenceTier":
        """Map a 0-1 probability to a tier (>0.8 High, >0.6 Medium)."""
        if score > 0.8:
            return cls.HIGH
        if score > 0.6:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True)
class GrammarFinding:
    """A single issue reported by the grammar checker."""
    message: str
    short_message: str
    suggestions: Tuple[str, ...]
    offset: int
    length: int
    rule_id: str
    category: str
    original_text: str


@dataclass(frozen=True)
class Entity:
    """Named entity found in the text."""
    text: str
    type: str
    relevance: int
    confidence: int
    wiki_link: Optional[str] = None


@dataclass(frozen=True)
class Topic:
    """Topic label with a 0-100 score."""
    label: str
    score: int


@dataclass(frozen=True)
class EntityAnalysis:
    """Top entities and topics for a text."""
    entities: Tuple[Entity, ...] = ()
    topics: Tuple[Topic, ...] = ()

    @classmethod
    def empty(cls) -> "EntityAnalysis":
        return cls()


@dataclass(frozen=True)
class SentimentResult:
    """Sentiment label with a 0-100 score."""
    label: SentimentLabel
    score: int
    confidence: ConfidenceTier

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(SentimentLabel.NEUTRAL, 50, ConfidenceTier.LOW)


@dataclass(frozen=True)
class GrammarSummary:
    error_count: int = 0
    errors: Tuple[GrammarFinding, ...] = ()
    corrected_text: Optional[str] = None


@dataclass(frozen=True)
class Readability:
    """Flesch reading ease, grade label and reading time in minutes."""
    score: int = 0
    grade_level: str = "Elementary"
    reading_time: int = 0


@dataclass(frozen=True)
class DocumentStats:
    word_count: int = 0
    char_count: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0


@dataclass(frozen=True)
class DocumentAnalysisReport:
    """
    Aggregate result of analyzing one document.

    All five sections are always populated; an unavailable upstream
    service shows up as an empty or neutral section, never a missing one.
    """
    grammar: GrammarSummary = field(default_factory=GrammarSummary)
    sentiment: SentimentResult = field(default_factory=SentimentResult.neutral)
    entities: EntityAnalysis = field(default_factory=EntityAnalysis.empty)
    readability: Readability = field(default_factory=Readability)
    stats: DocumentStats = field(default_factory=DocumentStats)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (enums as values, tuples as lists)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


__all__ = [
    "SentimentLabel",
    "ConfidenceTier",
    "GrammarFinding",
    "Entity",
    "Topic",
    "EntityAnalysis",
    "SentimentResult",
    "GrammarSummary",
    "Readability",
    "DocumentStats",
    "DocumentAnalysisReport",
]
