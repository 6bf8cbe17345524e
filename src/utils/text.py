"""
Local text heuristics.

Tokenizing helpers plus the offline fallbacks used when a remote NLP
service is unavailable: a lexicon-based sentiment score and a naive
extractive summary.
"""

import re
from typing import List

from src.models import ConfidenceTier, SentimentLabel, SentimentResult

SENTENCE_SPLIT = re.compile(r"[.!?]+")
PARAGRAPH_SPLIT = re.compile(r"\n\n+")

POSITIVE_WORDS = (
    "good", "great", "excellent", "amazing", "wonderful",
    "fantastic", "love", "happy", "best", "awesome",
)
NEGATIVE_WORDS = (
    "bad", "terrible", "awful", "horrible", "hate",
    "worst", "poor", "sad", "angry", "disappointing",
)

SUMMARY_SENTENCES = 3


def split_words(text: str) -> List[str]:
    """Whitespace-delimited words, empties removed."""
    return text.split()


def split_sentences(text: str) -> List[str]:
    """Sentences split on runs of . ! ?, blank pieces removed."""
    return [s for s in SENTENCE_SPLIT.split(text) if s.strip()]


def split_paragraphs(text: str) -> List[str]:
    return [p for p in PARAGRAPH_SPLIT.split(text) if p.strip()]


def lexicon_sentiment(text: str) -> SentimentResult:
    """
    Score sentiment by counting tokens that contain a positive or a
    negative keyword.

    A net positive count maps to POSITIVE, net negative to NEGATIVE,
    each scored 20 points per word and capped at 80. A tie is NEUTRAL.
    """
    net = 0
    for token in text.lower().split():
        if any(word in token for word in POSITIVE_WORDS):
            net += 1
        if any(word in token for word in NEGATIVE_WORDS):
            net -= 1

    if net == 0:
        return SentimentResult.neutral()

    label = SentimentLabel.POSITIVE if net > 0 else SentimentLabel.NEGATIVE
    return SentimentResult(label, min(abs(net) * 20, 80), ConfidenceTier.MEDIUM)


def extractive_summary(text: str, sentences: int = SUMMARY_SENTENCES) -> str:
    """First few sentences of the text, rejoined with '. '."""
    kept = [s.strip() for s in split_sentences(text)[:sentences]]
    if not kept:
        return ""
    return ". ".join(kept) + "."
