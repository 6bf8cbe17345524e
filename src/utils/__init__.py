"""Utility modules for the document AI services."""

from .config import Settings, get_settings
from .text import (
    split_words,
    split_sentences,
    split_paragraphs,
    lexicon_sentiment,
    extractive_summary,
)

__all__ = [
    "Settings",
    "get_settings",
    # Text heuristics
    "split_words",
    "split_sentences",
    "split_paragraphs",
    "lexicon_sentiment",
    "extractive_summary",
]
