"""
Document AI Services - Analysis

- DocumentAnalyzer: grammar, sentiment and entities in parallel, plus
  readability and statistics, joined into one report
- WritingAssistant: completion-backed editing operations
- Readability: Flesch scores and syllable estimation
"""

from .readability import (
    count_syllables,
    flesch_reading_ease,
    flesch_kincaid_grade,
    grade_label,
    reading_time,
    compute_readability,
)
from .document import DocumentAnalyzer, analyze_document
from .assistant import WritingAssistant, OPERATION_PRESETS, TONE_DESCRIPTIONS

__all__ = [
    # Readability
    "count_syllables",
    "flesch_reading_ease",
    "flesch_kincaid_grade",
    "grade_label",
    "reading_time",
    "compute_readability",
    # Orchestration
    "DocumentAnalyzer",
    "analyze_document",
    # Assistant
    "WritingAssistant",
    "OPERATION_PRESETS",
    "TONE_DESCRIPTIONS",
]
