"""
Readability metrics.

Flesch Reading Ease and Flesch-Kincaid grade level from word, sentence
and syllable counts. Syllables are estimated by counting vowel groups.
"""

import math
from typing import Tuple

from src.models import DocumentStats, Readability
from src.utils.text import split_paragraphs, split_sentences, split_words

VOWELS = "aeiouy"
WORDS_PER_MINUTE = 200

# Upper bounds (exclusive) on the grade level for each label
GRADE_LABELS: Tuple[Tuple[float, str], ...] = (
    (6, "Elementary"),
    (9, "Middle School"),
    (12, "High School"),
    (16, "College"),
)


def count_syllables(word: str) -> int:
    """Estimate syllables in a word by counting vowel clusters."""
    word = "".join(c for c in word.lower() if "a" <= c <= "z")
    if len(word) <= 3:
        return 1

    count = 0
    prev_was_vowel = False
    for char in word:
        is_vowel = char in VOWELS
        if is_vowel and not prev_was_vowel:
            count += 1
        prev_was_vowel = is_vowel

    # silent e
    if word.endswith("e") and count > 1:
        count -= 1

    return max(1, count)


def flesch_reading_ease(words_per_sentence: float, syllables_per_word: float) -> int:
    """Flesch Reading Ease, clamped to 0-100 and rounded."""
    score = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    return max(0, min(100, _round_half_up(score)))


def flesch_kincaid_grade(words_per_sentence: float, syllables_per_word: float) -> float:
    return 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59


def grade_label(grade: float) -> str:
    for limit, label in GRADE_LABELS:
        if grade < limit:
            return label
    return "Graduate"


def reading_time(word_count: int) -> int:
    """Minutes to read at 200 words per minute, rounded up."""
    return math.ceil(word_count / WORDS_PER_MINUTE)


def compute_readability(text: str) -> Tuple[Readability, DocumentStats]:
    """Readability and basic statistics for a text."""
    words = split_words(text)
    sentences = split_sentences(text)
    syllables = sum(count_syllables(w) for w in words)

    words_per_sentence = len(words) / max(len(sentences), 1)
    syllables_per_word = syllables / max(len(words), 1)

    readability = Readability(
        score=flesch_reading_ease(words_per_sentence, syllables_per_word),
        grade_level=grade_label(flesch_kincaid_grade(words_per_sentence, syllables_per_word)),
        reading_time=reading_time(len(words)),
    )
    stats = DocumentStats(
        word_count=len(words),
        char_count=len(text),
        sentence_count=len(sentences),
        paragraph_count=len(split_paragraphs(text)),
    )
    return readability, stats


def _round_half_up(value: float) -> int:
    # halves round toward +infinity, not to even
    return math.floor(value + 0.5)
