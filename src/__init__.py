"""
Document AI Services

AI layer behind the document converter and editor:
1. Load-balanced Groq completions across several API keys
2. Grammar, sentiment, entity and summarization adapters with local fallbacks
3. One-call document analysis with readability scoring
"""

__version__ = "0.1.0"
