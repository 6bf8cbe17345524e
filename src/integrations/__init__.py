"""
External API Integrations

Clients for the third-party AI services:
- Groq: Chat completions, load-balanced over several API keys
- LanguageTool: Grammar and spell checking
- TextRazor: Entity and topic extraction
- HuggingFace: Sentiment and summarization
- Config: Unified configuration and client management
"""

from .key_pool import CredentialPool, KeyState, PoolStats
from .groq import (
    GroqClient,
    GroqError,
    ProviderUnavailableError,
    CompletionStream,
    estimate_tokens,
    validate_input,
)
from .languagetool import LanguageToolClient, LanguageToolError, apply_corrections
from .textrazor import TextRazorClient, TextRazorError
from .huggingface import HuggingFaceClient, HuggingFaceError
from .config import ExternalAPIConfig, ExternalAPIClients

__all__ = [
    # Key pool
    "CredentialPool",
    "KeyState",
    "PoolStats",
    # Groq
    "GroqClient",
    "GroqError",
    "ProviderUnavailableError",
    "CompletionStream",
    "estimate_tokens",
    "validate_input",
    # LanguageTool
    "LanguageToolClient",
    "LanguageToolError",
    "apply_corrections",
    # TextRazor
    "TextRazorClient",
    "TextRazorError",
    # HuggingFace
    "HuggingFaceClient",
    "HuggingFaceError",
    # Config
    "ExternalAPIConfig",
    "ExternalAPIClients",
]
