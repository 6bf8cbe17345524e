"""
External API Configuration

Configuration and factory for the AI service clients.
Loads credentials from application settings (environment / .env).

Environment variables (all optional):
- GROQ_API_KEY, GROQ_API_KEY_2..4: Interchangeable Groq keys
- GROQ_MODEL: Completion model (default: llama-3.3-70b-versatile)
- LANGUAGETOOL_API_URL: Grammar server (default: public LanguageTool API)
- TEXTRAZOR_API_KEY: Entity extraction
- HUGGINGFACE_API_KEY: Sentiment and summarization
- API_TIMEOUT: Per-request timeout in seconds (default: 30)
"""

import logging
from typing import List, Optional

import httpx

from src.utils.config import Settings, get_settings

from .groq import GroqClient
from .huggingface import HuggingFaceClient
from .key_pool import CredentialPool
from .languagetool import LanguageToolClient
from .textrazor import TextRazorClient

logger = logging.getLogger(__name__)


class ExternalAPIConfig:
    """Configuration for external APIs."""

    def __init__(
        self,
        groq_api_keys: Optional[List[str]] = None,
        groq_model: Optional[str] = None,
        groq_base_url: Optional[str] = None,
        languagetool_url: Optional[str] = None,
        textrazor_api_key: Optional[str] = None,
        huggingface_api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize external API configuration.

        Explicit arguments win over settings loaded from the environment.
        """
        settings = settings or get_settings()
        self.groq_api_keys = (
            groq_api_keys if groq_api_keys is not None else settings.groq_api_keys
        )
        self.groq_model = groq_model or settings.GROQ_MODEL
        self.groq_base_url = groq_base_url or settings.GROQ_BASE_URL
        self.languagetool_url = languagetool_url or settings.LANGUAGETOOL_API_URL
        self.textrazor_api_key = textrazor_api_key or settings.TEXTRAZOR_API_KEY
        self.huggingface_api_key = huggingface_api_key or settings.HUGGINGFACE_API_KEY
        self.timeout = timeout or settings.API_TIMEOUT

    @property
    def has_groq(self) -> bool:
        return bool(self.groq_api_keys)

    @property
    def has_textrazor(self) -> bool:
        return bool(self.textrazor_api_key)

    @property
    def has_huggingface(self) -> bool:
        return bool(self.huggingface_api_key)

    def log_status(self):
        """Log configuration status."""
        logger.info(
            f"External API status: "
            f"Groq={len(self.groq_api_keys)} keys, "
            f"LanguageTool={self.languagetool_url}, "
            f"TextRazor={'enabled' if self.has_textrazor else 'disabled'}, "
            f"HuggingFace={'enabled' if self.has_huggingface else 'local fallback'}"
        )


class ExternalAPIClients:
    """
    Factory and manager for the AI service clients.

    Usage:
        config = ExternalAPIConfig()
        async with ExternalAPIClients(config) as clients:
            text = await clients.groq.complete("...")
            findings = await clients.languagetool.check_grammar("...")
    """

    def __init__(
        self,
        config: Optional[ExternalAPIConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize AI service clients.

        Args:
            config: API configuration (defaults to env-based config)
            transport: httpx transport shared by every client (tests)
        """
        self.config = config or ExternalAPIConfig()
        self._transport = transport
        self._pool: Optional[CredentialPool] = None
        self._groq: Optional[GroqClient] = None
        self._languagetool: Optional[LanguageToolClient] = None
        self._textrazor: Optional[TextRazorClient] = None
        self._huggingface: Optional[HuggingFaceClient] = None

    @property
    def pool(self) -> CredentialPool:
        """Key pool shared by every completion made through these clients."""
        if self._pool is None:
            self._pool = CredentialPool(self.config.groq_api_keys)
        return self._pool

    @property
    def groq(self) -> GroqClient:
        """Get or create Groq client (raises on use if no keys are configured)."""
        if self._groq is None:
            self._groq = GroqClient(
                pool=self.pool,
                model=self.config.groq_model,
                base_url=self.config.groq_base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
            logger.info("Initialized Groq client")
        return self._groq

    @property
    def languagetool(self) -> LanguageToolClient:
        if self._languagetool is None:
            self._languagetool = LanguageToolClient(
                base_url=self.config.languagetool_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
            logger.info("Initialized LanguageTool client")
        return self._languagetool

    @property
    def textrazor(self) -> TextRazorClient:
        if self._textrazor is None:
            self._textrazor = TextRazorClient(
                api_key=self.config.textrazor_api_key,
                timeout=self.config.timeout,
                transport=self._transport,
            )
            logger.info("Initialized TextRazor client")
        return self._textrazor

    @property
    def huggingface(self) -> HuggingFaceClient:
        if self._huggingface is None:
            self._huggingface = HuggingFaceClient(
                api_key=self.config.huggingface_api_key,
                timeout=self.config.timeout,
                transport=self._transport,
            )
            logger.info("Initialized HuggingFace client")
        return self._huggingface

    async def close(self):
        """Close all clients."""
        for name in ("_groq", "_languagetool", "_textrazor", "_huggingface"):
            client = getattr(self, name)
            if client is not None:
                await client.close()
                setattr(self, name, None)

        logger.info("Closed external API clients")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
