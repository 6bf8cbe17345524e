"""
TextRazor API Client

Entity and topic extraction. Scores are rescaled to 0-100 and the
result is capped to the top 20 entities and top 10 topics as ordered by
TextRazor.

Without an API key, or on any failure, an empty analysis is returned.

API: https://www.textrazor.com/docs/rest
"""

import logging
from typing import Any, Dict, Optional

import httpx

from src.models import Entity, EntityAnalysis, Topic

logger = logging.getLogger(__name__)

MAX_ENTITIES = 20
MAX_TOPICS = 10


class TextRazorError(Exception):
    """Custom exception for TextRazor API errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


def _percent(value: Any) -> int:
    return int(round(float(value or 0) * 100))


def parse_analysis(data: Dict[str, Any]) -> EntityAnalysis:
    """Normalize a TextRazor response body into an EntityAnalysis."""
    body = data["response"]
    entities = []
    for raw in (body.get("entities") or [])[:MAX_ENTITIES]:
        types = raw.get("type") or []
        entities.append(
            Entity(
                text=raw["matchedText"],
                type=types[0] if types else "Unknown",
                relevance=_percent(raw.get("relevanceScore")),
                confidence=_percent(raw.get("confidenceScore")),
                wiki_link=raw.get("wikiLink") or None,
            )
        )

    topics = [
        Topic(label=raw["label"], score=_percent(raw.get("score")))
        for raw in (body.get("topics") or [])[:MAX_TOPICS]
    ]

    return EntityAnalysis(entities=tuple(entities), topics=tuple(topics))


class TextRazorClient:
    """
    Async client for TextRazor.

    Usage:
        client = TextRazorClient(api_key="your_api_key")

        analysis = await client.analyze_entities("Ada Lovelace worked with Charles Babbage.")

        await client.close()
    """

    BASE_URL = "https://api.textrazor.com/"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def analyze_entities(self, text: str) -> EntityAnalysis:
        """Extract entities and topics; empty result on missing key or failure."""
        if not self.is_configured:
            logger.warning("TextRazor API key not configured")
            return EntityAnalysis.empty()

        try:
            data = await self._analyze(text)
            return parse_analysis(data)
        except (httpx.HTTPError, TextRazorError) as e:
            logger.error(f"TextRazor error: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"TextRazor returned an unexpected response: {e}")
        return EntityAnalysis.empty()

    async def _analyze(self, text: str) -> Dict[str, Any]:
        if self._closed:
            raise TextRazorError("Client has been closed")

        response = await self._client.post(
            self.BASE_URL,
            headers={"X-TextRazor-Key": self.api_key},
            data={
                "text": text,
                "extractors": "entities,topics",
            },
        )

        if response.status_code != 200:
            raise TextRazorError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
            )

        return response.json()

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
