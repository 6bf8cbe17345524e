"""
HuggingFace Inference API Client

Hosted models for:
- Sentiment (cardiffnlp/twitter-roberta-base-sentiment-latest)
- Summarization (facebook/bart-large-cnn)

Both operations fall back to local heuristics when no API key is set,
the request fails, or the model returns an unexpected shape.

API: https://huggingface.co/docs/api-inference
"""

import logging
from typing import Any, Optional

import httpx

from src.models import ConfidenceTier, SentimentLabel, SentimentResult
from src.utils.text import extractive_summary, lexicon_sentiment

logger = logging.getLogger(__name__)


class HuggingFaceError(Exception):
    """Custom exception for HuggingFace API errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


def parse_sentiment(data: Any) -> Optional[SentimentResult]:
    """
    Pick the best-scoring label from a text-classification response.

    Returns None when the body is not the expected ``[[{label, score}]]``.
    """
    if not (isinstance(data, list) and data and isinstance(data[0], list) and data[0]):
        return None

    best = max(data[0], key=lambda r: float(r["score"]))
    raw_label = str(best["label"]).lower()
    score = float(best["score"])

    label = SentimentLabel.NEUTRAL
    if "positive" in raw_label:
        label = SentimentLabel.POSITIVE
    elif "negative" in raw_label:
        label = SentimentLabel.NEGATIVE

    return SentimentResult(label, int(round(score * 100)), ConfidenceTier.from_score(score))


class HuggingFaceClient:
    """
    Async client for the HuggingFace Inference API.

    Usage:
        client = HuggingFaceClient(api_key="hf_...")

        sentiment = await client.analyze_sentiment("What a great day")
        summary = await client.summarize(long_text, max_length=120)

        await client.close()
    """

    BASE_URL = "https://api-inference.huggingface.co/models"
    SENTIMENT_MODEL = "cardiffnlp/twitter-roberta-base-sentiment-latest"
    SUMMARY_MODEL = "facebook/bart-large-cnn"

    SENTIMENT_INPUT_CHARS = 512
    SUMMARY_INPUT_CHARS = 1024
    SUMMARY_MIN_LENGTH = 30
    MIN_SUMMARY_SOURCE_CHARS = 100

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        """Classify sentiment; the local lexicon is used whenever the API can't be."""
        if not self.is_configured:
            return lexicon_sentiment(text)

        try:
            data = await self._infer(
                self.SENTIMENT_MODEL,
                {"inputs": text[:self.SENTIMENT_INPUT_CHARS]},
            )
            result = parse_sentiment(data)
        except (httpx.HTTPError, HuggingFaceError) as e:
            logger.error(f"HuggingFace sentiment error: {e}")
            return lexicon_sentiment(text)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"HuggingFace sentiment returned an unexpected response: {e}")
            return lexicon_sentiment(text)

        if result is None:
            logger.warning("HuggingFace sentiment response had no scores, using lexicon")
            return lexicon_sentiment(text)
        return result

    async def summarize(self, text: str, max_length: int = 150) -> str:
        """Abstractive summary, or the first three sentences as a fallback."""
        if not self.is_configured or len(text) < self.MIN_SUMMARY_SOURCE_CHARS:
            return extractive_summary(text)

        try:
            data = await self._infer(
                self.SUMMARY_MODEL,
                {
                    "inputs": text[:self.SUMMARY_INPUT_CHARS],
                    "parameters": {
                        "max_length": max_length,
                        "min_length": self.SUMMARY_MIN_LENGTH,
                        "do_sample": False,
                    },
                },
            )
        except (httpx.HTTPError, HuggingFaceError, ValueError) as e:
            logger.error(f"HuggingFace summarization error: {e}")
            return extractive_summary(text)

        if isinstance(data, list) and data and isinstance(data[0], dict):
            summary = data[0].get("summary_text")
            if isinstance(summary, str) and summary:
                return summary

        logger.warning("HuggingFace summary response had no text, using first sentences")
        return extractive_summary(text)

    async def _infer(self, model: str, payload: dict) -> Any:
        if self._closed:
            raise HuggingFaceError("Client has been closed")

        response = await self._client.post(
            f"/{model}",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        if response.status_code != 200:
            raise HuggingFaceError(
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
