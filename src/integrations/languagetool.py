"""
LanguageTool API Client

Grammar and spell checking through a LanguageTool server (public API by
default, or a self-hosted instance).

Failures never propagate: an unreachable server or an unexpected
response yields an empty list of findings.

API: https://languagetool.org/http-api/
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from src.models import GrammarFinding

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


class LanguageToolError(Exception):
    """Custom exception for LanguageTool API errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


def apply_corrections(text: str, findings: Sequence[GrammarFinding]) -> str:
    """
    Apply the first suggestion of each finding to the text.

    Edits are spliced from the highest offset down so earlier offsets
    stay valid. Findings without suggestions are skipped.
    """
    corrected = text
    for finding in sorted(findings, key=lambda f: f.offset, reverse=True):
        if not finding.suggestions:
            continue
        corrected = (
            corrected[:finding.offset]
            + finding.suggestions[0]
            + corrected[finding.offset + finding.length:]
        )
    return corrected


def parse_matches(text: str, data: Dict[str, Any]) -> List[GrammarFinding]:
    """Normalize a LanguageTool ``/check`` response into findings."""
    findings = []
    for match in data["matches"]:
        message = match["message"]
        offset = int(match["offset"])
        length = int(match["length"])
        rule = match.get("rule") or {}
        category = rule.get("category") or {}
        replacements = match.get("replacements") or []

        findings.append(
            GrammarFinding(
                message=message,
                short_message=match.get("shortMessage") or message[:50],
                suggestions=tuple(r["value"] for r in replacements[:MAX_SUGGESTIONS]),
                offset=offset,
                length=length,
                rule_id=rule.get("id", ""),
                category=category.get("name", ""),
                original_text=text[offset:offset + length],
            )
        )
    return findings


class LanguageToolClient:
    """
    Async client for LanguageTool.

    Usage:
        client = LanguageToolClient()

        findings = await client.check_grammar("This are a test.")
        fixed = await client.correct_grammar("This are a test.")

        await client.close()
    """

    BASE_URL = "https://api.languagetool.org/v2"
    DEFAULT_LANGUAGE = "en-US"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize LanguageTool client.

        Args:
            base_url: Server URL including the API version (defaults to public API)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def check_grammar(
        self,
        text: str,
        language: str = DEFAULT_LANGUAGE,
    ) -> List[GrammarFinding]:
        """
        Check text for grammar and spelling issues.

        Returns:
            Findings in server order, or an empty list on any failure
        """
        try:
            data = await self._check(text, language)
            return parse_matches(text, data)
        except (httpx.HTTPError, LanguageToolError) as e:
            logger.error(f"LanguageTool error: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"LanguageTool returned an unexpected response: {e}")
        return []

    async def correct_grammar(self, text: str, language: str = DEFAULT_LANGUAGE) -> str:
        """Return text with every suggested fix applied (unchanged if none)."""
        findings = await self.check_grammar(text, language)
        if not findings:
            return text
        return apply_corrections(text, findings)

    async def _check(self, text: str, language: str) -> Dict[str, Any]:
        if self._closed:
            raise LanguageToolError("Client has been closed")

        response = await self._client.post(
            f"{self.base_url}/check",
            data={
                "text": text,
                "language": language,
                "enabledOnly": "false",
            },
        )

        if response.status_code != 200:
            raise LanguageToolError(
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
