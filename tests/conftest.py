"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
Upstream HTTP APIs are faked with httpx.MockTransport.
"""

import json
from typing import Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from src.integrations import CredentialPool, ExternalAPIConfig
from src.utils.config import Settings


# ============================================================================
# Clock
# ============================================================================

class FakeClock:
    """Manually advanced time source for the key pool."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_pool(clock) -> Callable[..., CredentialPool]:
    """Build a pool driven by the fake clock."""
    def _make(keys: Iterable[str] = ("key-a", "key-b", "key-c")) -> CredentialPool:
        return CredentialPool(list(keys), clock=clock)
    return _make


# ============================================================================
# Settings
# ============================================================================

@pytest.fixture
def empty_settings() -> Settings:
    """Settings with every optional credential unset, ignoring any .env file."""
    return Settings(
        _env_file=None,
        GROQ_API_KEY=None,
        GROQ_API_KEY_2=None,
        GROQ_API_KEY_3=None,
        GROQ_API_KEY_4=None,
        TEXTRAZOR_API_KEY=None,
        HUGGINGFACE_API_KEY=None,
    )


@pytest.fixture
def make_config(empty_settings) -> Callable[..., ExternalAPIConfig]:
    def _make(**kwargs) -> ExternalAPIConfig:
        return ExternalAPIConfig(settings=empty_settings, **kwargs)
    return _make


# ============================================================================
# Upstream response builders
# ============================================================================

def _groq_reply(content: Optional[str]) -> httpx.Response:
    message = {"role": "assistant", "content": content}
    return httpx.Response(200, json={"choices": [{"index": 0, "message": message}]})


def _sse_body(fragments: List[str], done: bool = True, extra: List[str] = ()) -> bytes:
    lines = []
    for fragment in fragments:
        frame = {"choices": [{"delta": {"content": fragment}}]}
        lines.append(f"data: {json.dumps(frame)}\n\n")
    lines.extend(extra)
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


@pytest.fixture
def groq_reply() -> Callable[[Optional[str]], httpx.Response]:
    """Successful Groq chat completion response."""
    return _groq_reply


@pytest.fixture
def sse_body() -> Callable[..., bytes]:
    """Server-sent events body for a streamed completion."""
    return _sse_body


@pytest.fixture
def languagetool_payload() -> Dict:
    """LanguageTool /check response for 'Ths is an tset sentence.'"""
    return {
        "language": {"code": "en-US", "name": "English (US)"},
        "matches": [
            {
                "message": "Possible spelling mistake found.",
                "shortMessage": "Spelling mistake",
                "replacements": [{"value": "This"}, {"value": "The"}],
                "offset": 0,
                "length": 3,
                "rule": {
                    "id": "MORFOLOGIK_RULE_EN_US",
                    "description": "Possible spelling mistake",
                    "category": {"id": "TYPOS", "name": "Possible Typo"},
                },
            },
            {
                "message": "Use “a” instead of ‘an’ if the following word doesn't start with a vowel sound.",
                "shortMessage": "",
                "replacements": [{"value": "a"}],
                "offset": 7,
                "length": 2,
                "rule": {
                    "id": "EN_A_VS_AN",
                    "description": "Use of 'a' vs. 'an'",
                    "category": {"id": "MISC", "name": "Miscellaneous"},
                },
            },
            {
                "message": "Possible spelling mistake found.",
                "shortMessage": "Spelling mistake",
                "replacements": [{"value": "test"}, {"value": "set"}],
                "offset": 10,
                "length": 4,
                "rule": {
                    "id": "MORFOLOGIK_RULE_EN_US",
                    "description": "Possible spelling mistake",
                    "category": {"id": "TYPOS", "name": "Possible Typo"},
                },
            },
        ],
    }


@pytest.fixture
def textrazor_payload() -> Dict:
    return {
        "response": {
            "entities": [
                {
                    "entityId": "Ada Lovelace",
                    "matchedText": "Ada Lovelace",
                    "type": ["Person", "Agent"],
                    "relevanceScore": 0.914,
                    "confidenceScore": 0.76,
                    "wikiLink": "http://en.wikipedia.org/wiki/Ada_Lovelace",
                },
                {
                    "entityId": "Analytical Engine",
                    "matchedText": "Analytical Engine",
                    "relevanceScore": 0.5,
                    "confidenceScore": 0.25,
                },
            ],
            "topics": [
                {"label": "Computing", "score": 0.987},
                {"label": "Mathematics", "score": 0.41},
            ],
        }
    }


SAMPLE_DOCUMENT = (
    "The converter keeps your layout intact. It handles tables, images and footnotes.\n\n"
    "We love how fast it is! Exports finish in seconds."
)


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
