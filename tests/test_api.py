"""
Tests for the HTTP API.

Upstream services are faked with one httpx.MockTransport routed by host;
the shared clients are swapped in through FastAPI dependency overrides.
"""

import json
from typing import Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from api.analyze import app
from api.dependencies import get_clients
from src.integrations import ExternalAPIClients


def route_by_host(routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.host)
        if route is None:
            raise httpx.ConnectError("unreachable", request=request)
        return route(request)
    return httpx.MockTransport(handler)


@pytest.fixture
def make_api(make_config):
    """Build a TestClient whose AI clients talk to the given fake hosts."""
    created = []

    def _make(routes=None, **config_kwargs) -> TestClient:
        clients = ExternalAPIClients(
            make_config(**config_kwargs), transport=route_by_host(routes or {})
        )
        created.append(clients)
        app.dependency_overrides[get_clients] = lambda: clients
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def groq_host(reply: Callable[[httpx.Request], httpx.Response]):
    return {"api.groq.com": reply}


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:

    def test_root(self, make_api):
        response = make_api().get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_reports_services(self, make_api):
        api = make_api(groq_api_keys=["gsk_a", "gsk_b"], textrazor_api_key="tr")
        services = api.get("/api/health").json()["services"]

        assert services["groq_keys"] == 2
        assert services["textrazor"] == "configured"
        assert services["huggingface"] == "local fallback"


# =============================================================================
# ANALYSIS
# =============================================================================

class TestAnalysisEndpoints:

    def test_analyze_full_report(self, make_api, languagetool_payload, textrazor_payload):
        api = make_api(
            routes={
                "api.languagetool.org": lambda r: httpx.Response(200, json=languagetool_payload),
                "api.textrazor.com": lambda r: httpx.Response(200, json=textrazor_payload),
            },
            textrazor_api_key="tr",
        )

        response = api.post("/api/ai/analyze", json={"text": "Ths is an tset sentence."})

        assert response.status_code == 200
        data = response.json()
        assert data["grammar"]["error_count"] == 3
        assert data["grammar"]["corrected_text"] == "This is a test sentence."
        assert data["sentiment"] == {"label": "NEUTRAL", "score": 50, "confidence": "Low"}
        assert data["entities"]["entities"][0]["text"] == "Ada Lovelace"
        assert data["stats"]["word_count"] == 5
        assert data["readability"]["reading_time"] == 1

    def test_analyze_with_every_service_down(self, make_api):
        api = make_api(textrazor_api_key="tr", huggingface_api_key="hf")

        response = api.post("/api/ai/analyze", json={"text": ""})

        assert response.status_code == 200
        data = response.json()
        assert data["grammar"] == {"error_count": 0, "errors": [], "corrected_text": None}
        assert data["entities"] == {"entities": [], "topics": []}
        assert data["readability"] == {"score": 100, "grade_level": "Elementary", "reading_time": 0}

    def test_grammar_check_and_correct(self, make_api, languagetool_payload):
        api = make_api(routes={
            "api.languagetool.org": lambda r: httpx.Response(200, json=languagetool_payload),
        })
        text = "Ths is an tset sentence."

        check = api.post("/api/ai/grammar/check", json={"text": text}).json()
        assert check["error_count"] == 3
        assert check["errors"][2]["suggestions"] == ["test", "set"]

        correct = api.post("/api/ai/grammar/correct", json={"text": text}).json()
        assert correct == {"text": "This is a test sentence."}

    def test_sentiment_fallback(self, make_api):
        response = make_api().post("/api/ai/sentiment", json={"text": "I love this, it is great"})
        assert response.json() == {"label": "POSITIVE", "score": 40, "confidence": "Medium"}

    def test_entities_without_key(self, make_api):
        response = make_api().post("/api/ai/entities", json={"text": "Ada Lovelace"})
        assert response.json() == {"entities": [], "topics": []}

    def test_summarize_fallback(self, make_api):
        response = make_api().post(
            "/api/ai/summarize", json={"text": "One. Two. Three. Four.", "max_length": 50}
        )
        assert response.json() == {"summary": "One. Two. Three."}


# =============================================================================
# COMPLETIONS
# =============================================================================

class TestCompletionEndpoints:

    def test_complete(self, make_api, groq_reply):
        api = make_api(
            routes=groq_host(lambda r: groq_reply("Hi!")),
            groq_api_keys=["gsk_a"],
        )

        response = api.post("/api/ai/complete", json={"prompt": "Say hi"})

        assert response.status_code == 200
        assert response.json() == {"text": "Hi!", "model": "llama-3.3-70b-versatile"}

    def test_complete_without_keys(self, make_api):
        response = make_api().post("/api/ai/complete", json={"prompt": "Say hi"})
        assert response.status_code == 503

    def test_complete_after_failed_retry(self, make_api):
        api = make_api(
            routes=groq_host(lambda r: httpx.Response(500)),
            groq_api_keys=["gsk_a", "gsk_b"],
        )
        response = api.post("/api/ai/complete", json={"prompt": "Say hi"})
        assert response.status_code == 503

        stats = api.get("/api/ai/stats").json()
        assert stats == {"total": 2, "available": 2, "request_counts": [1, 1]}

    def test_complete_rejects_oversized_prompt(self, make_api):
        api = make_api(groq_api_keys=["gsk_a"])
        response = api.post("/api/ai/complete", json={"prompt": "x" * 600, "max_tokens": 100})
        assert response.status_code == 422

    def test_stream(self, make_api, sse_body):
        api = make_api(
            routes=groq_host(lambda r: httpx.Response(200, content=sse_body(["Hel", "lo"]))),
            groq_api_keys=["gsk_a"],
        )

        response = api.post("/api/ai/stream", json={"prompt": "Say hello"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = [line for line in response.text.split("\n\n") if line]
        assert events == [
            'data: {"content": "Hel"}',
            'data: {"content": "lo"}',
            "data: [DONE]",
        ]

    def test_stream_upstream_error(self, make_api):
        api = make_api(
            routes=groq_host(lambda r: httpx.Response(429)),
            groq_api_keys=["gsk_a"],
        )

        response = api.post("/api/ai/stream", json={"prompt": "Say hello"})

        events = [line for line in response.text.split("\n\n") if line]
        assert len(events) == 1
        assert "error" in json.loads(events[0][len("data: "):])

    def test_stream_without_keys(self, make_api):
        response = make_api().post("/api/ai/stream", json={"prompt": "Say hello"})
        assert response.status_code == 503


class TestAssistEndpoint:

    def test_rewrite(self, make_api, groq_reply):
        bodies = []

        def reply(request):
            bodies.append(json.loads(request.content))
            return groq_reply("Punchy text.")

        api = make_api(routes=groq_host(reply), groq_api_keys=["gsk_a"])
        response = api.post(
            "/api/ai/assist/rewrite",
            json={"text": "Slow text.", "instruction": "Make it punchy"},
        )

        assert response.json() == {"operation": "rewrite", "text": "Punchy text.", "suggestions": None}
        assert bodies[0]["temperature"] == 0.7

    def test_rewrite_requires_instruction(self, make_api):
        api = make_api(groq_api_keys=["gsk_a"])
        response = api.post("/api/ai/assist/rewrite", json={"text": "Slow text."})
        assert response.status_code == 400

    def test_tone_requires_tone(self, make_api):
        api = make_api(groq_api_keys=["gsk_a"])
        response = api.post("/api/ai/assist/tone", json={"text": "Hey."})
        assert response.status_code == 400

    def test_unknown_operation(self, make_api):
        response = make_api().post("/api/ai/assist/translate", json={"text": "Hey."})
        assert response.status_code == 422

    def test_suggestions(self, make_api, groq_reply):
        api = make_api(
            routes=groq_host(lambda r: groq_reply("- Be concise\n- Add examples")),
            groq_api_keys=["gsk_a"],
        )
        response = api.post("/api/ai/assist/suggestions", json={"text": "Draft."})
        assert response.json()["suggestions"] == ["Be concise", "Add examples"]

    def test_provider_down(self, make_api):
        response = make_api().post("/api/ai/assist/expand", json={"text": "Draft."})
        assert response.status_code == 503
