"""
API Endpoints for Document Analysis

FastAPI app serving the editor and converter front-ends:
1. Full document analysis (grammar, sentiment, entities, readability)
2. Individual analyses (grammar check/correct, sentiment, entities, summary)
3. Completions and writing-assistant operations (see api/completions.py)

Analysis endpoints never fail because an upstream service is down; they
return empty or neutral sections instead.
"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from src import __version__
from src.analyzer import DocumentAnalyzer
from src.integrations import ExternalAPIClients
from src.utils.config import get_settings

from .completions import router as completions_router
from .dependencies import close_clients, get_clients, get_document_analyzer

# Configure logging to stdout
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Create FastAPI app
app = FastAPI(
    title="Document AI Services",
    description="Grammar, sentiment, entity and readability analysis plus load-balanced Groq completions",
    version=__version__,
)
app.include_router(completions_router)


# ============================================================================
# STARTUP / SHUTDOWN
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Build the shared AI clients."""
    clients = get_clients()
    logger.info(f"Groq key pool ready with {len(clients.pool)} keys")


@app.on_event("shutdown")
async def shutdown_event():
    await close_clients()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class TextRequest(BaseModel):
    text: str


class GrammarCheckRequest(BaseModel):
    text: str
    language: str = Field(default="en-US", description="LanguageTool language code")


class SummarizeRequest(BaseModel):
    text: str
    max_length: int = Field(default=150, gt=0, le=1024)


class GrammarFindingModel(BaseModel):
    message: str
    short_message: str
    suggestions: List[str]
    offset: int
    length: int
    rule_id: str
    category: str
    original_text: str


class GrammarCheckResponse(BaseModel):
    error_count: int
    errors: List[GrammarFindingModel]


class CorrectedTextResponse(BaseModel):
    text: str


class SentimentResponse(BaseModel):
    label: str
    score: int
    confidence: str


class EntityModel(BaseModel):
    text: str
    type: str
    relevance: int
    confidence: int
    wiki_link: Optional[str] = None


class TopicModel(BaseModel):
    label: str
    score: int


class EntityAnalysisResponse(BaseModel):
    entities: List[EntityModel]
    topics: List[TopicModel]


class SummaryResponse(BaseModel):
    summary: str


class DocumentAnalysisResponse(BaseModel):
    """Aggregate report; every section is always present."""
    grammar: Dict[str, Any]
    sentiment: SentimentResponse
    entities: EntityAnalysisResponse
    readability: Dict[str, Any]
    stats: Dict[str, int]


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Document AI Services"}


@app.get("/api/health")
async def health(clients: ExternalAPIClients = Depends(get_clients)):
    """Detailed health check including configured services."""
    config = clients.config
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "services": {
            "groq_keys": len(config.groq_api_keys),
            "languagetool": config.languagetool_url,
            "textrazor": "configured" if config.has_textrazor else "disabled",
            "huggingface": "configured" if config.has_huggingface else "local fallback",
        },
    }


@app.post("/api/ai/analyze", response_model=DocumentAnalysisResponse)
async def analyze(
    request: TextRequest,
    analyzer: DocumentAnalyzer = Depends(get_document_analyzer),
):
    """Run the full document analysis."""
    report = await analyzer.analyze_document(request.text)
    return report.to_dict()


@app.post("/api/ai/grammar/check", response_model=GrammarCheckResponse)
async def grammar_check(
    request: GrammarCheckRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    findings = await clients.languagetool.check_grammar(request.text, request.language)
    return GrammarCheckResponse(
        error_count=len(findings),
        errors=[
            GrammarFindingModel(
                message=f.message,
                short_message=f.short_message,
                suggestions=list(f.suggestions),
                offset=f.offset,
                length=f.length,
                rule_id=f.rule_id,
                category=f.category,
                original_text=f.original_text,
            )
            for f in findings
        ],
    )


@app.post("/api/ai/grammar/correct", response_model=CorrectedTextResponse)
async def grammar_correct(
    request: GrammarCheckRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    text = await clients.languagetool.correct_grammar(request.text, request.language)
    return CorrectedTextResponse(text=text)


@app.post("/api/ai/sentiment", response_model=SentimentResponse)
async def sentiment(
    request: TextRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    result = await clients.huggingface.analyze_sentiment(request.text)
    return SentimentResponse(
        label=result.label.value,
        score=result.score,
        confidence=result.confidence.value,
    )


@app.post("/api/ai/entities", response_model=EntityAnalysisResponse)
async def entities(
    request: TextRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    analysis = await clients.textrazor.analyze_entities(request.text)
    return EntityAnalysisResponse(
        entities=[
            EntityModel(
                text=e.text,
                type=e.type,
                relevance=e.relevance,
                confidence=e.confidence,
                wiki_link=e.wiki_link,
            )
            for e in analysis.entities
        ],
        topics=[TopicModel(label=t.label, score=t.score) for t in analysis.topics],
    )


@app.post("/api/ai/summarize", response_model=SummaryResponse)
async def summarize(
    request: SummarizeRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    summary = await clients.huggingface.summarize(request.text, request.max_length)
    return SummaryResponse(summary=summary)


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.analyze:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
