"""
Completion API

Text generation endpoints backed by the load-balanced Groq client:
- Single-shot and streamed completions
- Writing-assistant operations (rewrite, tone, expand, ...)
- Key pool statistics for monitoring
"""

import json
import logging
from typing import AsyncIterator, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from src.analyzer import WritingAssistant
from src.integrations import (
    ExternalAPIClients,
    GroqError,
    ProviderUnavailableError,
    CompletionStream,
    validate_input,
)

from .dependencies import get_clients, get_writing_assistant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["Completions"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CompletionRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    system_prompt: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, gt=0)


class CompletionResponse(BaseModel):
    text: str
    model: str


class StreamRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    system_prompt: Optional[str] = None


class PoolStatsResponse(BaseModel):
    """Groq key pool statistics."""
    total: int
    available: int
    request_counts: List[int]


class AssistRequest(BaseModel):
    text: str = Field(..., min_length=1)
    instruction: Optional[str] = Field(default=None, description="Required for rewrite")
    tone: Optional[Literal[
        "formal", "casual", "professional", "friendly", "academic", "creative"
    ]] = Field(default=None, description="Required for tone")


class AssistResponse(BaseModel):
    operation: str
    text: Optional[str] = None
    suggestions: Optional[List[str]] = None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/stats", response_model=PoolStatsResponse)
def get_pool_stats(clients: ExternalAPIClients = Depends(get_clients)):
    """Current Groq key pool health and load."""
    return PoolStatsResponse(**clients.pool.stats().to_dict())


@router.post("/complete", response_model=CompletionResponse)
async def complete(
    request: CompletionRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    """Generate a completion, retrying once on another key if needed."""
    valid, error = validate_input(request.prompt, request.max_tokens or clients.groq.MAX_TOKENS)
    if not valid:
        raise HTTPException(status_code=422, detail=error)

    try:
        text = await clients.groq.complete(
            request.prompt,
            system_prompt=request.system_prompt,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )
    except ProviderUnavailableError as e:
        logger.error(f"Completion failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return CompletionResponse(text=text, model=clients.groq.model)


@router.post("/stream")
async def stream(
    request: StreamRequest,
    clients: ExternalAPIClients = Depends(get_clients),
):
    """
    Stream a completion as server-sent events.

    Each fragment is sent as ``data: {"content": ...}``; the stream ends
    with ``data: [DONE]``. A failure after streaming has started is sent
    as ``data: {"error": ...}``.
    """
    try:
        completion = clients.groq.stream_complete(
            request.prompt, system_prompt=request.system_prompt
        )
    except ProviderUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return StreamingResponse(
        _sse_events(completion),
        media_type="text/event-stream",
    )


async def _sse_events(completion: CompletionStream) -> AsyncIterator[str]:
    async with completion:
        try:
            async for fragment in completion:
                yield f"data: {json.dumps({'content': fragment})}\n\n"
        except GroqError as e:
            logger.error(f"Completion stream failed: {e}")
            yield f"data: {json.dumps({'error': str(e)})}\n\n"
            return
    yield "data: [DONE]\n\n"


@router.post("/assist/{operation}", response_model=AssistResponse)
async def assist(
    operation: Literal[
        "generate", "rewrite", "grammar", "tone",
        "expand", "shorten", "continue", "suggestions",
    ],
    request: AssistRequest,
    assistant: WritingAssistant = Depends(get_writing_assistant),
):
    """Run a writing-assistant operation on the given text."""
    try:
        if operation == "suggestions":
            suggestions = await assistant.get_suggestions(request.text)
            return AssistResponse(operation=operation, suggestions=suggestions)

        if operation == "generate":
            text = await assistant.generate_content(request.text)
        elif operation == "rewrite":
            if not request.instruction:
                raise HTTPException(status_code=400, detail="instruction is required for rewrite")
            text = await assistant.rewrite_text(request.text, request.instruction)
        elif operation == "grammar":
            text = await assistant.improve_grammar(request.text)
        elif operation == "tone":
            if not request.tone:
                raise HTTPException(status_code=400, detail="tone is required for tone")
            text = await assistant.change_tone(request.text, request.tone)
        elif operation == "expand":
            text = await assistant.expand_text(request.text)
        elif operation == "shorten":
            text = await assistant.shorten_text(request.text)
        else:
            text = await assistant.continue_writing(request.text)
    except ProviderUnavailableError as e:
        logger.error(f"Assistant operation '{operation}' failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return AssistResponse(operation=operation, text=text)
