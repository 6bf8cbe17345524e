"""
Shared API dependencies.

One set of AI service clients (and so one Groq key pool) is shared by
every request handled by the process.
"""

import logging
from typing import Optional

from fastapi import Depends

from src.analyzer import DocumentAnalyzer, WritingAssistant
from src.integrations import ExternalAPIClients, ExternalAPIConfig

logger = logging.getLogger(__name__)

_clients: Optional[ExternalAPIClients] = None


def get_clients() -> ExternalAPIClients:
    """Get or create the process-wide clients."""
    global _clients
    if _clients is None:
        config = ExternalAPIConfig()
        config.log_status()
        _clients = ExternalAPIClients(config)
    return _clients


async def close_clients() -> None:
    global _clients
    if _clients is not None:
        await _clients.close()
        _clients = None


def get_document_analyzer(
    clients: ExternalAPIClients = Depends(get_clients),
) -> DocumentAnalyzer:
    return DocumentAnalyzer.from_clients(clients)


def get_writing_assistant(
    clients: ExternalAPIClients = Depends(get_clients),
) -> WritingAssistant:
    return WritingAssistant(clients.groq)
