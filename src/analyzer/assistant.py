"""
Writing Assistant

Editing operations (rewrite, tone change, expansion, ...) built on Groq
completions. Each operation has a preset temperature, token budget and
system prompt.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from src.integrations.groq import GroqClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationPreset:
    temperature: float
    max_tokens: int
    system_prompt: str


OPERATION_PRESETS: Dict[str, OperationPreset] = {
    "grammar": OperationPreset(
        0.3, 2048,
        "You are a grammar expert. Fix errors while preserving the original voice and style.",
    ),
    "rewrite": OperationPreset(
        0.7, 2048,
        "You are an expert editor. Rewrite text according to instructions while maintaining clarity.",
    ),
    "generate": OperationPreset(
        0.8, 4096,
        "You are a creative content writer. Generate engaging, well-structured content.",
    ),
    "summarize": OperationPreset(
        0.5, 1024,
        "You are a summarization expert. Extract key points concisely.",
    ),
    "analyze": OperationPreset(
        0.4, 1024,
        "You are a document analyst. Provide objective, actionable insights.",
    ),
    "expand": OperationPreset(
        0.7, 3072,
        "You are a content expander. Add relevant details and examples.",
    ),
    "tone": OperationPreset(
        0.6, 2048,
        "You are a tone specialist. Adjust writing style while preserving meaning.",
    ),
    "continue": OperationPreset(
        0.8, 1024,
        "You are a creative writer. Continue the text naturally and maintain the same style.",
    ),
}

TONE_DESCRIPTIONS = {
    "formal": "formal and academic",
    "casual": "casual and conversational",
    "professional": "professional and business-like",
    "friendly": "friendly and approachable",
    "academic": "scholarly and precise",
    "creative": "imaginative and expressive",
}

BULLET_LINE = re.compile(r"^(?:[-•*]|\d+[.)])\s*")


def parse_suggestions(response: str) -> List[str]:
    """Pull bullet or numbered list items out of a model reply."""
    suggestions = []
    for line in response.splitlines():
        line = line.strip()
        if not BULLET_LINE.match(line):
            continue
        item = BULLET_LINE.sub("", line).strip()
        if item:
            suggestions.append(item)
    return suggestions


class WritingAssistant:
    """
    Editing operations for the document editor.

    Usage:
        assistant = WritingAssistant(groq_client)
        formal = await assistant.change_tone(text, "formal")
    """

    def __init__(self, client: GroqClient):
        self.client = client

    async def run(self, operation: str, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Run a prompt with the preset for ``operation``."""
        preset = OPERATION_PRESETS.get(operation)
        if preset is None:
            raise ValueError(f"Unknown operation: {operation}")

        logger.debug(f"Running assistant operation: {operation}")
        return await self.client.complete(
            prompt,
            system_prompt=system_prompt or preset.system_prompt,
            temperature=preset.temperature,
            max_tokens=preset.max_tokens,
        )

    async def generate_content(self, topic: str) -> str:
        return await self.run(
            "generate",
            f'Write a well-structured document about: "{topic}". '
            f"Include relevant details and maintain a professional tone.",
        )

    async def rewrite_text(self, text: str, instruction: str) -> str:
        return await self.run(
            "rewrite",
            f"{instruction}\n\nOriginal text:\n{text}\n\nRewritten text:",
        )

    async def improve_grammar(self, text: str) -> str:
        return await self.run(
            "grammar",
            "Fix any grammar, spelling, and punctuation errors in the following text. "
            f"Maintain the original meaning and style:\n\n{text}",
        )

    async def change_tone(self, text: str, tone: str) -> str:
        description = TONE_DESCRIPTIONS.get(tone)
        if description is None:
            raise ValueError(f"Unknown tone: {tone}")
        return await self.run(
            "tone",
            f"Rewrite the following text in a {description} tone:\n\n{text}",
        )

    async def expand_text(self, text: str) -> str:
        return await self.run(
            "expand",
            f"Expand the following text with more details, examples, and explanations:\n\n{text}",
        )

    async def shorten_text(self, text: str) -> str:
        return await self.run(
            "summarize",
            f"Summarize the following text concisely while keeping all key points:\n\n{text}",
        )

    async def continue_writing(self, text: str) -> str:
        return await self.run(
            "continue",
            "Continue writing from where this text left off. "
            f"Maintain the same style and tone:\n\n{text}",
        )

    async def get_suggestions(self, text: str) -> List[str]:
        """3-5 improvement suggestions as a list."""
        response = await self.run(
            "analyze",
            f"Provide 3-5 specific suggestions to improve the following text:\n\n{text}\n\n"
            "List suggestions as bullet points.",
        )
        return parse_suggestions(response)
