"""
Groq API Client

Chat completions against Groq's OpenAI-compatible endpoint, spread over
several API keys drawn from a CredentialPool.

- Single-shot completions retry once on a different key
- Streaming completions are pull-based and can be closed early
- Pool bookkeeping (error/success) happens once per attempt

API: https://console.groq.com/docs/api-reference
"""

import asyncio
import json
import logging
import math
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from .key_pool import CredentialPool, mask_key

logger = logging.getLogger(__name__)

STREAM_DONE = "[DONE]"
CHAT_ROLES = ("system", "user", "assistant")


class GroqError(Exception):
    """Custom exception for Groq API errors."""

    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class ProviderUnavailableError(GroqError):
    """No key is configured, or every attempt failed."""


def build_messages(prompt: str, system_prompt: Optional[str] = None) -> List[Dict[str, str]]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token for English)."""
    return math.ceil(len(text) / 4)


def validate_input(text: str, max_tokens: int = 2048) -> Tuple[bool, Optional[str]]:
    """
    Check that text is usable as a prompt.

    Half of the token budget is kept for the response.

    Returns:
        (valid, error message or None)
    """
    if not text or not isinstance(text, str):
        return False, "Text must be a non-empty string"

    if not text.strip():
        return False, "Text cannot be empty or only whitespace"

    if estimate_tokens(text) > max_tokens / 2:
        return False, (
            f"Text is too long. Maximum ~{max_tokens // 2} tokens "
            f"(approximately {max_tokens * 2} characters)"
        )

    return True, None


def parse_stream_line(line: str) -> Optional[str]:
    """Return the payload of an SSE ``data:`` line, or None for any other line."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    return line[len("data:"):].strip()


def _delta_content(frame: Any) -> Optional[str]:
    if not isinstance(frame, dict):
        return None
    choices = frame.get("choices")
    if not choices or not isinstance(choices, list) or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else None


def _message_content(data: Any) -> str:
    if not isinstance(data, dict):
        raise ValueError("Completion response is not an object")
    choices = data.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return message.get("content") or ""


def _error_body(response: httpx.Response) -> Optional[dict]:
    try:
        return response.json() if response.content else None
    except ValueError:
        return None


class CompletionStream:
    """
    Lazily-opened stream of completion text fragments.

    No key is drawn and nothing is sent until the first fragment is
    requested. Closing the stream (explicitly, or by leaving
    ``async with``) releases the HTTP response; a closed stream yields
    nothing more.

    Usage:
        async with client.stream_complete("Write a haiku") as stream:
            async for fragment in stream:
                print(fragment, end="")
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        pool: CredentialPool,
        payload: Dict[str, Any],
    ):
        self._http = http
        self._pool = pool
        self._payload = payload
        self._fragments = self._iterate()

    def __aiter__(self) -> "CompletionStream":
        return self

    async def __anext__(self) -> str:
        return await self._fragments.__anext__()

    async def aclose(self) -> None:
        await self._fragments.aclose()

    async def read_all(self) -> str:
        """Drain the stream and return the concatenated text."""
        parts = []
        async for fragment in self:
            parts.append(fragment)
        return "".join(parts)

    async def __aenter__(self) -> "CompletionStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def _iterate(self) -> AsyncIterator[str]:
        key = self._pool.next()
        if key is None:
            raise ProviderUnavailableError("No Groq API keys configured")

        reported = False
        try:
            async with self._http.stream(
                "POST",
                "/chat/completions",
                json=self._payload,
                headers={"Authorization": f"Bearer {key}"},
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    self._pool.report_error(key)
                    reported = True
                    raise GroqError(
                        f"API error: {response.status_code}",
                        status_code=response.status_code,
                        response=_error_body(response),
                    )

                self._pool.report_success(key)
                reported = True

                async for line in response.aiter_lines():
                    data = parse_stream_line(line)
                    if data is None:
                        continue
                    if data == STREAM_DONE:
                        return
                    try:
                        frame = json.loads(data)
                    except ValueError:
                        logger.debug("Skipping malformed stream frame")
                        continue
                    content = _delta_content(frame)
                    if content:
                        yield content

        except (httpx.HTTPError, httpx.StreamError) as e:
            if not reported:
                self._pool.report_error(key)
            raise GroqError(f"Stream failed: {e}") from e


class GroqClient:
    """
    Async client for Groq chat completions with key load balancing.

    Usage:
        pool = CredentialPool(["gsk_a", "gsk_b"])
        client = GroqClient(pool)

        text = await client.complete("Summarize this paragraph", system_prompt="Be brief.")

        await client.close()
    """

    BASE_URL = "https://api.groq.com/openai/v1"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    TEMPERATURE = 0.7
    MAX_TOKENS = 2048

    def __init__(
        self,
        pool: CredentialPool,
        model: Optional[str] = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Groq client.

        Args:
            pool: Key pool to draw API keys from
            model: Model to use (defaults to llama-3.3-70b-versatile)
            base_url: API base URL
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.pool = pool
        self.model = model or self.DEFAULT_MODEL

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a completion for a single prompt.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (default 0.7)
            max_tokens: Maximum output tokens (default 2048)

        Returns:
            Generated text ("" if the model returned no content)

        Raises:
            ProviderUnavailableError: No keys configured, or both attempts failed
        """
        return await self._complete_messages(
            build_messages(prompt, system_prompt), temperature, max_tokens
        )

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a reply to a conversation.

        Args:
            messages: Dicts with ``role`` (system, user, assistant) and ``content``
        """
        formatted = []
        for msg in messages:
            role = msg.get("role")
            if role not in CHAT_ROLES:
                raise ValueError(f"Unknown role: {role}")
            formatted.append({"role": role, "content": msg.get("content", "")})

        return await self._complete_messages(formatted, temperature, max_tokens)

    async def batch_complete(
        self,
        prompts: List[str],
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> List[str]:
        """Run several completions concurrently; results keep prompt order."""
        tasks = [
            self.complete(prompt, system_prompt, temperature, max_tokens)
            for prompt in prompts
        ]
        return list(await asyncio.gather(*tasks))

    def stream_complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> CompletionStream:
        """
        Stream a completion as text fragments.

        The key is drawn and the request sent when the first fragment is
        pulled; a stream closed before that leaves the pool untouched.
        There is no retry: a broken stream raises GroqError from the
        iteration.

        Raises:
            ProviderUnavailableError: No keys configured
        """
        self._ensure_open()
        if len(self.pool) == 0:
            raise ProviderUnavailableError("No Groq API keys configured")

        payload = self._payload(
            build_messages(prompt, system_prompt), temperature, max_tokens
        )
        payload["stream"] = True
        return CompletionStream(self._client, self.pool, payload)

    def stats(self) -> Dict[str, Any]:
        return self.pool.stats().to_dict()

    async def _complete_messages(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> str:
        self._ensure_open()
        key = self.pool.next()
        if key is None:
            raise ProviderUnavailableError("No Groq API keys configured")

        payload = self._payload(messages, temperature, max_tokens)

        try:
            return await self._attempt(key, payload)
        except GroqError as e:
            logger.warning(f"Groq request failed with key {mask_key(key)}: {e}")

        fallback = self.pool.next(exclude=key)
        logger.info(f"Retrying Groq request with key {mask_key(fallback)}")

        try:
            return await self._attempt(fallback, payload)
        except GroqError as e:
            raise ProviderUnavailableError(
                f"Groq completion failed after retry: {e}",
                status_code=e.status_code,
                response=e.response,
            ) from e

    async def _attempt(self, key: str, payload: Dict[str, Any]) -> str:
        """One request with one key; reports the outcome to the pool exactly once."""
        try:
            response = await self._client.post(
                "/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {key}"},
            )
        except httpx.HTTPError as e:
            self.pool.report_error(key)
            raise GroqError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            self.pool.report_error(key)
            raise GroqError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                response=_error_body(response),
            )

        try:
            content = _message_content(response.json())
        except (ValueError, AttributeError, IndexError, TypeError) as e:
            self.pool.report_error(key)
            raise GroqError(f"Malformed response: {e}", status_code=response.status_code) from e

        self.pool.report_success(key)
        return content

    def _payload(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.TEMPERATURE if temperature is None else temperature,
            "max_tokens": self.MAX_TOKENS if max_tokens is None else max_tokens,
        }

    def _ensure_open(self) -> None:
        if self._closed:
            raise GroqError("Client has been closed")

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
