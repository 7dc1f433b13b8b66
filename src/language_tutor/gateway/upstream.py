"""Clients for the upstream text-completion service."""

from typing import Protocol

import httpx
import structlog
from openai import AsyncOpenAI, OpenAIError

from language_tutor.config import Settings

logger = structlog.get_logger()


class UpstreamError(Exception):
    """The completion service was unreachable or returned an unusable envelope."""


class CompletionClient(Protocol):
    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the completion text."""
        ...


class AnthropicCompletionClient:
    """Calls the Anthropic Messages API once per prompt, without retries.

    Args:
        api_key: Anthropic API key.
        model: Model identifier.
        max_tokens: Output token limit.
        base_url: API root.
        api_version: Value of the ``anthropic-version`` header.
        timeout: Seconds before the request is abandoned.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-sonnet-20240229",
        max_tokens: int = 1000,
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post("/v1/messages", json=payload, headers=self._get_headers())
        except (httpx.HTTPError, UnicodeEncodeError) as exc:
            raise UpstreamError(f"Upstream request failed: {exc!r}") from exc

        if not response.is_success:
            raise UpstreamError(f"Upstream API error: {response.status_code}")

        try:
            text = response.json()["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError("Malformed upstream response envelope") from exc
        if not isinstance(text, str):
            raise UpstreamError("Upstream completion text is not a string")

        logger.debug("upstream_completion_received", model=self.model, length=len(text))
        return text

    def _get_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }


class OpenAICompletionClient:
    """Calls OpenAI chat completions once per prompt, without retries.

    Args:
        api_key: OpenAI API key.
        model: Model to use.
        max_tokens: Output token limit.
        timeout: Seconds before the request is abandoned.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        timeout: float = 30.0,
    ):
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except (OpenAIError, UnicodeEncodeError) as exc:
            raise UpstreamError(f"Upstream request failed: {exc!r}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamError("Upstream returned an empty completion")

        logger.debug("upstream_completion_received", model=self.model, length=len(content))
        return content


def build_completion_client(settings: Settings) -> CompletionClient | None:
    """Create the configured upstream client, or None when no credential is set."""
    api_key = settings.upstream_api_key
    if not api_key:
        return None
    if settings.upstream_provider == "openai":
        return OpenAICompletionClient(
            api_key=api_key,
            model=settings.openai_model,
            max_tokens=settings.upstream_max_tokens,
            timeout=settings.upstream_timeout_seconds,
        )
    return AnthropicCompletionClient(
        api_key=api_key,
        model=settings.upstream_model,
        max_tokens=settings.upstream_max_tokens,
        base_url=settings.upstream_base_url,
        api_version=settings.anthropic_version,
        timeout=settings.upstream_timeout_seconds,
    )
