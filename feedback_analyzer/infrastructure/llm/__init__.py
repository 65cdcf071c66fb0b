"""
LLM Client Infrastructure
==========================

Clients for metered text-generation providers behind one small interface.

Providers:
- Cloudflare Workers AI (REST `ai/run/{model}` endpoint, via httpx)
- Any OpenAI-compatible chat completions endpoint (openai SDK)
- A deterministic mock for local development and tests

Every client raises LLMException on failure; callers decide how to degrade.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
from openai import AsyncOpenAI

from feedback_analyzer.config import Settings, settings as default_settings
from feedback_analyzer.core import LLMException, ConfigurationException
from feedback_analyzer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ChatCompletionResult:
    """Result of a text-generation call."""

    def __init__(self, content: str, model: str, latency_ms: int):
        self.content = content
        self.model = model
        self.latency_ms = latency_ms


class ILLMClient(ABC):
    """
    Interface for text-generation providers.

    Mirrors the Workers AI binding: a model id, chat messages and a
    completion budget in, generated text out.
    """

    @abstractmethod
    async def run(
        self,
        model_id: str,
        messages: List[dict],
        max_tokens: int
    ) -> ChatCompletionResult:
        """Generate a completion."""

    async def close(self) -> None:
        """Release network resources."""


class WorkersAIClient(ILLMClient):
    """
    Cloudflare Workers AI client.

    Calls POST /accounts/{account_id}/ai/run/{model} and reads
    `result.response` from the envelope.
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        api_token: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self._account_id = account_id or default_settings.cloudflare_account_id
        self._api_token = api_token or default_settings.cloudflare_api_token
        if not self._account_id or not self._api_token:
            raise ConfigurationException("Workers AI account ID or API token not configured")

        self._api_base = (api_base or default_settings.cloudflare_api_base).rstrip("/")
        self._timeout = timeout_seconds or default_settings.ai_timeout_seconds
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout
            )
        return self._http_client

    async def run(
        self,
        model_id: str,
        messages: List[dict],
        max_tokens: int
    ) -> ChatCompletionResult:
        """
        Run a Workers AI text-generation model.

        Raises:
            LLMException: On transport errors, non-2xx status or an
                unsuccessful envelope
        """
        start_time = time.perf_counter()
        url = f"{self._api_base}/accounts/{self._account_id}/ai/run/{model_id}"

        try:
            client = await self._get_client()
            response = await client.post(
                url,
                json={"messages": messages, "max_tokens": max_tokens},
                headers={"Authorization": f"Bearer {self._api_token}"}
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise LLMException(f"Workers AI request failed: {e}")

        if not body.get("success", False):
            raise LLMException(
                "Workers AI returned an unsuccessful response",
                details={"errors": body.get("errors", [])}
            )

        result = body.get("result") or {}
        return ChatCompletionResult(
            content=result.get("response") or "",
            model=model_id,
            latency_ms=int((time.perf_counter() - start_time) * 1000)
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None


class OpenAILLMClient(ILLMClient):
    """
    OpenAI-compatible client (OpenAI, Groq, Workers AI's /v1 endpoint).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ):
        self._api_key = api_key or default_settings.openai_api_key
        if not self._api_key:
            raise ConfigurationException("OpenAI API key not configured")

        self._client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=base_url or default_settings.openai_base_url,
            timeout=timeout_seconds or default_settings.ai_timeout_seconds,
            max_retries=0
        )

    async def run(
        self,
        model_id: str,
        messages: List[dict],
        max_tokens: int
    ) -> ChatCompletionResult:
        """
        Generate chat completion.

        Raises:
            LLMException: If completion fails
        """
        start_time = time.perf_counter()

        try:
            response = await self._client.chat.completions.create(
                model=model_id,
                messages=messages,
                max_tokens=max_tokens
            )
        except Exception as e:
            raise LLMException(f"Chat completion failed: {e}")

        return ChatCompletionResult(
            content=response.choices[0].message.content or "",
            model=model_id,
            latency_ms=int((time.perf_counter() - start_time) * 1000)
        )

    async def close(self) -> None:
        await self._client.close()


class MockLLMClient(ILLMClient):
    """
    Mock LLM client for testing.

    Returns predictable responses without calling external APIs, chosen
    from the system prompt of the request.
    """

    async def run(
        self,
        model_id: str,
        messages: List[dict],
        max_tokens: int
    ) -> ChatCompletionResult:
        """Return mock response based on the system prompt."""
        system_prompt = str(messages[0].get("content", "")).lower() if messages else ""

        if "return json" in system_prompt:
            content = json.dumps({
                "overall": "negative",
                "key_concerns": ["performance", "security"],
                "positive_signals": ["integration requests"],
                "urgency_level": "high"
            })
        elif "trending topics" in system_prompt:
            content = "\n".join([
                "- Scalability of large network scans",
                "- Security hardening of public APIs",
                "- Multi-architecture container support",
                "- Monitoring stack integrations",
                "- Dashboard usability",
            ])
        elif "recommendations" in system_prompt:
            content = "\n".join([
                "- Patch the device search API injection flaw",
                "- Profile and fix SNMP poller memory growth",
                "- Publish multi-arch container images",
                "- Add a Prometheus metrics endpoint",
            ])
        elif "return only" in system_prompt:
            content = "negative"
        else:
            content = "This is a mock LLM response for testing purposes."

        return ChatCompletionResult(content=content, model="mock-model", latency_ms=0)


def build_llm_client(app_settings: Optional[Settings] = None) -> Optional[ILLMClient]:
    """
    Build the configured provider client.

    Returns None when the provider is 'none' or is missing credentials;
    enrichment then always uses its deterministic fallbacks.
    """
    app_settings = app_settings or default_settings
    provider = app_settings.ai_provider

    try:
        if provider == "workers-ai":
            return WorkersAIClient(
                account_id=app_settings.cloudflare_account_id,
                api_token=app_settings.cloudflare_api_token,
                api_base=app_settings.cloudflare_api_base,
                timeout_seconds=app_settings.ai_timeout_seconds
            )
        if provider == "openai":
            return OpenAILLMClient(
                api_key=app_settings.openai_api_key,
                base_url=app_settings.openai_base_url,
                timeout_seconds=app_settings.ai_timeout_seconds
            )
        if provider == "mock":
            return MockLLMClient()
    except ConfigurationException as e:
        logger.warning(f"AI gateway not configured, enrichment will use fallbacks: {e}")
        return None

    return None
