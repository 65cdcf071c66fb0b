"""
Tests for the LLM clients and AI gateway wiring.
"""

import json

import httpx
import pytest

from feedback_analyzer.config import Settings
from feedback_analyzer.core import ConfigurationException, LLMException, UpstreamUnavailableException
from feedback_analyzer.feedback.infrastructure import AIGatewayAdapter, build_ai_gateway
from feedback_analyzer.infrastructure.llm import (
    MockLLMClient,
    WorkersAIClient,
    build_llm_client,
)


def _workers_client(handler) -> WorkersAIClient:
    return WorkersAIClient(
        account_id="acct",
        api_token="token",
        api_base="https://api.example.test/client/v4/",
        timeout_seconds=1,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestWorkersAIClient:
    """Workers AI REST envelope handling."""

    @pytest.mark.asyncio
    async def test_successful_run(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "result": {"response": "negative"}})

        client = _workers_client(handler)
        messages = [{"role": "user", "content": "hi"}]

        result = await client.run("test-model", messages, 10)
        await client.close()

        assert result.content == "negative"
        assert seen["url"] == "https://api.example.test/client/v4/accounts/acct/ai/run/test-model"
        assert seen["auth"] == "Bearer token"
        assert seen["body"] == {"messages": messages, "max_tokens": 10}

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = _workers_client(lambda request: httpx.Response(500, json={"success": False}))

        with pytest.raises(LLMException):
            await client.run("m", [], 10)

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_raises(self):
        client = _workers_client(
            lambda request: httpx.Response(200, json={"success": False, "errors": [{"code": 3040}]})
        )

        with pytest.raises(LLMException) as exc_info:
            await client.run("m", [], 10)

        assert exc_info.value.details["errors"] == [{"code": 3040}]

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        client = _workers_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(LLMException):
            await client.run("m", [], 10)

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationException):
            WorkersAIClient(account_id=None, api_token="token")

    def test_llm_exception_is_upstream_unavailable(self):
        error = LLMException("timeout")
        assert isinstance(error, UpstreamUnavailableException)
        assert error.service_name == "AI Gateway"


class TestBuildClient:
    """Provider selection from settings."""

    def test_none_provider(self):
        assert build_llm_client(Settings(ai_provider="none")) is None
        assert build_ai_gateway(Settings(ai_provider="none")) is None

    def test_mock_provider(self):
        assert isinstance(build_llm_client(Settings(ai_provider="mock")), MockLLMClient)
        assert isinstance(build_ai_gateway(Settings(ai_provider="mock")), AIGatewayAdapter)

    def test_unconfigured_workers_ai_disables_enrichment(self):
        settings = Settings(ai_provider="workers-ai", cloudflare_account_id=None, cloudflare_api_token=None)
        assert build_llm_client(settings) is None

    def test_unconfigured_openai_disables_enrichment(self):
        settings = Settings(ai_provider="openai", openai_api_key=None)
        assert build_llm_client(settings) is None


class TestAIGatewayAdapter:
    """Adapter from LLM client results to AI responses."""

    @pytest.mark.asyncio
    async def test_run_returns_response_text(self):
        gateway = AIGatewayAdapter(MockLLMClient())
        response = await gateway.run("m", [{"role": "system", "content": "Return only: yes"}], 5)
        assert response.response == "negative"
