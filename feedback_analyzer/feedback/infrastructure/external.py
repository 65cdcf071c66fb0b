"""
Feedback External Service Adapters
==================================

Adapts the infrastructure LLM clients to the application IAIGateway
interface.
"""

from typing import List, Optional

from feedback_analyzer.config import Settings
from feedback_analyzer.feedback.application import IAIGateway, AIResponse
from feedback_analyzer.infrastructure.llm import ILLMClient, build_llm_client


class AIGatewayAdapter(IAIGateway):
    """
    Adapter that wraps an infrastructure LLM client.

    Implements the application layer IAIGateway interface; errors from the
    client (LLMException) propagate to the enrichment adapter.
    """

    def __init__(self, client: ILLMClient):
        self._client = client

    async def run(self, model_id: str, messages: List[dict], max_tokens: int) -> AIResponse:
        result = await self._client.run(model_id, messages, max_tokens)
        return AIResponse(response=result.content)

    async def close(self) -> None:
        await self._client.close()


def build_ai_gateway(app_settings: Optional[Settings] = None) -> Optional[AIGatewayAdapter]:
    """AI gateway for the configured provider, or None when AI is disabled."""
    client = build_llm_client(app_settings)
    return AIGatewayAdapter(client) if client is not None else None
