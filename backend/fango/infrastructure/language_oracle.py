"""Language Oracle — TextOracle implementation backed by the resilient Anthropic client.

Invariants:
    - complete() returns the concatenated text blocks of one single-turn response
    - Empty text is a failure (OracleUnavailableError reason="empty_response")
"""

import logging

from fango.core.errors import OracleUnavailableError
from fango.infrastructure.anthropic_client import ResilientAnthropicClient

logger = logging.getLogger(__name__)


class AnthropicTextOracle:
    """Single-turn text generation for profile synthesis and candidate ranking."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        max_tokens: int = 2000,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, *, system: str, prompt: str) -> str:
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "\n".join(
            b.text for b in response.content
            if getattr(b, "type", None) == "text"
        ).strip()
        if not text:
            raise OracleUnavailableError("language", "empty_response")
        return text

    async def close(self) -> None:
        await self.client.close()
