"""Language Oracle — text extraction over the resilient client."""

import pytest

from fango.core.errors import OracleUnavailableError
from fango.infrastructure.language_oracle import AnthropicTextOracle


class _Block:
    def __init__(self, type, text=None):
        self.type = type
        self.text = text


class _Response:
    def __init__(self, blocks):
        self.content = blocks


class _Client:
    def __init__(self, response):
        self.response = response
        self.kwargs = None

    async def create_message(self, **kwargs):
        self.kwargs = kwargs
        return self.response


async def test_complete_joins_text_blocks():
    client = _Client(_Response([
        _Block("text", "id1,"), _Block("tool_use"), _Block("text", "id2"),
    ]))
    oracle = AnthropicTextOracle(client, "claude-test", 500)

    text = await oracle.complete(system="sys", prompt="選んでください")

    assert text == "id1,\nid2"
    assert client.kwargs["model"] == "claude-test"
    assert client.kwargs["max_tokens"] == 500
    assert client.kwargs["system"] == "sys"
    assert client.kwargs["messages"] == [{"role": "user", "content": "選んでください"}]


async def test_empty_response_is_unavailable():
    oracle = AnthropicTextOracle(_Client(_Response([_Block("text", "  ")])), "m")
    with pytest.raises(OracleUnavailableError) as exc_info:
        await oracle.complete(system="s", prompt="p")
    assert exc_info.value.reason == "empty_response"
