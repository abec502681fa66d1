# tests/integration/test_providers.py
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock
from code_companion.providers.huggingface import HuggingFaceProvider
from code_companion.providers.openai import OpenAIProvider


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.mark.integration
@pytest.mark.asyncio
async def test_openai_provider_requests_json_object():
    provider = OpenAIProvider(api_key="test-key")
    provider.client.chat.completions.create = AsyncMock(
        return_value=_completion('{"comments": [], "issues": []}')
    )

    text = await provider.review("system", "Review this code: print('hello')")

    assert text == '{"comments": [], "issues": []}'
    kwargs = provider.client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4-turbo-preview"
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}
    assert kwargs["messages"][1]["role"] == "user"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_huggingface_provider_uses_router_without_json_mode():
    provider = HuggingFaceProvider(api_key="hf-token", model="meta-llama/Llama-3.1-8B-Instruct")
    provider.client.chat.completions.create = AsyncMock(return_value=_completion('{"comments": []}'))

    await provider.review("system", "prompt")

    assert str(provider.client.base_url).startswith("https://router.huggingface.co/v1")
    kwargs = provider.client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "meta-llama/Llama-3.1-8B-Instruct"
    assert "response_format" not in kwargs


@pytest.mark.integration
@pytest.mark.asyncio
async def test_provider_empty_response_raises():
    provider = OpenAIProvider(api_key="test-key")
    provider.client.chat.completions.create = AsyncMock(return_value=_completion(None))

    with pytest.raises(ValueError, match="empty response"):
        await provider.review("system", "prompt")
