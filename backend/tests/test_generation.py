"""
Tests for text generation providers

Tests cover:
- Provider factory selection
- OpenAI provider request shape (client mocked)
- Unavailable and mock providers
- Code fence stripping
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from hirewise.exceptions import GenerationUnavailable
from hirewise.services.generation import (
    MockTextGenerator,
    OpenAITextGenerator,
    TextGenerator,
    UnavailableTextGenerator,
    get_text_generator,
    strip_code_fences,
)


class TestGeneratorFactory:
    """Test get_text_generator selection."""

    def test_openai_with_key(self):
        generator = get_text_generator("openai", api_key="sk-test", model_name="gpt-4o")

        assert isinstance(generator, OpenAITextGenerator)
        assert generator.model == "gpt-4o"

    def test_openai_without_key_is_unavailable(self):
        generator = get_text_generator("openai", api_key="")

        assert isinstance(generator, UnavailableTextGenerator)

    def test_none_and_mock(self):
        assert isinstance(get_text_generator("none"), UnavailableTextGenerator)
        assert isinstance(get_text_generator("MOCK"), MockTextGenerator)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown generation provider"):
            get_text_generator("cohere")

    def test_providers_satisfy_protocol(self):
        assert isinstance(MockTextGenerator(), TextGenerator)
        assert isinstance(UnavailableTextGenerator(), TextGenerator)


class TestOpenAITextGenerator:
    """Test OpenAI provider with a mocked client."""

    @pytest.fixture
    def client(self):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = "  Strong match.  "
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=response)
        return client

    @pytest.mark.asyncio
    async def test_generate_returns_stripped_content(self, client):
        generator = OpenAITextGenerator(api_key="sk-test", client=client, temperature=0.2, max_tokens=100)

        text = await generator.generate("Explain")

        assert text == "Strong match."
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [{"role": "user", "content": "Explain"}]
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_generate_propagates_client_errors(self, client):
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        generator = OpenAITextGenerator(api_key="sk-test", client=client)

        with pytest.raises(RuntimeError):
            await generator.generate("Explain")


class TestFallbackProviders:
    """Test unavailable and mock providers."""

    @pytest.mark.asyncio
    async def test_unavailable_raises(self):
        with pytest.raises(GenerationUnavailable):
            await UnavailableTextGenerator().generate("anything")

    @pytest.mark.asyncio
    async def test_mock_scripted_responses(self):
        generator = MockTextGenerator(["first", ValueError("boom")], default="later")

        assert await generator.generate("p1") == "first"
        with pytest.raises(ValueError):
            await generator.generate("p2")
        assert await generator.generate("p3") == "later"
        assert generator.prompts == ["p1", "p2", "p3"]


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text_untouched(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'
