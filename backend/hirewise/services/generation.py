"""
Text Generation Providers - capability interface for LLM calls

Match summaries, requirement interpretation and resume field extraction
all need the same thing from a language model: prompt in, text out. This
module puts that behind one protocol so callers never talk to a vendor
SDK directly and the "no model configured" path is an ordinary provider.

Key Classes:
    - TextGenerator: Protocol (``async generate(prompt) -> str``)
    - OpenAITextGenerator: OpenAI chat completions
    - UnavailableTextGenerator: raises GenerationUnavailable on every call
    - MockTextGenerator: scripted responses for tests and local runs

Provider selection happens once, in get_text_generator(), from settings.
"""

import logging
import time
from typing import Any, Iterable, List, Optional, Protocol, runtime_checkable

from hirewise.exceptions import GenerationUnavailable
from hirewise.middleware.metrics import record_generation_latency

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


@runtime_checkable
class TextGenerator(Protocol):
    """
    Protocol defining the text generation interface.

    Implementations raise GenerationUnavailable when they cannot serve
    requests at all; any other exception means the call itself failed.
    """

    @property
    def provider_name(self) -> str:
        ...

    async def generate(self, prompt: str) -> str:
        ...


class OpenAITextGenerator:
    """
    OpenAI chat completions provider.

    Attributes:
        model: Chat model name
        temperature: Sampling temperature
        max_tokens: Completion token cap

    Example:
        >>> generator = OpenAITextGenerator(api_key="sk-...")
        >>> text = await generator.generate("Summarize ...")
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        temperature: float = 0.3,
        max_tokens: int = 1000,
        client: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self):
        """Get or create async OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str) -> str:
        client = self._get_client()
        start_time = time.perf_counter()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        finally:
            record_generation_latency(self.provider_name, time.perf_counter() - start_time)

        content = response.choices[0].message.content
        return (content or "").strip()


class UnavailableTextGenerator:
    """Provider used when no credential is configured."""

    provider_name = "none"

    def __init__(self, reason: str = "Text generation provider not configured") -> None:
        self.reason = reason

    async def generate(self, prompt: str) -> str:
        raise GenerationUnavailable(self.reason)


class MockTextGenerator:
    """
    Deterministic provider for testing.

    Returns scripted responses in order, then repeats ``default``.
    An Exception instance in ``responses`` is raised instead of returned.
    Every prompt is kept in ``prompts`` for assertions.
    """

    provider_name = "mock"

    def __init__(self, responses: Optional[Iterable[Any]] = None, default: str = "") -> None:
        self._responses: List[Any] = list(responses or [])
        self.default = default
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._responses:
            response = self._responses.pop(0)
        else:
            response = self.default
        if isinstance(response, Exception):
            raise response
        return response


def get_text_generator(
    provider_name: str,
    api_key: Optional[str] = None,
    model_name: Optional[str] = None,
    **kwargs: Any,
) -> TextGenerator:
    """
    Factory for text generation providers.

    Args:
        provider_name: "openai", "mock" or "none"
        api_key: Provider credential (openai)
        model_name: Override the provider's default model
        **kwargs: temperature / max_tokens for openai, default for mock

    Returns:
        TextGenerator instance. "openai" without an api_key yields an
        UnavailableTextGenerator rather than failing startup.

    Raises:
        ValueError: If provider is unknown
    """
    provider_name = (provider_name or "none").lower()

    if provider_name == "openai":
        if not api_key:
            logger.warning("No OPENAI_API_KEY set - text generation disabled")
            return UnavailableTextGenerator("API key missing")
        return OpenAITextGenerator(
            api_key=api_key,
            model=model_name or DEFAULT_OPENAI_MODEL,
            temperature=kwargs.get("temperature", 0.3),
            max_tokens=kwargs.get("max_tokens", 1000),
        )

    elif provider_name == "mock":
        return MockTextGenerator(default=kwargs.get("default", ""))

    elif provider_name == "none":
        return UnavailableTextGenerator()

    else:
        raise ValueError(
            f"Unknown generation provider: {provider_name}. "
            f"Supported: openai, mock, none"
        )


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code block from an LLM response."""
    content = content.strip()
    if content.startswith("```"):
        lines = content.split("\n")
        content = "\n".join(lines[1:])
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()
