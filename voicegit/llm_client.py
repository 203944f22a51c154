"""
VOICEGIT LLM Client
Text generation for commit messages and code reviews.

One ``complete()`` call, several interchangeable backends:
- OpenAI API (default)
- Anthropic API
- Local GGUF models via llama-cpp-python
- A mock backend for tests and offline use

The primary backend is tried first, then each fallback in order. A backend
that is not configured (missing key or model path) is skipped.

Usage:
    from voicegit.llm_client import LLMClient

    client = LLMClient(backend="openai", fallback_backends=["local"], model_path="review.gguf")
    response = await client.complete(diff_prompt, system_prompt=COMMIT_SYSTEM_PROMPT)
    print(response.content, response.backend)
"""

from __future__ import annotations

import asyncio
import os
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from voicegit.exceptions import DelegationError
from voicegit.logging_config import get_logger

logger = get_logger(__name__)


__all__ = [
    "LLMClient",
    "LLMBackend",
    "LLMResponse",
    "TokenUsage",
    "MockLLMClient",
    "create_llm_client",
]

Messages = List[Dict[str, Any]]


# =============================================================================
# Enums and Data Classes
# =============================================================================


class LLMBackend(Enum):
    """Supported generation backends."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    LOCAL = "local"
    MOCK = "mock"


@dataclass
class TokenUsage:
    """Token counts of the latest request and of the whole session."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    session_prompt_tokens: int = 0
    session_completion_tokens: int = 0
    session_total_tokens: int = 0

    def add(self, prompt: int, completion: int) -> None:
        """Record one request."""
        self.prompt_tokens, self.completion_tokens = prompt, completion
        self.total_tokens = prompt + completion
        self.session_prompt_tokens += prompt
        self.session_completion_tokens += completion
        self.session_total_tokens += self.total_tokens

    @classmethod
    def of(cls, prompt: int, completion: int) -> "TokenUsage":
        usage = cls()
        usage.add(prompt, completion)
        return usage

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class LLMResponse:
    """Generated text plus where and how it was produced."""
    content: str
    finish_reason: str = ""
    model: str = ""
    usage: Optional[TokenUsage] = None
    latency_ms: float = 0.0
    backend: str = ""


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


# =============================================================================
# Backends
# =============================================================================


class BaseLLMClient(ABC):
    """A single generation backend."""

    @abstractmethod
    async def chat(self, messages: Messages, temperature: float = 0.3, max_tokens: int = 1024) -> LLMResponse:
        """Generate a reply to ``messages``."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the backend is configured and can be used."""


class MockLLMClient(BaseLLMClient):
    """Returns queued responses, then a fixed one. Records every request."""

    def __init__(self):
        self.responses: List[LLMResponse] = []
        self.requests: List[Messages] = []
        self.call_count = 0

    def set_response(self, response: Union[LLMResponse, str]):
        """Queue the next response."""
        if isinstance(response, str):
            response = LLMResponse(content=response, model="mock")
        self.responses.append(response)

    async def chat(self, messages: Messages, temperature: float = 0.3, max_tokens: int = 1024) -> LLMResponse:
        self.call_count += 1
        self.requests.append(messages)
        if self.responses:
            return self.responses.pop(0)
        return LLMResponse(content="Mock response", model="mock", usage=TokenUsage.of(10, 5))

    async def health_check(self) -> bool:
        return True


class LocalLlamaClient(BaseLLMClient):
    """GGUF model run in-process with llama-cpp-python."""

    def __init__(self, model_path: str, n_ctx: int = 8192, n_gpu_layers: int = -1):
        self.model_path = model_path
        self.n_ctx = n_ctx
        self.n_gpu_layers = n_gpu_layers  # -1 offloads every layer
        self._model = None

    def _load(self):
        try:
            from llama_cpp import Llama
        except ImportError:
            raise RuntimeError("llama-cpp-python required for local inference")

        if not os.path.isfile(self.model_path):
            raise RuntimeError(f"Model file not found: {self.model_path}")

        logger.info(f"Loading local model: {self.model_path}")
        return Llama(
            model_path=self.model_path,
            n_ctx=self.n_ctx,
            n_gpu_layers=self.n_gpu_layers,
            verbose=False,
        )

    async def _ensure_loaded(self):
        if self._model is None:
            self._model = await asyncio.to_thread(self._load)

    async def chat(self, messages: Messages, temperature: float = 0.3, max_tokens: int = 1024) -> LLMResponse:
        await self._ensure_loaded()

        start = time.monotonic()
        response = await asyncio.to_thread(
            self._model.create_chat_completion,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        choice = response["choices"][0]
        counts = response.get("usage") or {}

        return LLMResponse(
            content=choice.get("message", {}).get("content") or "",
            finish_reason=choice.get("finish_reason") or "",
            model=response.get("model", "local"),
            usage=TokenUsage.of(counts.get("prompt_tokens", 0), counts.get("completion_tokens", 0)),
            latency_ms=_elapsed_ms(start),
        )

    async def health_check(self) -> bool:
        try:
            await self._ensure_loaded()
        except Exception as e:
            logger.debug(f"Local model unavailable: {e}")
            return False
        return True


class _APIClient(BaseLLMClient):
    """Hosted backend: API key from argument or environment, SDK client built on first use."""

    key_variable = ""
    default_model = ""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or os.environ.get(self.key_variable)
        self.model = model or self.default_model
        self._client = None

    @abstractmethod
    def _create(self) -> Any:
        """Build the SDK client (the SDK is imported here)."""

    def _ensure_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise RuntimeError(f"{self.key_variable} not set")
            self._client = self._create()
        return self._client

    async def health_check(self) -> bool:
        try:
            self._ensure_client()
        except Exception as e:
            logger.debug(f"{type(self).__name__} unavailable: {e}")
            return False
        return True


class OpenAIClient(_APIClient):
    """OpenAI chat completions."""

    key_variable = "OPENAI_API_KEY"
    default_model = "gpt-4o-mini"

    def _create(self) -> Any:
        try:
            from openai import AsyncOpenAI
        except ImportError:
            raise RuntimeError("openai package not installed")
        return AsyncOpenAI(api_key=self.api_key)

    async def chat(self, messages: Messages, temperature: float = 0.3, max_tokens: int = 1024) -> LLMResponse:
        client = self._ensure_client()

        start = time.monotonic()
        response = await client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = TokenUsage.of(response.usage.prompt_tokens, response.usage.completion_tokens)

        return LLMResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "",
            model=self.model,
            usage=usage,
            latency_ms=_elapsed_ms(start),
        )


class AnthropicClient(_APIClient):
    """Anthropic messages API."""

    key_variable = "ANTHROPIC_API_KEY"
    default_model = "claude-3-5-haiku-latest"

    def _create(self) -> Any:
        try:
            from anthropic import AsyncAnthropic
        except ImportError:
            raise RuntimeError("anthropic package not installed")
        return AsyncAnthropic(api_key=self.api_key)

    async def chat(self, messages: Messages, temperature: float = 0.3, max_tokens: int = 1024) -> LLMResponse:
        client = self._ensure_client()

        # The system prompt is a separate parameter here
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [m for m in messages if m["role"] != "system"]

        start = time.monotonic()
        response = await client.messages.create(
            model=self.model,
            system=system,
            messages=turns,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return LLMResponse(
            content="".join(block.text for block in response.content if block.type == "text"),
            finish_reason=response.stop_reason or "",
            model=self.model,
            usage=TokenUsage.of(response.usage.input_tokens, response.usage.output_tokens),
            latency_ms=_elapsed_ms(start),
        )


# =============================================================================
# Main LLM Client
# =============================================================================


class LLMClient:
    """
    Generation front end with ordered backend fallback.

    Backend clients are created on first use and reused. Token usage is
    accumulated over the lifetime of the client.
    """

    def __init__(
        self,
        backend: Union[LLMBackend, str] = LLMBackend.OPENAI,
        model_path: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fallback_backends: Optional[List[Union[LLMBackend, str]]] = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ):
        """
        Args:
            backend: Backend tried first
            model_path: GGUF file for the local backend
            api_key: Key for the hosted backends (else read from the environment)
            model: Model name for the hosted backends
            fallback_backends: Backends tried next, in order
            temperature: Default sampling temperature
            max_tokens: Default response length limit
        """
        self.backend = LLMBackend(backend)
        self.model_path = model_path
        self.api_key = api_key
        self.model = model
        self.fallback_backends = [LLMBackend(b) for b in fallback_backends or []]
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.token_usage = TokenUsage()
        self._clients: Dict[LLMBackend, BaseLLMClient] = {}
        self._factories: Dict[LLMBackend, Callable[[], BaseLLMClient]] = {
            LLMBackend.OPENAI: lambda: OpenAIClient(api_key=self.api_key, model=self.model),
            LLMBackend.ANTHROPIC: lambda: AnthropicClient(api_key=self.api_key, model=self.model),
            LLMBackend.LOCAL: self._local_client,
            LLMBackend.MOCK: MockLLMClient,
        }

    def _local_client(self) -> BaseLLMClient:
        if not self.model_path:
            raise ValueError("model_path required for local backend")
        return LocalLlamaClient(model_path=self.model_path)

    def _get_client(self, backend: LLMBackend) -> BaseLLMClient:
        if backend not in self._clients:
            self._clients[backend] = self._factories[backend]()
        return self._clients[backend]

    @property
    def backend_order(self) -> List[LLMBackend]:
        return [self.backend] + [b for b in self.fallback_backends if b != self.backend]

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a reply to a single prompt.

        Returns:
            The response of the first backend that answered

        Raises:
            DelegationError: Every backend was unavailable or failed
        """
        messages: Messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        last_error: Optional[Exception] = None
        for backend in self.backend_order:
            try:
                client = self._get_client(backend)
                if not await client.health_check():
                    logger.warning(f"Backend {backend.value} not available, trying next")
                    continue

                response = await client.chat(
                    messages,
                    temperature=self.temperature if temperature is None else temperature,
                    max_tokens=self.max_tokens if max_tokens is None else max_tokens,
                )
            except Exception as e:
                logger.warning(f"Backend {backend.value} failed: {e}")
                last_error = e
                continue

            response.backend = backend.value
            if response.usage:
                self.token_usage.add(response.usage.prompt_tokens, response.usage.completion_tokens)
            logger.debug(f"Completion via {backend.value} in {response.latency_ms:.0f}ms")
            return response

        raise DelegationError(f"All LLM backends failed. Last error: {last_error}")


def create_llm_client(config: Any = None, **kwargs) -> LLMClient:
    """
    Build an LLMClient from ``voicegit.config.LLMConfig``.

    Keyword arguments override individual settings.
    """
    settings: Dict[str, Any] = {}
    if config is not None:
        settings = config.model_dump(
            include={"backend", "model_path", "api_key", "model", "fallback_backends", "temperature", "max_tokens"}
        )
    settings.update(kwargs)
    return LLMClient(**settings)
