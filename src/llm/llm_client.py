import asyncio
import logging
from typing import Optional

from llm.providers.base import LLMProvider
from todo_ai.config import Settings
from todo_ai.errors import ExtractionTransportError

logger = logging.getLogger(__name__)


class LLMClient:
    """Single entry point for text completions.

    Bounds every call with a timeout and retries transport failures only;
    a response that arrived but could not be parsed is never retried because
    the same model output would fail the same way.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        retry_backoff_s: float = 0.5,
    ):
        self.provider = provider
        self.model = model
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.retry_backoff_s = retry_backoff_s

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        name = settings.llm_provider
        if name == "openai":
            from llm.providers.openai_provider import OpenAIProvider

            provider: LLMProvider = OpenAIProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                base_url=settings.openai_base_url,
                timeout=settings.llm_timeout_s,
            )
        elif name == "ollama":
            from llm.providers.ollama_provider import OllamaProvider

            provider = OllamaProvider(
                model=settings.ollama_model,
                base_url=settings.ollama_base_url,
                timeout=settings.llm_timeout_s,
            )
        elif name == "mock":
            from llm.providers.mock_provider import MockProvider

            provider = MockProvider()
        else:
            raise RuntimeError(f"Unknown LLM_PROVIDER: {name!r}")

        logger.info(f"LLM provider: {provider.name}")
        return cls(
            provider=provider,
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            retry_backoff_s=settings.llm_retry_backoff_s,
        )

    async def _attempt(self, system: str, user: str) -> str:
        try:
            return await asyncio.wait_for(
                self.provider.generate(system=system, user=user, model=self.model),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionTransportError(
                f"{self.provider.name} did not answer within {self.timeout_s:g}s"
            ) from e

    async def complete(self, system: str, user: str) -> str:
        attempt = 0
        while True:
            try:
                return await self._attempt(system, user)
            except ExtractionTransportError as e:
                if attempt >= self.max_retries:
                    raise
                delay = self.retry_backoff_s * (2 ** attempt)
                attempt += 1
                logger.warning(
                    f"LLM transport error ({e}); retry {attempt}/{self.max_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
