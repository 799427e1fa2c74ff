import asyncio
import logging
from abc import ABC, abstractmethod

from groq import AsyncGroq, GroqError
from openai import AsyncOpenAI, OpenAIError

from cbt_api.config import Settings
from cbt_api.errors import UpstreamFailure
from cbt_api.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

JSON_RESPONSE_FORMAT = {"type": "json_object"}


# ===========================
# ABSTRACT INTERFACE
# ===========================
class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the text of the single top completion, or raise UpstreamFailure"""
        pass


# ===========================
# CHAT COMPLETIONS (shared by OpenAI and Groq)
# ===========================
class ChatCompletionProvider(LLMProvider):
    name = "LLM"
    sdk_errors = ()

    def __init__(self, client, model: str, settings: Settings):
        self.client = client
        self.model = model
        self.timeout = settings.LLM_TIMEOUT
        self.temperature = settings.LLM_TEMPERATURE
        self.max_tokens = settings.LLM_MAX_TOKENS

    async def generate(self, prompt: str) -> str:
        logger.info(f"[{self.name}] Generating response (model: {self.model}, prompt length: {len(prompt)})")
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format=JSON_RESPONSE_FORMAT,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"[{self.name} ERROR] Timed out after {self.timeout}s")
            raise UpstreamFailure(f"{self.name} request timed out after {self.timeout}s") from e
        except self.sdk_errors as e:
            logger.error(f"[{self.name} ERROR] {type(e).__name__}: {e}")
            raise UpstreamFailure(f"{self.name} request failed: {e}") from e

        if not response.choices:
            raise UpstreamFailure(f"{self.name} returned no completion choices")

        result = response.choices[0].message.content
        if not result or not result.strip():
            raise UpstreamFailure(f"{self.name} returned an empty completion")

        logger.info(f"[{self.name}] Response generated (length: {len(result)})")
        return result


# ===========================
# OPENAI PROVIDER
# ===========================
class OpenAIProvider(ChatCompletionProvider):
    name = "OPENAI"
    sdk_errors = (OpenAIError,)

    def __init__(self, settings: Settings, client=None):
        if client is None:
            if not settings.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY not set in environment")
            # One upstream call per request, no SDK retries
            client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.LLM_TIMEOUT,
                max_retries=0,
            )
        super().__init__(client, settings.OPENAI_MODEL, settings)
        logger.info("[OPENAI] Provider initialized successfully")


# ===========================
# GROQ PROVIDER
# ===========================
class GroqProvider(ChatCompletionProvider):
    name = "GROQ"
    sdk_errors = (GroqError,)

    def __init__(self, settings: Settings, client=None):
        if client is None:
            if not settings.GROQ_API_KEY:
                raise ValueError("GROQ_API_KEY not set in environment")
            client = AsyncGroq(
                api_key=settings.GROQ_API_KEY,
                timeout=settings.LLM_TIMEOUT,
                max_retries=0,
            )
        super().__init__(client, settings.GROQ_MODEL, settings)
        logger.info("[GROQ] Provider initialized successfully")


# ===========================
# FACTORY
# ===========================
_PROVIDERS = {
    "openai": OpenAIProvider,
    "groq": GroqProvider,
}


def get_llm_provider(settings: Settings) -> LLMProvider:
    """Get the configured LLM provider"""
    provider_cls = _PROVIDERS.get(settings.LLM_PROVIDER)
    if provider_cls is None:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")
    logger.info(f"[LLM] Initializing provider '{settings.LLM_PROVIDER}'...")
    return provider_cls(settings)
