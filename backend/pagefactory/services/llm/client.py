import asyncio
from typing import Optional
from zhipuai import ZhipuAI
from pagefactory.core.logging import get_logger

logger = get_logger("llm_client")


class LLMClient:
    """
    Thin wrapper over the chat-completions SDK. SDK-level retries are off:
    a failed generation fails the job and the user resubmits.
    """

    def __init__(self, api_key: str, model: str, max_tokens: int, temperature: float = 0.3, timeout: float = 180):
        self.client = ZhipuAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.total_tokens = 0

    @classmethod
    def from_settings(cls, settings) -> "LLMClient":
        return cls(
            api_key=settings.LLM_API_KEY,
            model=settings.LLM_MODEL,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            timeout=settings.LLM_TIMEOUT,
        )

    def chat_completion(self, messages: list, temperature: Optional[float] = None) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens,
            )

            # Track tokens
            if hasattr(response, 'usage') and response.usage:
                self.total_tokens += response.usage.total_tokens

            content = response.choices[0].message.content
            if not content:
                raise ValueError("LLM returned an empty completion")
            return content

        except Exception as e:
            logger.error(f"LLM Call failed: {e}")
            raise

    async def achat_completion(self, messages: list, temperature: Optional[float] = None) -> str:
        """Async wrapper for chat_completion using asyncio.to_thread"""
        return await asyncio.to_thread(
            self.chat_completion,
            messages=messages,
            temperature=temperature
        )
