"""
LLM Client
==========

Wrapper mỏng quanh OpenAI chat completions API.
"""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from watchly.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Chat completion thất bại (network error, non-2xx, response rỗng)."""


class LLMClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        timeout_seconds: float = 30.0,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self.model = model
        self.temperature = temperature
        # max_retries=0: lỗi upstream được trả thẳng về caller
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0
        )

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Gửi một prompt và trả về content của choice đầu tiên.

        Raises:
            LLMError: nếu API lỗi hoặc không có content
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                temperature=self.temperature
            )
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error: {e.status_code}")
            raise LLMError(f"OpenAI API error: {e.status_code}") from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise LLMError(f"OpenAI request failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise LLMError("OpenAI API returned no content")

        return response.choices[0].message.content


_llm_client_instance: Optional[LLMClient] = None


def get_llm_client() -> Optional[LLMClient]:
    """
    Get singleton instance của LLMClient.

    Returns:
        LLMClient, hoặc None nếu OPENAI_API_KEY chưa được cấu hình
    """
    global _llm_client_instance

    if not settings.openai_api_key:
        return None

    if _llm_client_instance is None:
        _llm_client_instance = LLMClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.llm_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=settings.openai_base_url
        )

    return _llm_client_instance
