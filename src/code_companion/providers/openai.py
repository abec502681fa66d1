# src/code_companion/providers/openai.py
import logging
from openai import AsyncOpenAI
from .base import LLMProvider


logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    DEFAULT_MODEL = "gpt-4-turbo-preview"
    BASE_URL: str | None = None
    json_mode = True

    def __init__(self, api_key: str, model: str | None = None):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.client = AsyncOpenAI(api_key=api_key, base_url=self.BASE_URL)

    async def review(self, system_prompt: str, prompt: str) -> str:
        kwargs = {}
        if self.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=0.3,
            max_tokens=2000,
            **kwargs,
        )

        text = response.choices[0].message.content or ""
        logger.info(f"{type(self).__name__} response length: {len(text)} chars")

        if not text.strip():
            raise ValueError(f"{type(self).__name__} returned empty response")
        return text
