# src/code_companion/providers/base.py
from abc import ABC, abstractmethod


class LLMProvider(ABC):
    @abstractmethod
    async def review(self, system_prompt: str, prompt: str) -> str:
        """Send prompts to the LLM and return the raw response text."""
        pass
