# src/code_companion/providers/__init__.py
from .base import LLMProvider
from .huggingface import HuggingFaceProvider
from .openai import OpenAIProvider

__all__ = ["LLMProvider", "OpenAIProvider", "HuggingFaceProvider"]
