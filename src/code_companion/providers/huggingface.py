# src/code_companion/providers/huggingface.py
from .openai import OpenAIProvider


class HuggingFaceProvider(OpenAIProvider):
    """Hugging Face inference router through its OpenAI-compatible API."""
    BASE_URL = "https://router.huggingface.co/v1"
    DEFAULT_MODEL = "Qwen/Qwen2.5-Coder-32B-Instruct"
    json_mode = False
