"""
Language model providers used to synthesize answers from retrieved context.
"""

from .base import (
    BaseLLM,
    ChatMessage,
    GenerateOptions,
    GenerateResult,
    LLMConfig,
    LLMProviderType,
    first_available,
)
from .ollama import OllamaLLM

__all__ = ["BaseLLM", "ChatMessage", "GenerateOptions", "GenerateResult", "LLMConfig",
           "LLMProviderType", "OllamaLLM", "first_available"]
