"""
Embedding Module

Provides text embedding providers for vector generation.
"""

from .base import BaseEmbedder, EmbeddingConfig, EmbeddingProviderType
from .huggingface import HuggingFaceEmbedder
from .ollama import OllamaEmbedder

__all__ = ["BaseEmbedder", "EmbeddingConfig", "EmbeddingProviderType",
           "HuggingFaceEmbedder", "OllamaEmbedder"]
