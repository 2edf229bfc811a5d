"""
Base embedding interface
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmbeddingProviderType(str, Enum):
    HUGGINGFACE = "huggingface"
    OLLAMA = "ollama"


class EmbeddingConfig(BaseModel):
    """Configuration for embedding provider"""
    type: EmbeddingProviderType = Field(default=EmbeddingProviderType.HUGGINGFACE,
                                        description="Type of embedding provider")
    model_name: Optional[str] = Field(
        default=None, description="Name of the embedding model, provider default when empty")
    dimensions: Optional[int] = Field(
        default=None, description="Embedding dimensionality, derived from the model when empty")
    batch_size: int = Field(
        default=32, description="Batch size for in-process embedding")
    normalize_embeddings: bool = Field(
        default=True, description="Whether to normalize embeddings")
    device: str = Field(
        default="cpu", description="Device to run the in-process model on")
    base_url: str = Field(
        default="http://localhost:11434", description="Base URL of the remote inference server")
    timeout: float = Field(
        default=60.0, description="Request timeout in seconds for remote providers")

    model_config = ConfigDict(extra="allow")

    @field_validator('batch_size')
    @classmethod
    def validate_batch_size(cls, v):
        if v < 1:
            raise ValueError('batch_size must be at least 1')
        return v

    @field_validator('dimensions')
    @classmethod
    def validate_dimensions(cls, v):
        if v is not None and v < 1:
            raise ValueError('dimensions must be at least 1')
        return v

    @field_validator('device')
    @classmethod
    def validate_device(cls, v):
        allowed_devices = ['cpu', 'cuda', 'mps']
        if v not in allowed_devices:
            raise ValueError(f'device must be one of {allowed_devices}')
        return v

    def get(self) -> "BaseEmbedder":
        if self.type == EmbeddingProviderType.HUGGINGFACE:
            from .huggingface import HuggingFaceEmbedder
            return HuggingFaceEmbedder(self.model_copy())
        elif self.type == EmbeddingProviderType.OLLAMA:
            from .ollama import OllamaEmbedder
            return OllamaEmbedder(self.model_copy())
        else:
            raise ValueError(f"Invalid embedding type: {self.type}")


class BaseEmbedder(ABC):
    """Base abstract class for text embedding providers"""
    name: str
    default_model: str

    def __init__(self, config: EmbeddingConfig):
        self.config = config
        self.model_name = config.model_name or self.default_model
        self._dimension = config.dimensions or self._dimensions_for_model(self.model_name)

    @abstractmethod
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts

        Args:
            texts: List of texts to embed

        Returns:
            List of embedding vectors, in input order
        """
        raise NotImplementedError

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a query

        Args:
            text: Query text to embed

        Returns:
            Embedding vector
        """
        raise NotImplementedError

    @abstractmethod
    def _dimensions_for_model(self, model_name: str) -> int:
        raise NotImplementedError

    def get_name(self) -> str:
        return self.name

    def get_model_name(self) -> str:
        return self.model_name

    def get_dimensions(self) -> int:
        return self._dimension

    def _check_vectors(self, vectors: List[List[float]], expected: int) -> List[List[float]]:
        """Ensure one vector per input and every vector has the declared dimension"""
        if len(vectors) != expected:
            raise ValueError(
                f"expected {expected} embeddings, got {len(vectors)}")
        for vector in vectors:
            if len(vector) != self._dimension:
                raise ValueError(
                    f"embedding has {len(vector)} dimensions, expected {self._dimension}")
        return vectors

    async def close(self):
        """Release provider resources"""
        pass
