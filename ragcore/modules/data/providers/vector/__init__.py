"""
Vector Provider System

Separates the retrieval concerns:
- chunking: Text splitting strategies
- embedding: Text embedding providers
- db: Vector database providers
"""

from .config import ChunkConfig, EmbeddingConfig, VectorDBConfig, VectorConfig

__all__ = ["ChunkConfig", "EmbeddingConfig", "VectorDBConfig", "VectorConfig"]
