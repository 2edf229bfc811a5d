"""
Database Module

Provides vector database providers for storage and retrieval.
"""

from .base import BaseVectorDB, VectorDBConfig, VectorDBType, VectorRecord, chunk_id
from .chroma import ChromaVectorDB
from .pgvector import PgVectorDB

__all__ = ["BaseVectorDB", "VectorDBConfig", "VectorDBType", "VectorRecord", "chunk_id",
           "ChromaVectorDB", "PgVectorDB"]
