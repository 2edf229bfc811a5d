"""
Chunking Module

Provides text chunking strategies for document processing.
"""

from .base import BaseChunker, Chunk, ChunkConfig, ChunkingStrategy
from .fixed import FixedWindowChunker, split
from .recursive import RecursiveChunker

__all__ = ["BaseChunker", "Chunk", "ChunkConfig", "ChunkingStrategy",
           "FixedWindowChunker", "RecursiveChunker", "split"]
