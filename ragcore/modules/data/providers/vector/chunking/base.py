"""
Base chunking interface
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ragcore.core.exceptions.exception_classes import ChunkingConfigurationError


DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]


class ChunkingStrategy(str, Enum):
    FIXED = "fixed"
    RECURSIVE = "recursive"


def validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    """Raise ChunkingConfigurationError unless chunk_size > chunk_overlap >= 0"""
    if chunk_size < 1:
        raise ChunkingConfigurationError(
            f"chunk_size must be at least 1, got {chunk_size}")
    if chunk_overlap < 0:
        raise ChunkingConfigurationError(
            f"chunk_overlap must not be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ChunkingConfigurationError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})")


class ChunkConfig(BaseModel):
    """Configuration for chunking strategy"""
    type: ChunkingStrategy = Field(default=ChunkingStrategy.RECURSIVE,
                                   description="Type of chunking strategy")
    chunk_size: int = Field(
        default=1000, description="Size of text chunks in characters")
    chunk_overlap: int = Field(
        default=200, description="Overlap between consecutive chunks")
    separators: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SEPARATORS),
        description="Separators for recursive text splitting")
    keep_separator: bool = Field(
        default=True, description="Whether to keep separators in chunks")
    strip_whitespace: bool = Field(
        default=True, description="Whether to strip whitespace from recursive chunks")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode='after')
    def validate_overlap(self):
        validate_chunk_params(self.chunk_size, self.chunk_overlap)
        return self

    @field_validator('separators', mode='before')
    @classmethod
    def validate_separators(cls, v):
        if isinstance(v, str):
            return decode_separators(v.split(",")) if v else list(DEFAULT_SEPARATORS)
        if isinstance(v, list):
            return decode_separators(v)
        return list(DEFAULT_SEPARATORS)

    def get(self) -> "BaseChunker":
        """Get the chunker based on the type"""
        if self.type == ChunkingStrategy.FIXED:
            from .fixed import FixedWindowChunker
            return FixedWindowChunker(self.model_copy())
        elif self.type == ChunkingStrategy.RECURSIVE:
            from .recursive import RecursiveChunker
            return RecursiveChunker(self.model_copy())
        else:
            raise ChunkingConfigurationError(f"Invalid chunker type: {self.type}")


class Chunk(BaseModel):
    """Represents a text chunk with metadata"""
    content: str = Field(description="Text content of the chunk")
    index: int = Field(description="Index of the chunk in the sequence")
    start_char: int = Field(
        description="Starting character position in original text")
    end_char: int = Field(
        description="Ending character position in original text")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Additional metadata for the chunk")

    @field_validator('metadata', mode='before')
    @classmethod
    def ensure_metadata_dict(cls, v):
        return v or {}

    @field_validator('end_char')
    @classmethod
    def validate_char_positions(cls, v, info):
        if info.data and 'start_char' in info.data and v <= info.data['start_char']:
            raise ValueError('end_char must be greater than start_char')
        return v


class BaseChunker(ABC):
    """Base abstract class for text chunking strategies"""

    def __init__(self, config: ChunkConfig):
        self.config = config

    @abstractmethod
    def chunk_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        """
        Split text into chunks

        Args:
            text: Text to chunk
            metadata: Optional metadata to include with each chunk

        Returns:
            List of Chunk objects, ordered as they appear in the text
        """
        raise NotImplementedError(
            "Subclasses must implement chunk_text method")

    def split_text(self, text: str) -> List[str]:
        """Split text and return only the chunk contents, in order"""
        return [chunk.content for chunk in self.chunk_text(text)]

    def _locate_pieces(self, text: str, pieces: List[str], metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        """
        Turn split pieces back into positioned chunks.

        Pieces come in text order but may overlap the previous one by up to
        chunk_overlap characters, so each search starts that far back.
        """
        chunks: List[Chunk] = []
        cursor = 0
        for piece in pieces:
            if not piece:
                continue
            start = text.find(piece, max(0, cursor - self.config.chunk_overlap))
            if start == -1:
                start = cursor
            chunks.append(self._create_chunk(piece, len(chunks), start, metadata))
            cursor = start + len(piece)
        return chunks

    def _create_chunk(self, content: str, index: int, start_char: int, metadata: Optional[Dict[str, Any]] = None) -> Chunk:
        """Create a chunk with proper metadata"""
        end_char = start_char + len(content)

        chunk_metadata = {
            "chunk_index": index,
            "start_char": start_char,
            "end_char": end_char,
            "chunk_size": len(content),
            **(metadata or {})
        }

        return Chunk(
            content=content,
            index=index,
            start_char=start_char,
            end_char=end_char,
            metadata=chunk_metadata
        )


def decode_separators(separators: List[str]) -> List[str]:
    """
    Decode escaped separator strings to actual characters

    Args:
        separators: List of separator strings that may contain escaped characters

    Returns:
        List of decoded separator strings
    """
    decoded_separators = []

    for separator in separators:
        if isinstance(separator, str):
            decoded = separator.replace('\\n', '\n')
            decoded = decoded.replace('\\t', '\t')
            decoded = decoded.replace('\\r', '\r')
            decoded = decoded.replace('\\\\', '\\')
            decoded_separators.append(decoded)
        else:
            decoded_separators.append(separator)

    return decoded_separators
