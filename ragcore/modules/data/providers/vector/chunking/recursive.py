"""
Boundary-aware chunker: paragraphs, then lines, then words, then characters
"""

from typing import List, Dict, Any, Optional
from langchain_text_splitters import RecursiveCharacterTextSplitter
from .base import BaseChunker, ChunkConfig, Chunk


class RecursiveChunker(BaseChunker):
    """
    Default strategy. Chunks stay within chunk_size and end on the coarsest
    separator that fits, so "The sky is blue. Grass is green." with size 16
    becomes two whole sentences.
    """

    def __init__(self, config: ChunkConfig):
        super().__init__(config)
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
            separators=config.separators,
            keep_separator=config.keep_separator,
            strip_whitespace=config.strip_whitespace,
            length_function=len,
        )

    def chunk_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        if not text or not text.strip():
            return []
        return self._locate_pieces(text, self.splitter.split_text(text), metadata)
