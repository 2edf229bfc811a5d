"""
Fixed-size sliding window chunker
"""

from typing import List, Dict, Any, Optional
from .base import BaseChunker, ChunkConfig, Chunk, validate_chunk_params


def split(text: str, chunk_size: int, chunk_overlap: int) -> List[str]:
    """
    Split text into overlapping windows of at most chunk_size characters.

    Window k starts at k * (chunk_size - chunk_overlap), so consecutive windows
    share exactly chunk_overlap characters. The last window ends at the end of
    the text.

    Raises:
        ChunkingConfigurationError: unless chunk_size > chunk_overlap >= 0
    """
    validate_chunk_params(chunk_size, chunk_overlap)
    if not text:
        return []

    step = chunk_size - chunk_overlap
    windows = []
    start = 0
    while True:
        end = min(start + chunk_size, len(text))
        windows.append(text[start:end])
        if end >= len(text):
            break
        start += step
    return windows


class FixedWindowChunker(BaseChunker):
    """Character window chunker with a constant stride"""

    def __init__(self, config: ChunkConfig):
        super().__init__(config)
        self.step = config.chunk_size - config.chunk_overlap

    def chunk_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        windows = split(text, self.config.chunk_size, self.config.chunk_overlap)
        return [
            self._create_chunk(
                content=window,
                index=i,
                start_char=i * self.step,
                metadata=metadata
            )
            for i, window in enumerate(windows)
        ]
