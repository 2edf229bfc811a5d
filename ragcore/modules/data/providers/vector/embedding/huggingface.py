"""
HuggingFace embedding provider implementation (in-process)
"""

import asyncio
import logging
from typing import List, Optional

from langchain_huggingface import HuggingFaceEmbeddings

from ragcore.core.exceptions.exception_classes import EmbeddingError
from .base import BaseEmbedder, EmbeddingConfig

logger = logging.getLogger(__name__)


class HuggingFaceEmbedder(BaseEmbedder):
    """In-process sentence-transformers embedding provider using LangChain"""
    name = "HuggingFace"
    default_model = "sentence-transformers/all-MiniLM-L6-v2"

    def __init__(self, config: EmbeddingConfig):
        super().__init__(config)
        self.embeddings: Optional[HuggingFaceEmbeddings] = None
        self._init_lock = asyncio.Lock()
        logger.info(
            f"HuggingFace embeddings configured with model: {self.model_name} ({self._dimension}d)")

    def _dimensions_for_model(self, model_name: str) -> int:
        if "mpnet-base" in model_name:
            return 768
        if "MiniLM-L6" in model_name:
            return 384
        if "bge-small" in model_name:
            return 384
        if "bge-base" in model_name:
            return 768
        return 384

    async def _ensure_initialized(self) -> HuggingFaceEmbeddings:
        """Load the model once; concurrent first callers wait for the same load"""
        if self.embeddings is not None:
            return self.embeddings

        async with self._init_lock:
            if self.embeddings is None:
                logger.info(f"Loading HuggingFace model {self.model_name}...")
                self.embeddings = await asyncio.to_thread(
                    HuggingFaceEmbeddings,
                    model_name=self.model_name,
                    model_kwargs={'device': self.config.device},
                    encode_kwargs={
                        'normalize_embeddings': self.config.normalize_embeddings,
                    },
                )
                logger.info(f"Initialized HuggingFace embeddings with model: {self.model_name}")

        return self.embeddings

    def _batch_texts(self, texts: List[str]) -> List[List[str]]:
        """Split texts into batches for processing"""
        batch_size = self.config.batch_size
        return [texts[i:i + batch_size] for i in range(0, len(texts), batch_size)]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        try:
            model = await self._ensure_initialized()
            logger.info(f"Embedding {len(texts)} documents with HuggingFace")

            vectors: List[List[float]] = []
            for batch in self._batch_texts(texts):
                vectors.extend(await model.aembed_documents(batch))
                if len(vectors) < len(texts):
                    logger.debug(f"Embedded {len(vectors)}/{len(texts)} documents")

            return self._check_vectors(vectors, len(texts))

        except Exception as e:
            logger.error(f"HuggingFace document embedding failed: {e}")
            raise EmbeddingError(self.name, e) from e

    async def embed_query(self, text: str) -> List[float]:
        try:
            model = await self._ensure_initialized()
            embedding = await model.aembed_query(text)
            return self._check_vectors([embedding], 1)[0]

        except Exception as e:
            logger.error(f"HuggingFace query embedding failed: {e}")
            raise EmbeddingError(self.name, e) from e
