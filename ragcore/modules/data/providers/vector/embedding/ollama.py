"""
Ollama embedding provider implementation (remote inference server)
"""

import logging
from typing import List, Optional

import httpx

from ragcore.core.exceptions.exception_classes import EmbeddingError
from .base import BaseEmbedder, EmbeddingConfig

logger = logging.getLogger(__name__)


class OllamaEmbedder(BaseEmbedder):
    """
    Embedding provider backed by an Ollama server.

    Ollama has no batch endpoint, so documents are embedded one request at a
    time, in input order.
    """
    name = "Ollama"
    default_model = "nomic-embed-text"

    def __init__(self, config: EmbeddingConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self.base_url = config.base_url.rstrip("/")
        # Injected clients belong to the caller
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=config.timeout)
        logger.info(
            f"Initialized Ollama embeddings at {self.base_url} with model: {self.model_name}")

    def _dimensions_for_model(self, model_name: str) -> int:
        if model_name.startswith("mxbai-embed-large"):
            return 1024
        return 768

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        try:
            logger.info(f"Embedding {len(texts)} documents with Ollama")
            vectors = [await self._embed(text) for text in texts]
            return self._check_vectors(vectors, len(texts))

        except Exception as e:
            logger.error(f"Ollama embedding failed: {e}")
            raise EmbeddingError(self.name, e) from e

    async def embed_query(self, text: str) -> List[float]:
        try:
            return self._check_vectors([await self._embed(text)], 1)[0]

        except Exception as e:
            logger.error(f"Ollama query embedding failed: {e}")
            raise EmbeddingError(self.name, e) from e

    async def _embed(self, text: str) -> List[float]:
        response = await self._client.post(
            "/api/embeddings",
            json={"model": self.model_name, "prompt": text},
        )
        response.raise_for_status()

        embedding = response.json().get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ValueError("Ollama response did not contain an embedding")
        return [float(value) for value in embedding]

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
