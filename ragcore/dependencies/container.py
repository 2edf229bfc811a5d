"""
Startup wiring: builds the configured providers once and hands them to the
pipelines by constructor injection.
"""

import logging
from typing import Optional

from ragcore.core.config.settings import ProjectSettings, settings as default_settings
from ragcore.core.exceptions.exception_classes import VectorStoreError
from ragcore.modules.data.providers.vector.chunking.base import BaseChunker
from ragcore.modules.data.providers.vector.config import VectorConfig
from ragcore.modules.data.providers.vector.db.base import BaseVectorDB
from ragcore.modules.data.providers.vector.embedding.base import BaseEmbedder
from ragcore.modules.llm.base import BaseLLM, LLMConfig, first_available
from ragcore.services.indexing import IndexingService
from ragcore.services.query import QueryService

logger = logging.getLogger(__name__)


class RagContainer:
    """Holds the process-wide providers and the services built on them"""

    def __init__(
        self,
        chunker: BaseChunker,
        embedder: BaseEmbedder,
        vector_db: BaseVectorDB,
        llm: BaseLLM,
        top_k: int = 3
    ):
        self.chunker = chunker
        self.embedder = embedder
        self.vector_db = vector_db
        self.llm = llm
        self.indexing_service = IndexingService(chunker, embedder, vector_db)
        self.query_service = QueryService(embedder, vector_db, llm, top_k=top_k)

    async def close(self):
        """Release every client held by the providers"""
        for provider in (self.embedder, self.vector_db, self.llm):
            try:
                await provider.close()
            except Exception as e:
                logger.error(f"Error closing {provider.get_name()}: {e}")
        logger.info("RAG container closed")


def llm_config_from_settings(settings: ProjectSettings) -> LLMConfig:
    return LLMConfig(
        type=settings.LLM_PROVIDER,
        base_url=settings.LLM_URL,
        model=settings.LLM_MODEL,
        timeout=settings.LLM_TIMEOUT,
    )


async def build_container(
    settings: Optional[ProjectSettings] = None,
    *,
    embedder: Optional[BaseEmbedder] = None,
    vector_db: Optional[BaseVectorDB] = None,
    llm: Optional[BaseLLM] = None
) -> RagContainer:
    """
    Build the providers selected by the settings, initialize the vector store
    and check the embedder and the store agree on dimensionality.

    Providers passed explicitly replace the configured ones.
    """
    settings = settings or default_settings
    vector_config = VectorConfig.from_settings(settings)

    chunker = vector_config.chunking.get()
    embedder = embedder or vector_config.embedding.get()
    vector_db = vector_db or vector_config.vector_db.get()
    llm = llm or llm_config_from_settings(settings).get()
    container = RagContainer(chunker, embedder, vector_db, llm, top_k=settings.RAG_TOP_K)

    try:
        await vector_db.initialize()

        if embedder.get_dimensions() != vector_db.get_dimensions():
            raise VectorStoreError(
                vector_db.get_name(),
                "initialize",
                ValueError(
                    f"embedder {embedder.get_name()}/{embedder.get_model_name()} produces "
                    f"{embedder.get_dimensions()} dimensions, store expects {vector_db.get_dimensions()}"),
            )

        if settings.LLM_HEALTH_CHECK:
            await first_available([llm])

    except Exception:
        await container.close()
        raise

    logger.info(
        f"RAG container ready: {embedder.get_name()}/{embedder.get_model_name()}, "
        f"{vector_db.get_name()} ({vector_db.collection_name}), {llm.get_name()}/{llm.get_model_name()}")
    return container
