import logging
from typing import Optional

from ragcore.core.config.logging import log_context
from ragcore.modules.data.providers.vector.chunking.base import BaseChunker
from ragcore.modules.data.providers.vector.db.base import BaseVectorDB
from ragcore.modules.data.providers.vector.embedding.base import BaseEmbedder

logger = logging.getLogger(__name__)


class IndexingService:
    """
    Ingestion side of the pipeline: text -> chunks -> vectors -> vector store.

    Providers are passed in already built; the vector store must have been
    initialized by the caller (see dependencies.container.build_container).
    Errors raised by the providers are already wrapped and propagate as is.
    """

    def __init__(self, chunker: BaseChunker, embedder: BaseEmbedder, vector_db: BaseVectorDB):
        self.chunker = chunker
        self.embedder = embedder
        self.vector_db = vector_db

    async def index_document(self, tenant_id: str, document_id: str, text: Optional[str]) -> bool:
        """
        Chunk, embed and store a document for a tenant.

        Chunk ids are '{document_id}-{index}', so indexing the same text again
        overwrites the earlier records. Chunks left over from a longer earlier
        version are not removed, use reindex_document for that.

        Returns:
            False when the text holds nothing to index, True once stored
        """
        with log_context(tenant_id, document_id):
            if not text or not text.strip():
                logger.warning(f"Document {document_id} has no text to index, skipping")
                return False

            chunks = self.chunker.split_text(text)
            if not chunks:
                logger.warning(f"Document {document_id} produced no chunks, skipping")
                return False
            logger.info(f"Split document {document_id} into {len(chunks)} chunks")

            embeddings = await self.embedder.embed_documents(chunks)
            await self.vector_db.create_embeddings(tenant_id, document_id, embeddings, chunks)

            logger.info(f"Indexed document {document_id} ({len(chunks)} chunks)")
            return True

    async def reindex_document(self, tenant_id: str, document_id: str, text: Optional[str]) -> bool:
        """Replace every stored chunk of a document with the chunks of the new text"""
        with log_context(tenant_id, document_id):
            await self.vector_db.delete_embeddings_by_document_id(document_id)
        return await self.index_document(tenant_id, document_id, text)

    async def delete_document(self, document_id: str) -> None:
        await self.vector_db.delete_embeddings_by_document_id(document_id)

    async def delete_chunk(self, chunk_id: str) -> None:
        await self.vector_db.delete_embedding_by_id(chunk_id)
