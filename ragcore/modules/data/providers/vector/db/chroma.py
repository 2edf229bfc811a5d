"""
ChromaDB vector database implementation
"""

import logging
from typing import Any, List, Optional

from chromadb import AsyncHttpClient, AsyncClientAPI

from .base import BaseVectorDB, VectorDBConfig, VectorRecord

logger = logging.getLogger(__name__)


class ChromaVectorDB(BaseVectorDB):
    """
    ChromaDB vector database provider

    One collection per deployment; tenants share it and are isolated by the
    'tenant_id' metadata filter applied by Chroma itself on every query.
    """
    name = "ChromaDB"
    default_batch_size = 500
    chroma_client: Optional[AsyncClientAPI]
    collection: Optional[Any]

    def __init__(self, config: VectorDBConfig, client: Optional[AsyncClientAPI] = None):
        super().__init__(config)
        self.chroma_client = client
        self.collection = None
        logger.info(
            f"ChromaDB provider configured for {config.host}:{config.port}, collection: {self.collection_name}")

    async def _initialize(self) -> None:
        if self.chroma_client is None:
            self.chroma_client = await AsyncHttpClient(
                host=self.config.host,
                port=self.config.port,
                ssl=self.config.chroma_ssl,
            )

        metadata = {
            "hnsw:space": "cosine",
            "description": "Document embeddings for RAG",
        }
        metadata.update(self.config.extra_params)

        self.collection = await self.chroma_client.get_or_create_collection(
            name=self.collection_name,
            metadata=metadata
        )

    async def _write_batch(
        self,
        tenant_id: str,
        document_id: str,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str]
    ) -> None:
        # Ids carry no tenant; an id owned by another tenant or document is never taken over
        existing = await self.collection.get(ids=ids, include=["metadatas"])
        for record_id, metadata in zip(existing.get("ids") or [], existing.get("metadatas") or []):
            metadata = metadata or {}
            if metadata.get("tenant_id") != tenant_id or metadata.get("document_id") != document_id:
                raise PermissionError(
                    f"record {record_id} belongs to another tenant or document")

        await self.collection.upsert(
            ids=ids,
            embeddings=embeddings,
            metadatas=[{"tenant_id": tenant_id, "document_id": document_id} for _ in ids],
            documents=contents
        )

    async def _query(
        self,
        query_embedding: List[float],
        tenant_id: str,
        n_results: int
    ) -> List[VectorRecord]:
        results = await self.collection.query(
            query_embeddings=[query_embedding],
            n_results=n_results,
            where={"tenant_id": tenant_id},
            include=["documents", "metadatas", "distances", "embeddings"]
        )

        records = []
        if not results["ids"] or not results["ids"][0]:
            return records

        documents = results.get("documents")
        metadatas = results.get("metadatas")
        distances = results.get("distances")
        embeddings = results.get("embeddings")

        for i, record_id in enumerate(results["ids"][0]):
            metadata = metadatas[0][i] if metadatas is not None else {}
            embedding = embeddings[0][i] if embeddings is not None else []
            distance = distances[0][i] if distances is not None else None
            records.append(VectorRecord(
                id=record_id,
                tenant_id=metadata.get("tenant_id", tenant_id),
                document_id=metadata.get("document_id", ""),
                content=documents[0][i] if documents is not None else "",
                embedding=[float(value) for value in embedding],
                score=1.0 - distance if distance is not None else None,
            ))

        return records

    async def _delete_by_document_id(self, document_id: str) -> None:
        await self.collection.delete(where={"document_id": document_id})

    async def _delete_by_id(self, id: str) -> None:
        await self.collection.delete(ids=[id])
