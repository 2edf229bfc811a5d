"""
Base vector database interface
"""
import asyncio
import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ragcore.core.exceptions.exception_classes import VectorStoreError

logger = logging.getLogger(__name__)


class VectorDBType(str, Enum):
    CHROMA = "chroma"
    PGVECTOR = "pgvector"


class VectorDBConfig(BaseModel):
    """Configuration for vector database"""
    type: VectorDBType = Field(default=VectorDBType.PGVECTOR, description="Type of vector database")
    project: str = Field(default="default", description="Project identifier used to name the collection")
    collection_name: Optional[str] = Field(
        default=None, description="Name of the vector collection, '{project}_embeddings' when empty")
    dimensions: int = Field(default=384, description="Dimensionality of stored vectors")
    batch_size: Optional[int] = Field(
        default=None, description="Records per write batch, provider default when empty")

    # Chroma
    host: str = Field(default="localhost", description="Chroma host")
    port: int = Field(default=8000, description="Chroma port")
    chroma_ssl: bool = Field(default=False, description="Use HTTPS for the Chroma server")

    # PostgreSQL / pgvector
    database_url: Optional[str] = Field(
        default=None, description="SQLAlchemy async URL for the pgvector database")
    ssl: bool = Field(default=False, description="Require SSL for the database connection")
    ivfflat_lists: int = Field(default=100, description="ivfflat index lists parameter")

    extra_params: Dict[str, Any] = Field(
        default_factory=dict, description="Additional database-specific parameters")

    model_config = ConfigDict(extra="allow")

    @field_validator('extra_params', mode='before')
    @classmethod
    def ensure_extra_params_dict(cls, v):
        return v or {}

    @field_validator('dimensions')
    @classmethod
    def validate_dimensions(cls, v):
        if v < 1:
            raise ValueError('dimensions must be at least 1')
        return v

    @field_validator('batch_size')
    @classmethod
    def validate_batch_size(cls, v):
        if v is not None and v < 1:
            raise ValueError('batch_size must be at least 1')
        return v

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if v < 1 or v > 65535:
            raise ValueError('port must be between 1 and 65535')
        return v

    def get_collection_name(self) -> str:
        return self.collection_name or f"{self.project}_embeddings"

    def get(self) -> "BaseVectorDB":
        if self.type == VectorDBType.CHROMA:
            from .chroma import ChromaVectorDB
            return ChromaVectorDB(self.model_copy())
        elif self.type == VectorDBType.PGVECTOR:
            from .pgvector import PgVectorDB
            return PgVectorDB(self.model_copy())
        else:
            raise ValueError(f"Invalid vector database type: {self.type}")


class VectorRecord(BaseModel):
    """A stored chunk vector, optionally scored against a query"""
    id: str = Field(description="Chunk identifier, '{document_id}-{index}'")
    tenant_id: str = Field(description="Owning tenant")
    document_id: str = Field(description="Owning document")
    content: str = Field(description="Chunk text")
    embedding: List[float] = Field(default_factory=list, description="Stored vector")
    score: Optional[float] = Field(
        default=None, description="Similarity to the query, higher is better")


def chunk_id(document_id: str, index: int) -> str:
    """Deterministic identity of the index-th chunk of a document"""
    return f"{document_id}-{index}"


def sanitize_identifier(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", name)


class BaseVectorDB(ABC):
    """Base abstract class for vector database providers"""
    name: str
    default_batch_size: int

    def __init__(self, config: VectorDBConfig):
        self.config = config
        self.collection_name = config.get_collection_name()
        self.batch_size = config.batch_size or self.default_batch_size
        self._initialized = False
        self._init_lock = asyncio.Lock()

    def get_name(self) -> str:
        return self.name

    def get_dimensions(self) -> int:
        return self.config.dimensions

    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the backing collection/table once; later calls are no-ops"""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            try:
                await self._initialize()
            except Exception as e:
                logger.error(f"Failed to initialize {self.name}: {e}")
                raise VectorStoreError(self.name, "initialize", e) from e
            self._initialized = True
            logger.info(f"{self.name} collection '{self.collection_name}' initialized successfully")

    async def create_embeddings(
        self,
        tenant_id: str,
        document_id: str,
        embeddings: List[List[float]],
        contents: List[str]
    ) -> bool:
        """
        Upsert one record per chunk, id '{document_id}-{index}'

        Records are written in batches; a failing batch aborts the remaining
        ones and earlier batches stay committed.

        Returns:
            True once every batch has been written
        """
        operation = "create_embeddings"
        self._ensure_initialized(operation)
        self._validate_write(operation, embeddings, contents)

        logger.info(f"Creating {len(embeddings)} embeddings for document {document_id}")
        ids = [chunk_id(document_id, i) for i in range(len(embeddings))]
        try:
            for start in range(0, len(ids), self.batch_size):
                end = min(start + self.batch_size, len(ids))
                logger.debug(
                    f"Adding batch {start // self.batch_size + 1}: {end - start} records")
                await self._write_batch(
                    tenant_id,
                    document_id,
                    ids[start:end],
                    embeddings[start:end],
                    contents[start:end],
                )
        except Exception as e:
            logger.error(f"Error creating embeddings in {self.name}: {e}")
            raise VectorStoreError(self.name, operation, e) from e

        logger.info(f"Successfully added {len(ids)} embeddings for document {document_id}")
        return True

    async def query_embeddings(
        self,
        query_embedding: List[float],
        tenant_id: str,
        n_results: int = 5
    ) -> List[VectorRecord]:
        """
        Top-n most similar records of one tenant, best match first
        """
        operation = "query_embeddings"
        self._ensure_initialized(operation)
        self._validate_dimensions(operation, query_embedding)
        if n_results < 1:
            return []

        try:
            records = await self._query(query_embedding, tenant_id, n_results)
        except Exception as e:
            logger.error(f"Error querying embeddings from {self.name}: {e}")
            raise VectorStoreError(self.name, operation, e) from e

        logger.info(f"Found {len(records)} matching records")
        return records

    async def delete_embeddings_by_document_id(self, document_id: str) -> None:
        operation = "delete_embeddings_by_document_id"
        self._ensure_initialized(operation)
        try:
            await self._delete_by_document_id(document_id)
        except Exception as e:
            logger.error(f"Error deleting embeddings from {self.name}: {e}")
            raise VectorStoreError(self.name, operation, e) from e
        logger.info(f"Deleted embeddings for document {document_id}")

    async def delete_embedding_by_id(self, id: str) -> None:
        operation = "delete_embedding_by_id"
        self._ensure_initialized(operation)
        try:
            await self._delete_by_id(id)
        except Exception as e:
            logger.error(f"Error deleting embedding from {self.name}: {e}")
            raise VectorStoreError(self.name, operation, e) from e
        logger.info(f"Deleted embedding {id}")

    async def close(self):
        """Close the database connection"""
        pass

    def _ensure_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise VectorStoreError(
                self.name, operation, RuntimeError(f"{self.name} not initialized"))

    def _validate_dimensions(self, operation: str, vector: List[float]) -> None:
        if len(vector) != self.config.dimensions:
            raise VectorStoreError(
                self.name,
                operation,
                ValueError(
                    f"vector has {len(vector)} dimensions, expected {self.config.dimensions}"),
            )

    def _validate_write(self, operation: str, embeddings: List[List[float]], contents: List[str]) -> None:
        if len(embeddings) != len(contents):
            raise VectorStoreError(
                self.name,
                operation,
                ValueError(
                    f"got {len(embeddings)} embeddings for {len(contents)} contents"),
            )
        for vector in embeddings:
            self._validate_dimensions(operation, vector)

    @abstractmethod
    async def _initialize(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def _write_batch(
        self,
        tenant_id: str,
        document_id: str,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str]
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    async def _query(
        self,
        query_embedding: List[float],
        tenant_id: str,
        n_results: int
    ) -> List[VectorRecord]:
        raise NotImplementedError

    @abstractmethod
    async def _delete_by_document_id(self, document_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def _delete_by_id(self, id: str) -> None:
        raise NotImplementedError
