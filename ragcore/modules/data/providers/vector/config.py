"""
Pydantic configuration models for the vector system
"""

from pydantic import BaseModel, ConfigDict, Field

from ragcore.core.config.settings import ProjectSettings
from .chunking import ChunkConfig
from .embedding import EmbeddingConfig
from .db import VectorDBConfig


class VectorConfig(BaseModel):
    """Complete vector system configuration"""
    chunking: ChunkConfig = Field(
        default_factory=ChunkConfig)
    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig)
    vector_db: VectorDBConfig = Field(
        default_factory=VectorDBConfig)

    model_config = ConfigDict(extra="allow")

    @staticmethod
    def from_settings(settings: ProjectSettings) -> "VectorConfig":
        return VectorConfig(
            chunking=ChunkConfig(
                type=settings.CHUNK_STRATEGY,
                chunk_size=settings.CHUNK_SIZE,
                chunk_overlap=settings.CHUNK_OVERLAP,
            ),
            embedding=EmbeddingConfig(
                type=settings.EMBEDDINGS_PROVIDER,
                model_name=settings.EMBEDDINGS_MODEL,
                dimensions=settings.EMBEDDINGS_DIMENSIONS,
                batch_size=settings.EMBEDDINGS_BATCH_SIZE,
                device=settings.EMBEDDINGS_DEVICE,
                base_url=settings.EMBEDDINGS_OLLAMA_URL,
                timeout=settings.EMBEDDINGS_TIMEOUT,
            ),
            vector_db=VectorDBConfig(
                type=settings.VECTORDB_PROVIDER,
                project=settings.PROJECT,
                collection_name=settings.COLLECTION_NAME,
                dimensions=settings.VECTORDB_DIMENSIONS,
                host=settings.CHROMA_HOST,
                port=settings.CHROMA_PORT,
                chroma_ssl=settings.CHROMA_SSL,
                database_url=settings.DATABASE_URL,
                ssl=settings.DB_SSL,
            ),
        )
