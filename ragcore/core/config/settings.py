from typing import Optional
from pydantic import computed_field, ConfigDict
from pydantic_settings import BaseSettings


class ProjectSettings(BaseSettings):

    # === Project ===
    PROJECT: str = "ragcore"

    # === Embeddings ===
    EMBEDDINGS_PROVIDER: str = "huggingface"
    EMBEDDINGS_MODEL: Optional[str] = None
    EMBEDDINGS_DIMENSIONS: Optional[int] = None
    EMBEDDINGS_BATCH_SIZE: int = 32
    EMBEDDINGS_DEVICE: str = "cpu"
    EMBEDDINGS_OLLAMA_URL: str = "http://localhost:11434"
    EMBEDDINGS_TIMEOUT: float = 60.0

    # === Vector Database ===
    VECTORDB_PROVIDER: str = "pgvector"
    VECTORDB_DIMENSIONS: int = 384
    VECTORDB_COLLECTION: Optional[str] = None
    CHROMA_HOST: str = "localhost"
    CHROMA_PORT: int = 8000
    CHROMA_SSL: bool = False

    # === Database (pgvector) ===
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASS: str = "postgres"
    DB_NAME: str = "postgres"
    DB_SSL: bool = False

    # === Chunking ===
    CHUNK_STRATEGY: str = "recursive"
    CHUNK_SIZE: int = 1000
    CHUNK_OVERLAP: int = 200

    # === LLM ===
    LLM_PROVIDER: str = "ollama"
    LLM_URL: str = "http://localhost:11434"
    LLM_MODEL: str = "falcon"
    LLM_TIMEOUT: float = 60.0
    LLM_HEALTH_CHECK: bool = False

    # === Retrieval ===
    RAG_TOP_K: int = 3

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def COLLECTION_NAME(self) -> str:
        return self.VECTORDB_COLLECTION or f"{self.PROJECT}_embeddings"


    model_config = ConfigDict(
            env_file=".env",
            env_file_encoding="utf-8",
            extra="ignore",  # ignore unknown fields instead of raising an error
            )


settings = ProjectSettings()
