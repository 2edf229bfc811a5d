"""
PostgreSQL pgvector vector database implementation
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .base import BaseVectorDB, VectorDBConfig, VectorRecord, sanitize_identifier

logger = logging.getLogger(__name__)

# Bind vectors as text and let PostgreSQL parse them, the asyncpg driver has no vector codec
VECTOR_PARAM = "CAST(CAST(:{name} AS TEXT) AS vector)"


def format_vector(vector: List[float]) -> str:
    """pgvector text literal, '[0.1,0.2,...]'"""
    return "[" + ",".join(str(float(value)) for value in vector) + "]"


def parse_vector(value: str) -> List[float]:
    """Parse a pgvector text literal back into floats"""
    cleaned = value.strip().lstrip("[").rstrip("]")
    if not cleaned:
        return []
    return [float(part) for part in cleaned.split(",")]


class PgVectorDB(BaseVectorDB):
    """
    PostgreSQL + pgvector provider

    Shares the relational database; one table per collection. Similarity is
    1 - cosine distance, tenants are isolated by the tenant_id column.
    """
    name = "PgVector"
    default_batch_size = 100

    def __init__(self, config: VectorDBConfig, engine: Optional[AsyncEngine] = None):
        super().__init__(config)
        self.engine = engine
        self.table_name = f"{sanitize_identifier(self.collection_name)}_vectors"
        logger.info(
            f"PgVector provider configured with table: {self.table_name}, dimensions: {config.dimensions}")

    def _create_engine(self) -> AsyncEngine:
        if not self.config.database_url:
            raise ValueError("database_url must be provided for pgvector")
        connect_args = {"ssl": "require"} if self.config.ssl else {}
        return create_async_engine(
            self.config.database_url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    async def _initialize(self) -> None:
        if self.engine is None:
            self.engine = self._create_engine()

        table = self.table_name
        async with self.engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.execute(text(f"""
                CREATE TABLE IF NOT EXISTS "{table}" (
                    id VARCHAR(255) PRIMARY KEY,
                    document_id VARCHAR(255) NOT NULL,
                    tenant_id VARCHAR(255) NOT NULL,
                    content TEXT NOT NULL,
                    embedding vector({self.config.dimensions}) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
                )
            """))
            # ivfflat for approximate nearest neighbour search on cosine distance
            await conn.execute(text(f"""
                CREATE INDEX IF NOT EXISTS "{table}_embedding_idx"
                ON "{table}"
                USING ivfflat (embedding vector_cosine_ops)
                WITH (lists = {self.config.ivfflat_lists})
            """))
            await conn.execute(text(
                f'CREATE INDEX IF NOT EXISTS "{table}_document_id_idx" ON "{table}" (document_id)'))
            await conn.execute(text(
                f'CREATE INDEX IF NOT EXISTS "{table}_tenant_id_idx" ON "{table}" (tenant_id)'))

    async def _write_batch(
        self,
        tenant_id: str,
        document_id: str,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str]
    ) -> None:
        values = []
        params: Dict[str, Any] = {"document_id": document_id, "tenant_id": tenant_id}
        for j, (record_id, embedding, content) in enumerate(zip(ids, embeddings, contents)):
            values.append(
                f"(:id_{j}, :document_id, :tenant_id, :content_{j}, "
                f"{VECTOR_PARAM.format(name=f'embedding_{j}')})"
            )
            params[f"id_{j}"] = record_id
            params[f"content_{j}"] = content
            params[f"embedding_{j}"] = format_vector(embedding)

        table = self.table_name
        # Conflicting rows owned by another tenant or document are left untouched
        statement = text(f"""
            INSERT INTO "{table}" (id, document_id, tenant_id, content, embedding)
            VALUES {", ".join(values)}
            ON CONFLICT (id) DO UPDATE SET
                content = EXCLUDED.content,
                embedding = EXCLUDED.embedding,
                created_at = NOW()
            WHERE "{table}".tenant_id = EXCLUDED.tenant_id
                AND "{table}".document_id = EXCLUDED.document_id
        """)

        # One transaction per batch; a short row count rolls the batch back
        async with self.engine.begin() as conn:
            result = await conn.execute(statement, params)
            if result.rowcount != len(ids):
                raise PermissionError(
                    f"{len(ids) - result.rowcount} of {len(ids)} records belong to another tenant or document")

    async def _query(
        self,
        query_embedding: List[float],
        tenant_id: str,
        n_results: int
    ) -> List[VectorRecord]:
        query_vector = VECTOR_PARAM.format(name="embedding")
        statement = text(f"""
            SELECT
                id,
                document_id,
                tenant_id,
                content,
                CAST(embedding AS TEXT) AS embedding_text,
                1 - (embedding <=> {query_vector}) AS similarity
            FROM "{self.table_name}"
            WHERE tenant_id = :tenant_id
            ORDER BY embedding <=> {query_vector}, id
            LIMIT :n_results
        """)

        async with self.engine.connect() as conn:
            result = await conn.execute(statement, {
                "embedding": format_vector(query_embedding),
                "tenant_id": tenant_id,
                "n_results": n_results,
            })
            rows = result.mappings().all()

        return [
            VectorRecord(
                id=row["id"],
                tenant_id=row["tenant_id"],
                document_id=row["document_id"],
                content=row["content"],
                embedding=parse_vector(row["embedding_text"]),
                score=float(row["similarity"]),
            )
            for row in rows
        ]

    async def _delete_by_document_id(self, document_id: str) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(
                text(f'DELETE FROM "{self.table_name}" WHERE document_id = :document_id'),
                {"document_id": document_id},
            )

    async def _delete_by_id(self, id: str) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(
                text(f'DELETE FROM "{self.table_name}" WHERE id = :id'),
                {"id": id},
            )

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()
