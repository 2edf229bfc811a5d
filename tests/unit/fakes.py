"""
In-memory stand-ins for the external backends used by the unit tests
"""
import copy
import math
import re
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from ragcore.core.config.logging import tenant_id_ctx
from ragcore.modules.data.providers.vector.db.pgvector import format_vector, parse_vector
from ragcore.modules.data.providers.vector.embedding.base import BaseEmbedder, EmbeddingConfig
from ragcore.modules.llm.base import BaseLLM, GenerateOptions, GenerateResult, LLMConfig


def cosine_distance(a: List[float], b: List[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 1.0
    return 1.0 - dot / norm


class FakeChromaCollection:
    """Async collection that answers cosine nearest-neighbour queries over a dict"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        self.name = name
        self.metadata = metadata or {}
        self.records: Dict[str, Dict[str, Any]] = {}
        self.upsert_calls: List[List[str]] = []
        self.fail_on_upsert_call: Optional[int] = None

    async def upsert(self, ids, embeddings, metadatas, documents):
        self.upsert_calls.append(list(ids))
        if self.fail_on_upsert_call == len(self.upsert_calls):
            raise ConnectionError("chroma went away")
        for record_id, embedding, metadata, document in zip(ids, embeddings, metadatas, documents):
            self.records[record_id] = {
                "embedding": list(embedding),
                "metadata": dict(metadata),
                "document": document,
            }

    async def query(self, query_embeddings, n_results, where=None, include=None):
        query = query_embeddings[0]
        where = where or {}
        matches = [
            (cosine_distance(query, record["embedding"]), record_id, record)
            for record_id, record in self.records.items()
            if all(record["metadata"].get(key) == value for key, value in where.items())
        ]
        matches.sort(key=lambda match: (match[0], match[1]))
        matches = matches[:n_results]
        return {
            "ids": [[record_id for _, record_id, _ in matches]],
            "documents": [[record["document"] for _, _, record in matches]],
            "metadatas": [[record["metadata"] for _, _, record in matches]],
            "distances": [[distance for distance, _, _ in matches]],
            "embeddings": [[record["embedding"] for _, _, record in matches]],
        }

    async def get(self, ids=None, include=None):
        found = [record_id for record_id in (ids or []) if record_id in self.records]
        return {
            "ids": found,
            "metadatas": [dict(self.records[record_id]["metadata"]) for record_id in found],
        }

    async def delete(self, ids=None, where=None):
        for record_id in list(self.records):
            record = self.records[record_id]
            if ids is not None and record_id in ids:
                del self.records[record_id]
            elif where is not None and all(
                    record["metadata"].get(key) == value for key, value in where.items()):
                del self.records[record_id]


class FakeChromaClient:
    def __init__(self):
        self.collections: Dict[str, FakeChromaCollection] = {}
        self.get_or_create_calls = 0

    async def get_or_create_collection(self, name, metadata=None):
        self.get_or_create_calls += 1
        if name not in self.collections:
            self.collections[name] = FakeChromaCollection(name, metadata)
        return self.collections[name]


class KeywordEmbedder(BaseEmbedder):
    """
    Deterministic embedder: one dimension per vocabulary word plus a constant
    bias dimension, so texts sharing words end up close to each other.
    """
    name = "Keyword"
    default_model = "keyword-vocabulary"
    VOCABULARY = ["sky", "blue", "grass", "green", "color", "water", "wet"]

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        super().__init__(config or EmbeddingConfig())
        self.document_calls: List[List[str]] = []
        self.query_calls: List[str] = []
        self.closed = False

    def _dimensions_for_model(self, model_name: str) -> int:
        return len(self.VOCABULARY) + 1

    def vector(self, text: str) -> List[float]:
        tokens = re.findall(r"[a-z]+", text.lower())
        return [1.0] + [float(tokens.count(word)) for word in self.VOCABULARY]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.document_calls.append(list(texts))
        return [self.vector(text) for text in texts]

    async def embed_query(self, text: str) -> List[float]:
        self.query_calls.append(text)
        return self.vector(text)

    async def close(self):
        self.closed = True


class FakeLLM(BaseLLM):
    name = "Fake"

    def __init__(self, answer: str = "Grass is green.", available: bool = True):
        super().__init__(LLMConfig(model="fake-model"))
        self.answer = answer
        self.available = available
        self.prompts: List[str] = []
        self.stream_tenants: List[str] = []
        self.options: List[Optional[GenerateOptions]] = []
        self.closed = False

    async def generate(self, prompt, options=None):
        self.prompts.append(prompt)
        self.options.append(options)
        return GenerateResult(text=self.answer, tokens_used=len(self.answer.split()), finish_reason="stop")

    async def generate_stream(self, prompt, options=None):
        self.prompts.append(prompt)
        self.options.append(options)
        for word in self.answer.split(" "):
            self.stream_tenants.append(tenant_id_ctx.get())
            yield word

    async def chat(self, messages, options=None):
        return GenerateResult(text=self.answer)

    async def is_available(self):
        return self.available

    async def close(self):
        self.closed = True


class InMemoryPgConnection:
    """Runs the pgvector provider's statements against a dict of rows"""

    def __init__(self, engine: "InMemoryPgEngine"):
        self.engine = engine

    async def execute(self, statement, params=None):
        sql = str(statement).strip()
        params = params or {}
        if self.engine.fail_on and self.engine.fail_on in sql:
            raise RuntimeError("relation does not exist")
        self.engine.statements.append((sql, params))

        rows, rowcount = [], 0
        if sql.startswith("INSERT"):
            rowcount = self._upsert(params)
        elif sql.startswith("SELECT"):
            rows = self._select(params)
        elif sql.startswith("DELETE"):
            rowcount = self._delete(sql, params)

        result = MagicMock()
        result.rowcount = rowcount
        result.mappings.return_value.all.return_value = rows
        return result

    def _upsert(self, params: Dict[str, Any]) -> int:
        affected = 0
        indexes = sorted(int(key[3:]) for key in params if re.fullmatch(r"id_\d+", key))
        for j in indexes:
            record_id = params[f"id_{j}"]
            existing = self.engine.rows.get(record_id)
            if existing is not None and (existing["tenant_id"] != params["tenant_id"]
                                         or existing["document_id"] != params["document_id"]):
                continue
            self.engine.rows[record_id] = {
                "id": record_id,
                "document_id": params["document_id"],
                "tenant_id": params["tenant_id"],
                "content": params[f"content_{j}"],
                "embedding": parse_vector(params[f"embedding_{j}"]),
            }
            affected += 1
        return affected

    def _select(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = parse_vector(params["embedding"])
        matches = sorted(
            ((cosine_distance(query, row["embedding"]), row) for row in self.engine.rows.values()
             if row["tenant_id"] == params["tenant_id"]),
            key=lambda match: (match[0], match[1]["id"]),
        )[:params["n_results"]]
        return [
            {
                "id": row["id"],
                "document_id": row["document_id"],
                "tenant_id": row["tenant_id"],
                "content": row["content"],
                "embedding_text": format_vector(row["embedding"]),
                "similarity": 1.0 - distance,
            }
            for distance, row in matches
        ]

    def _delete(self, sql: str, params: Dict[str, Any]) -> int:
        column = "document_id" if "document_id = :document_id" in sql else "id"
        doomed = [record_id for record_id, row in self.engine.rows.items() if row[column] == params[column]]
        for record_id in doomed:
            del self.engine.rows[record_id]
        return len(doomed)


class InMemoryPgEngine:
    """AsyncEngine stand-in; a failing transaction restores the rows it started with"""

    def __init__(self, fail_on: Optional[str] = None):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.statements: List[Any] = []
        self.fail_on = fail_on
        self.transactions = 0
        self.disposed = False

    @asynccontextmanager
    async def begin(self):
        self.transactions += 1
        snapshot = copy.deepcopy(self.rows)
        try:
            yield InMemoryPgConnection(self)
        except Exception:
            self.rows = snapshot
            raise

    @asynccontextmanager
    async def connect(self):
        yield InMemoryPgConnection(self)

    async def dispose(self):
        self.disposed = True
