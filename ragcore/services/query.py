import logging
from typing import AsyncIterator, List, Optional

from ragcore.core.config.logging import log_context
from ragcore.modules.data.providers.vector.db.base import BaseVectorDB, VectorRecord
from ragcore.modules.data.providers.vector.embedding.base import BaseEmbedder
from ragcore.modules.llm.base import BaseLLM, GenerateOptions

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = "I could not find any relevant information to answer your question."

RAG_PROMPT_TEMPLATE = (
    "You are a helpful assistant. Answer the question based on the context provided below.\n\n"
    "Context:\n{context}\n\n"
    "Question: {query}\n\n"
    "Answer:"
)

DEFAULT_GENERATE_OPTIONS = GenerateOptions(max_tokens=500, temperature=0.7, top_p=0.95)


def build_prompt(query: str, snippets: List[str]) -> str:
    return RAG_PROMPT_TEMPLATE.format(context="\n\n".join(snippets), query=query)


class QueryService:
    """
    Query side of the pipeline: question -> vector -> tenant's closest chunks -> answer.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        vector_db: BaseVectorDB,
        llm: BaseLLM,
        top_k: int = 3,
        generate_options: Optional[GenerateOptions] = None
    ):
        self.embedder = embedder
        self.vector_db = vector_db
        self.llm = llm
        self.top_k = top_k
        self.generate_options = generate_options or DEFAULT_GENERATE_OPTIONS

    async def search(self, tenant_id: str, query: str, count: int = 3) -> List[VectorRecord]:
        """Scored records of the tenant closest to the query, best first"""
        query_embedding = await self.embedder.embed_query(query)
        return await self.vector_db.query_embeddings(query_embedding, tenant_id, count)

    async def search_text(self, tenant_id: str, query: str, count: int = 3) -> List[str]:
        with log_context(tenant_id):
            records = await self.search(tenant_id, query, count)
            logger.info(f"Found {len(records)} snippets for query")
            return [record.content for record in records]

    async def answer_query(self, tenant_id: str, query: str) -> str:
        """
        Answer a question from the tenant's indexed documents.

        Without any retrieved context the fixed NO_CONTEXT_ANSWER is returned
        and the language model is not called.
        """
        with log_context(tenant_id):
            snippets = await self.search_text(tenant_id, query, self.top_k)
            if not snippets:
                logger.info("No relevant context found, skipping generation")
                return NO_CONTEXT_ANSWER

            prompt = build_prompt(query, snippets)
            result = await self.llm.generate(prompt, self.generate_options)
            logger.info(
                f"Answered query with {self.llm.get_name()}/{self.llm.get_model_name()} "
                f"({result.tokens_used or 0} tokens, finish reason {result.finish_reason})")
            return result.text

    async def answer_query_stream(self, tenant_id: str, query: str) -> AsyncIterator[str]:
        """
        Streaming variant of answer_query, yields answer fragments.

        The tenant log context is set around each step, never across a yield.
        """
        with log_context(tenant_id):
            snippets = await self.search_text(tenant_id, query, self.top_k)
        if not snippets:
            with log_context(tenant_id):
                logger.info("No relevant context found, skipping generation")
            yield NO_CONTEXT_ANSWER
            return

        stream = self.llm.generate_stream(build_prompt(query, snippets), self.generate_options)
        fragments = 0
        while True:
            with log_context(tenant_id):
                try:
                    fragment = await anext(stream)
                except StopAsyncIteration:
                    logger.info(
                        f"Streamed answer with {self.llm.get_name()}/{self.llm.get_model_name()} "
                        f"({fragments} fragments)")
                    break
            fragments += 1
            yield fragment
