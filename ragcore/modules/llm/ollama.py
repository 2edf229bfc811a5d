"""
Ollama language model provider (local inference server)
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ragcore.core.exceptions.exception_classes import LLMError
from .base import BaseLLM, ChatMessage, GenerateOptions, GenerateResult, LLMConfig

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timed out. Is Ollama running? Try: ollama serve"


class OllamaLLM(BaseLLM):
    """
    Language model provider backed by an Ollama server.

    Uses /api/generate for completions (streamed as newline-delimited JSON when
    requested), /api/chat for conversations and /api/tags as health check.
    """
    name = "Ollama"

    def __init__(self, config: LLMConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self.base_url = config.base_url.rstrip("/")
        # Injected clients belong to the caller
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=config.timeout)
        logger.info(f"Ollama LLM provider initialized: {config.model} at {self.base_url}")

    @staticmethod
    def _options(options: GenerateOptions, with_stop: bool = True) -> Dict[str, Any]:
        ollama_options = {
            "num_predict": options.max_tokens,
            "temperature": options.temperature,
            "top_p": options.top_p,
            "top_k": options.top_k,
        }
        if with_stop:
            ollama_options["stop"] = list(options.stop_sequences)
        return ollama_options

    @staticmethod
    def _result(data: Dict[str, Any], text: str) -> GenerateResult:
        done = bool(data.get("done"))
        return GenerateResult(
            text=text or "",
            tokens_used=data.get("eval_count") or None,
            finish_reason="stop" if done and data.get("done_reason") != "length" else "length",
        )

    def _wrap(self, operation: str, error: Exception) -> LLMError:
        if isinstance(error, httpx.TimeoutException):
            logger.error(f"Ollama {operation} timed out after {self.config.timeout} seconds")
            return LLMError(self.name, operation, TimeoutError(TIMEOUT_MESSAGE))
        logger.error(f"Ollama {operation} failed: {error}")
        return LLMError(self.name, operation, error)

    async def generate(self, prompt: str, options: Optional[GenerateOptions] = None) -> GenerateResult:
        options = options or GenerateOptions()
        try:
            logger.info(f"Generating completion with Ollama/{self.config.model} ({len(prompt)} chars)")
            response = await self._client.post("/api/generate", json={
                "model": self.config.model,
                "prompt": prompt,
                "stream": False,
                "options": self._options(options),
            })
            response.raise_for_status()
            data = response.json()

            result = self._result(data, data.get("response", ""))
            logger.info(f"Generated {len(result.text)} chars with Ollama")
            return result

        except Exception as e:
            raise self._wrap("generate", e) from e

    async def generate_stream(self, prompt: str, options: Optional[GenerateOptions] = None) -> AsyncIterator[str]:
        options = options or GenerateOptions()
        try:
            logger.info(f"Streaming completion with Ollama/{self.config.model}")
            async with self._client.stream("POST", "/api/generate", json={
                "model": self.config.model,
                "prompt": prompt,
                "stream": True,
                "options": self._options(options),
            }) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        logger.debug(f"Skipping malformed stream line: {line[:80]}")
                        continue
                    if data.get("error"):
                        raise ValueError(data["error"])
                    if data.get("response"):
                        yield data["response"]
                    if data.get("done"):
                        break

        except Exception as e:
            raise self._wrap("generate_stream", e) from e

    async def chat(self, messages: List[ChatMessage], options: Optional[GenerateOptions] = None) -> GenerateResult:
        options = options or GenerateOptions()
        try:
            logger.info(f"Chat completion with Ollama/{self.config.model} ({len(messages)} messages)")
            response = await self._client.post("/api/chat", json={
                "model": self.config.model,
                "messages": [{"role": m.role, "content": m.content} for m in messages],
                "stream": False,
                "options": self._options(options, with_stop=False),
            })
            response.raise_for_status()
            data = response.json()

            return self._result(data, (data.get("message") or {}).get("content", ""))

        except Exception as e:
            raise self._wrap("chat", e) from e

    async def is_available(self) -> bool:
        try:
            response = await self._client.get("/api/tags")
            return response.status_code == 200
        except Exception as e:
            logger.error(f"Ollama availability check failed: {e}")
            return False

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
