"""
Base language model interface
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import AsyncIterator, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ragcore.core.exceptions.exception_classes import NoProviderAvailableError

logger = logging.getLogger(__name__)


class LLMProviderType(str, Enum):
    OLLAMA = "ollama"


class GenerateOptions(BaseModel):
    """Sampling options for a completion"""
    max_tokens: int = Field(default=512, description="Maximum number of tokens to generate")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float = Field(default=0.95, description="Nucleus sampling probability mass")
    top_k: int = Field(default=40, description="Top-k sampling cutoff")
    stop_sequences: List[str] = Field(default_factory=list, description="Sequences that end generation")
    stream: bool = Field(default=False, description="Whether the caller wants a streamed answer")

    @field_validator('max_tokens')
    @classmethod
    def validate_max_tokens(cls, v):
        if v < 1:
            raise ValueError('max_tokens must be at least 1')
        return v

    @field_validator('temperature')
    @classmethod
    def validate_temperature(cls, v):
        if v < 0:
            raise ValueError('temperature must not be negative')
        return v

    @field_validator('top_p')
    @classmethod
    def validate_top_p(cls, v):
        if v <= 0 or v > 1:
            raise ValueError('top_p must be in (0, 1]')
        return v


class GenerateResult(BaseModel):
    text: str = Field(default="", description="Generated text")
    tokens_used: Optional[int] = Field(default=None, description="Tokens generated, when reported")
    finish_reason: Literal["stop", "length", "error"] = Field(default="stop")


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class LLMConfig(BaseModel):
    """Configuration for the language model provider"""
    type: LLMProviderType = Field(default=LLMProviderType.OLLAMA, description="Type of LLM provider")
    base_url: str = Field(default="http://localhost:11434", description="Base URL of the inference server")
    model: str = Field(default="falcon", description="Model name")
    timeout: float = Field(default=60.0, description="Request timeout in seconds")

    model_config = ConfigDict(extra="allow")

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError('timeout must be positive')
        return v

    def get(self) -> "BaseLLM":
        if self.type == LLMProviderType.OLLAMA:
            from .ollama import OllamaLLM
            return OllamaLLM(self.model_copy())
        else:
            raise ValueError(f"Invalid LLM type: {self.type}")


class BaseLLM(ABC):
    """Base abstract class for language model providers"""
    name: str

    def __init__(self, config: LLMConfig):
        self.config = config

    @abstractmethod
    async def generate(self, prompt: str, options: Optional[GenerateOptions] = None) -> GenerateResult:
        """
        Complete a single prompt

        Args:
            prompt: Full prompt text
            options: Sampling options, defaults when omitted

        Returns:
            GenerateResult with the generated text
        """
        raise NotImplementedError

    @abstractmethod
    def generate_stream(self, prompt: str, options: Optional[GenerateOptions] = None) -> AsyncIterator[str]:
        """Complete a prompt, yielding text fragments as they arrive"""
        raise NotImplementedError

    @abstractmethod
    async def chat(self, messages: List[ChatMessage], options: Optional[GenerateOptions] = None) -> GenerateResult:
        raise NotImplementedError

    @abstractmethod
    async def is_available(self) -> bool:
        """Health check; never raises"""
        raise NotImplementedError

    def get_name(self) -> str:
        return self.name

    def get_model_name(self) -> str:
        return self.config.model

    async def close(self):
        pass


async def first_available(llms: Sequence[BaseLLM]) -> BaseLLM:
    """Return the first provider whose health check passes"""
    for llm in llms:
        if await llm.is_available():
            logger.info(f"Using LLM provider {llm.get_name()} with model {llm.get_model_name()}")
            return llm
        logger.warning(f"LLM provider {llm.get_name()} is not available")

    raise NoProviderAvailableError([llm.get_name() for llm in llms])
