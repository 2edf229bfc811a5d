from enum import Enum
from typing import Sequence


class ErrorKey(Enum):
    INTERNAL_ERROR = "error_500"
    INVALID_CHUNKING_CONFIG = "INVALID_CHUNKING_CONFIG"
    EMBEDDING_FAILED = "EMBEDDING_FAILED"
    VECTOR_DB_OPERATION_FAILED = "VECTOR_DB_OPERATION_FAILED"
    LLM_OPERATION_FAILED = "LLM_OPERATION_FAILED"
    NO_PROVIDER_AVAILABLE = "NO_PROVIDER_AVAILABLE"


ERROR_MESSAGES = {
    "en": {
        ErrorKey.INTERNAL_ERROR: "An internal error occurred. Please try again later.",
        ErrorKey.INVALID_CHUNKING_CONFIG: "Invalid chunking configuration: {}",
        ErrorKey.EMBEDDING_FAILED: "Embedding failed in {}: {}",
        ErrorKey.VECTOR_DB_OPERATION_FAILED: "Vector DB operation '{}' failed in {}: {}",
        ErrorKey.LLM_OPERATION_FAILED: "LLM operation '{}' failed in {}: {}",
        ErrorKey.NO_PROVIDER_AVAILABLE: "No provider available; health check failed for: {}",
    },
}


def get_error_message(
    error_key: ErrorKey,
    lang: str = "en",
    error_variables: Sequence[str] = (),
) -> str:
    """
    Retrieves the message template for an error key and fills in its variables.
    Falls back to English, then to the raw key value.
    """
    if not isinstance(error_key, ErrorKey):
        raise ValueError(f"Invalid error key: {error_key}")

    messages = ERROR_MESSAGES.get(lang, ERROR_MESSAGES["en"])
    return messages.get(error_key, error_key.value).format(*error_variables)
