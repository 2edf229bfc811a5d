from typing import Optional, Sequence

from ragcore.core.exceptions.error_messages import ErrorKey, get_error_message


class AppException(Exception):
    """
        Base exception for application-specific errors.

        The error key selects a message template from the error messages module;
        the template is formatted with ``error_variables``.

        Attributes:
            error_key (ErrorKey): Key of the error message template.
            error_detail (str): Free-form detail for logs.
            error_obj: Optional object related to the error (usually the cause).

        Example:
            ```python
            raise AppException(ErrorKey.INTERNAL_ERROR)
            ```
        """
    def __init__(self, error_key: ErrorKey, error_detail="", error_obj=None,
                 error_variables: Sequence[str] = ()):
        self.error_key: ErrorKey = error_key
        self.error_detail = error_detail
        self.error_obj = error_obj
        self.error_variables = tuple(error_variables)
        self.message = get_error_message(error_key, error_variables=self.error_variables)
        super().__init__(self.message)


class ChunkingConfigurationError(AppException):
    """Invalid chunk size / overlap combination"""

    def __init__(self, detail: str):
        super().__init__(
            ErrorKey.INVALID_CHUNKING_CONFIG,
            error_detail=detail,
            error_variables=[detail],
        )


class EmbeddingError(AppException):
    """Failure inside an embedding provider"""

    def __init__(self, provider: str, original_error: BaseException):
        self.provider = provider
        self.original_error = original_error
        super().__init__(
            ErrorKey.EMBEDDING_FAILED,
            error_detail=str(original_error),
            error_obj=original_error,
            error_variables=[provider, str(original_error)],
        )


class VectorStoreError(AppException):
    """Failure inside a vector database provider (initialize, write, query, delete)"""

    def __init__(self, provider: str, operation: str, original_error: BaseException):
        self.provider = provider
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            ErrorKey.VECTOR_DB_OPERATION_FAILED,
            error_detail=str(original_error),
            error_obj=original_error,
            error_variables=[operation, provider, str(original_error)],
        )


class LLMError(AppException):
    """Failure inside a language model provider"""

    def __init__(self, provider: str, operation: str, original_error: BaseException):
        self.provider = provider
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            ErrorKey.LLM_OPERATION_FAILED,
            error_detail=str(original_error),
            error_obj=original_error,
            error_variables=[operation, provider, str(original_error)],
        )


class NoProviderAvailableError(AppException):
    """None of the configured backends answered its health check"""

    def __init__(self, providers: Optional[Sequence[str]] = None):
        self.providers = list(providers or [])
        super().__init__(
            ErrorKey.NO_PROVIDER_AVAILABLE,
            error_variables=[", ".join(self.providers) or "none configured"],
        )
