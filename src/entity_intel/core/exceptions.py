"""
Custom exceptions for the Entity Intelligence pipeline.

Provides a hierarchy of exceptions for precise error handling across
all stages. All exceptions inherit from EntityIntelError.

Only InputValidationError and ContentFetchError are allowed to escape a
pipeline run. Knowledge-source and LLM errors are caught inside their
stage and degrade to "no match" or a fallback value.

Exception Hierarchy:
    EntityIntelError (base)
    ├── ConfigurationError
    ├── InputValidationError
    ├── ContentFetchError
    ├── ExtractionError
    ├── KnowledgeSourceError
    │   └── MalformedResponseError
    └── LLMError
        └── APILLMError
            ├── APIConnectionError
            ├── APIRateLimitError
            ├── APIAuthenticationError
            └── APIResponseError
"""

from typing import Any


class EntityIntelError(Exception):
    """
    Base exception for all Entity Intelligence errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


class RetryableError(EntityIntelError):
    """
    Marker class for errors that can be retried.

    Attributes:
        retry_after: Suggested delay in seconds before retry (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(EntityIntelError):
    """
    Error in configuration loading or validation.

    Raised when:
    - Configuration file is missing or malformed
    - Setting values fail validation
    """

    pass


# =============================================================================
# Pipeline Input Errors (fatal to a run)
# =============================================================================


class InputValidationError(EntityIntelError):
    """
    Input rejected before any external call is made.

    Raised when:
    - URL is malformed or uses an unsupported scheme
    - Pasted content is empty
    """

    def __init__(
        self,
        message: str,
        value: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if value:
            details["value"] = value[:100] + \
                "..." if len(value) > 100 else value
        super().__init__(message, details)
        self.value = value


class ContentFetchError(EntityIntelError):
    """
    Page content could not be retrieved.

    Raised when:
    - URL is unreachable (even after the TLS-relaxed retry)
    - Server answers with a non-200 status
    - Response body exceeds the configured size limit
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


# =============================================================================
# Extraction Errors
# =============================================================================


class ExtractionError(EntityIntelError):
    """
    Error while extracting candidate entities.

    Never escapes CandidateExtractor: the delegated strategy falls back
    to the local one.
    """

    pass


# =============================================================================
# Knowledge Source Errors (degrade to "no match")
# =============================================================================


class KnowledgeSourceError(EntityIntelError):
    """
    Error querying a knowledge source.

    Raised when:
    - Transport fails or times out
    - Source answers with an error status
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.source = source
        self.url = url


class MalformedResponseError(KnowledgeSourceError):
    """Source answered with an unexpected payload shape."""

    pass


# =============================================================================
# LLM Errors
# =============================================================================


class LLMError(EntityIntelError):
    """Base error for delegated LLM operations."""

    pass


class APILLMError(LLMError):
    """Base error for chat-completion API operations."""

    pass


class APIConnectionError(APILLMError, RetryableError):
    """
    Error connecting to the LLM API.

    Raised when:
    - Network connection fails
    - Request times out

    This is retryable as network issues may be transient.
    """

    pass


class APIRateLimitError(APILLMError, RetryableError):
    """
    Error when the API rate limit is exceeded (429).

    The retry_after attribute indicates when to resume.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details, retry_after)


class APIAuthenticationError(APILLMError):
    """
    Error authenticating with the LLM API.

    This is NOT retryable without fixing credentials.
    """

    pass


class APIResponseError(APILLMError):
    """API answered, but the payload could not be interpreted."""

    pass


# =============================================================================
# Utility Functions
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """
    Check if an error is retryable.

    Args:
        error: The exception to check

    Returns:
        True if the error indicates a retryable condition
    """
    return isinstance(error, RetryableError)


def get_retry_delay(error: Exception, default: float = 1.0) -> float:
    """
    Get the recommended retry delay for an error.

    Args:
        error: The exception to check
        default: Default delay if not specified by error

    Returns:
        Recommended delay in seconds before retry
    """
    if isinstance(error, RetryableError) and error.retry_after is not None:
        return error.retry_after
    return default
