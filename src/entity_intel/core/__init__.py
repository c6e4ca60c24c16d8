"""
Core module for Entity Intelligence.

Contains the exception hierarchy shared by every pipeline stage.
"""

from entity_intel.core.exceptions import (
    EntityIntelError,
    ConfigurationError,
    InputValidationError,
    ContentFetchError,
    ExtractionError,
    KnowledgeSourceError,
    MalformedResponseError,
    LLMError,
    APILLMError,
    APIConnectionError,
    APIRateLimitError,
    APIAuthenticationError,
    APIResponseError,
    RetryableError,
    is_retryable,
    get_retry_delay,
)

__all__ = [
    # Base
    "EntityIntelError",
    "ConfigurationError",
    # Pipeline input
    "InputValidationError",
    "ContentFetchError",
    # Extraction
    "ExtractionError",
    # Knowledge sources
    "KnowledgeSourceError",
    "MalformedResponseError",
    # LLM
    "LLMError",
    "APILLMError",
    "APIConnectionError",
    "APIRateLimitError",
    "APIAuthenticationError",
    "APIResponseError",
    # Retry
    "RetryableError",
    "is_retryable",
    "get_retry_delay",
]
