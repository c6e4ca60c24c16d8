"""
LLM module for Entity Intelligence.

Provides the delegated chat-completion client and its prompt templates.
"""

from entity_intel.llm.api_client import ChatCompletionClient
from entity_intel.llm.prompt_templates import (
    PromptTemplate,
    ExtractionPrompts,
    RecommendationPrompts,
)

__all__ = [
    "ChatCompletionClient",
    "PromptTemplate",
    "ExtractionPrompts",
    "RecommendationPrompts",
]
