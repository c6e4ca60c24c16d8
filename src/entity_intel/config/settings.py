"""
Pydantic settings models for the Entity Intelligence pipeline.

All configuration is defined here with defaults matching the public
endpoints of the knowledge sources the pipeline consults.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class FetcherSettings(BaseModel):
    """Page fetcher configuration."""

    timeout_seconds: float = Field(
        default=45.0,
        ge=1.0,
        le=180.0,
        description="Timeout for fetching a page",
    )
    max_redirects: int = Field(
        default=10,
        ge=0,
        le=30,
        description="Maximum redirects to follow",
    )
    max_content_bytes: int = Field(
        default=5_000_000,
        ge=10_000,
        le=50_000_000,
        description="Pages larger than this are rejected",
    )
    retry_without_tls_verification: bool = Field(
        default=True,
        description="Retry once with TLS verification disabled after a transport error",
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/114.0.0.0 Safari/537.36"
        ),
        description="User agent sent with page requests",
    )


class KnowledgeSourceSettings(BaseModel):
    """Knowledge source endpoints, limits and credentials."""

    wikipedia_api_url: str = Field(
        default="https://en.wikipedia.org/w/api.php",
        description="Wikipedia action API endpoint",
    )
    wikidata_api_url: str = Field(
        default="https://www.wikidata.org/w/api.php",
        description="Wikidata action API endpoint",
    )
    wikidata_entity_base_url: str = Field(
        default="https://www.wikidata.org/wiki/",
        description="Prefix for Wikidata item URLs",
    )
    google_kg_api_url: str = Field(
        default="https://kgsearch.googleapis.com/v1/entities:search",
        description="Google Knowledge Graph Search API endpoint",
    )
    google_kg_api_key_env_var: str = Field(
        default="GOOGLE_KG_API_KEY",
        description="Environment variable name containing the Knowledge Graph API key",
    )
    product_ontology_base_url: str = Field(
        default="http://www.productontology.org",
        description="Product ontology host probed with HEAD requests",
    )
    search_limit: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Candidates fetched per search request",
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="Timeout for knowledge source requests",
    )
    probe_timeout_seconds: float = Field(
        default=5.0,
        ge=1.0,
        le=30.0,
        description="Timeout for product ontology HEAD probes",
    )
    rate_limit_delay_seconds: float = Field(
        default=0.2,
        ge=0.0,
        le=10.0,
        description="Delay applied after each candidate's enrichment",
    )
    user_agent: str = Field(
        default="entity-intel/0.1 (knowledge-graph enrichment)",
        description="User agent sent to knowledge sources",
    )

    def resolve_google_kg_api_key(self) -> str | None:
        """Read the Knowledge Graph API key from the environment."""
        return os.environ.get(self.google_kg_api_key_env_var) or None


class LLMSettings(BaseModel):
    """Delegated chat-completion service configuration."""

    enabled: bool = Field(
        default=True,
        description="Whether to delegate extraction and recommendations when a key is present",
    )
    provider: Literal["openai"] = Field(
        default="openai",
        description="API provider to use",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    model_name: str = Field(
        default="gpt-4o",
        description="Model identifier for API calls",
    )
    api_key_env_var: str = Field(
        default="OPENAI_API_KEY",
        description="Environment variable name containing API key",
    )
    extraction_max_tokens: int = Field(
        default=700,
        ge=100,
        le=4096,
        description="Maximum tokens in the topic extraction response",
    )
    extraction_temperature: float = Field(
        default=0.5,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for topic extraction",
    )
    recommendation_max_tokens: int = Field(
        default=800,
        ge=100,
        le=4096,
        description="Maximum tokens in the recommendation response",
    )
    recommendation_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for recommendations",
    )
    max_input_chars: int = Field(
        default=8000,
        ge=500,
        le=100000,
        description="Maximum characters of page text sent for extraction",
    )
    timeout_seconds: float = Field(
        default=45.0,
        ge=5.0,
        le=300.0,
        description="Timeout for API requests in seconds",
    )
    max_retries: int = Field(
        default=1,
        ge=0,
        le=10,
        description="Maximum retry attempts for retryable API failures",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Delay before retrying API calls",
    )

    def resolve_api_key(self) -> str | None:
        """Read the API key from the environment, None when disabled or unset."""
        if not self.enabled:
            return None
        return os.environ.get(self.api_key_env_var) or None


class AnalysisSettings(BaseModel):
    """Candidate extraction and main-topic resolution settings."""

    default_strategy: Literal["strict", "title", "frequent", "pattern"] = Field(
        default="strict",
        description="Main-topic strategy used when none is requested",
    )
    max_candidates: int = Field(
        default=40,
        ge=1,
        le=200,
        description="Candidates kept by the local extraction strategy",
    )
    max_expanded_candidates: int = Field(
        default=10,
        ge=0,
        le=50,
        description="Candidates added by URL-sourced candidate expansion",
    )
    extra_synonym_groups: list[list[str]] = Field(
        default_factory=list,
        description="Additional synonym groups merged into the built-in table",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all pipeline settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    fetcher: FetcherSettings = Field(
        default_factory=FetcherSettings,
        description="Page fetcher settings",
    )
    knowledge: KnowledgeSourceSettings = Field(
        default_factory=KnowledgeSourceSettings,
        description="Knowledge source settings",
    )
    llm: LLMSettings = Field(
        default_factory=LLMSettings,
        description="Delegated LLM settings",
    )
    analysis: AnalysisSettings = Field(
        default_factory=AnalysisSettings,
        description="Extraction and topic resolution settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
