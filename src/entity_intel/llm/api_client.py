"""
Chat-completion API client.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint in JSON
mode. Used as a black box by the delegated extraction strategy and the
recommendation service: both treat every error raised here as a reason
to fall back to local heuristics.
"""

import json
import time
from typing import Any, Callable

import httpx

from entity_intel.config.settings import LLMSettings
from entity_intel.core.exceptions import (
    APIAuthenticationError,
    APIConnectionError,
    APILLMError,
    APIRateLimitError,
    APIResponseError,
    RetryableError,
    get_retry_delay,
)
from entity_intel.utils.logging import get_logger
from entity_intel.utils.metrics import Metrics, increment_llm_calls

logger = get_logger(__name__)


class ChatCompletionClient:
    """
    Minimal JSON-mode chat-completion client over httpx.

    Example:
        >>> client = ChatCompletionClient.from_settings(settings.llm)
        >>> if client is not None:
        ...     payload = client.complete_json("Return {\\"ok\\": true}")
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model_name: str = "gpt-4o",
        timeout_seconds: float = 45.0,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Bearer token for the API
            base_url: API base URL (without trailing /chat/completions)
            model_name: Model identifier
            timeout_seconds: Per-request timeout
            max_retries: Retries for retryable failures
            retry_delay_seconds: Default delay between retries
            transport: Optional httpx transport (tests inject a mock)
            sleep: Sleep function used between retries
        """
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: LLMSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> "ChatCompletionClient | None":
        """
        Build a client from settings.

        Returns:
            A client, or None when the service is disabled or no key is set
        """
        api_key = settings.resolve_api_key()
        if not api_key:
            logger.info(
                f"No API key in ${settings.api_key_env_var}, delegated LLM calls disabled")
            return None

        return cls(
            api_key=api_key,
            base_url=settings.base_url,
            model_name=settings.model_name,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
            transport=transport,
        )

    def complete_json(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 700,
        temperature: float = 0.5,
    ) -> dict[str, Any]:
        """
        Send a prompt and parse the assistant's JSON object answer.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            max_tokens: Maximum tokens in the answer
            temperature: Sampling temperature

        Returns:
            The decoded JSON object

        Raises:
            APILLMError: On transport, status or payload problems
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        body = {
            "model": self.model_name,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "response_format": {"type": "json_object"},
        }

        attempt = 0
        while True:
            try:
                return self._post(body)
            except RetryableError as e:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                delay = get_retry_delay(e, self.retry_delay_seconds)
                logger.warning(
                    f"Chat completion failed ({e}), retry {attempt}/{self.max_retries} in {delay:.1f}s")
                self._sleep(delay)

    def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        increment_llm_calls()

        with Metrics.get().timer("llm_latency_ms"):
            try:
                response = self._client.post("/chat/completions", json=body)
            except httpx.TimeoutException as e:
                raise APIConnectionError(f"Chat completion timed out: {e}") from e
            except httpx.TransportError as e:
                raise APIConnectionError(f"Chat completion transport error: {e}") from e

        if response.status_code in (401, 403):
            raise APIAuthenticationError(
                "Chat completion API rejected the credentials",
                details={"status_code": response.status_code},
            )
        if response.status_code == 429:
            raise APIRateLimitError(
                "Chat completion API rate limit exceeded",
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        if response.status_code >= 500:
            raise APIConnectionError(
                "Chat completion API server error",
                details={"status_code": response.status_code},
            )
        if response.status_code != 200:
            raise APILLMError(
                "Chat completion API returned an error status",
                details={"status_code": response.status_code},
            )

        return _decode_message_content(response)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "ChatCompletionClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _decode_message_content(response: httpx.Response) -> dict[str, Any]:
    """Pull ``choices[0].message.content`` out and decode it as a JSON object."""
    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"]
        decoded = json.loads(content)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise APIResponseError(f"Unexpected chat completion payload: {e}") from e

    if not isinstance(decoded, dict):
        raise APIResponseError(
            f"Expected a JSON object, got {type(decoded).__name__}")

    return decoded


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
