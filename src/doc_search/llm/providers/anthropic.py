"""Anthropic provider for hosted summarization."""

import os
from typing import Optional

from loguru import logger

from doc_search.llm.providers import BaseLLMProvider
from doc_search.llm.rate_limiter import TokenBucketRateLimiter


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Messages API provider.

    Requires the optional ``anthropic`` package and ANTHROPIC_API_KEY.
    """

    def __init__(
        self,
        model: str = "claude-3-5-haiku-latest",
        temperature: float = 0.0,
        max_tokens: int = 1000,
        api_key: Optional[str] = None,
        rate_limit: float = 1.0,
        timeout: float = 120.0
    ):
        """Initialize Anthropic provider.

        Args:
            model: Model name
            temperature: Sampling temperature (0.0 = deterministic)
            max_tokens: Maximum tokens in response
            api_key: API key (or set ANTHROPIC_API_KEY env var)
            rate_limit: Requests per second shared by all build workers
            timeout: Request timeout in seconds
        """
        super().__init__(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            rate_limiter=TokenBucketRateLimiter(rate=rate_limit, name="Anthropic")
        )
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.timeout = timeout
        self._client = None

        if not self.api_key:
            logger.warning("ANTHROPIC_API_KEY not set. Provider will not be available.")
        else:
            logger.info(f"Initialized Anthropic provider: {model}")

    def _get_client(self):
        if self._client is None:
            try:
                from anthropic import Anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package not installed. "
                    "Install with: pip install doc-search[anthropic]"
                ) from e
            self._client = Anthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """Generate completion using the Messages API."""
        if not self.api_key:
            raise RuntimeError(
                "ANTHROPIC_API_KEY not set. "
                "Set environment variable or pass api_key parameter."
            )

        client = self._get_client()
        with self.rate_limiter:
            logger.debug(f"Anthropic request: {len(prompt)} chars, max_tokens={self.max_tokens}")
            response = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt or "",
                messages=[{"role": "user", "content": prompt}],
                **kwargs
            )

        return "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)
