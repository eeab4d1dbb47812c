"""Ollama provider for local summarization models."""

from typing import Optional

import requests
import tenacity
from loguru import logger

from doc_search.llm.providers import BaseLLMProvider


RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class RetryableHTTPError(Exception):
    """HTTP status worth retrying (overload, timeout, gateway errors)."""
    pass


def log_retry_attempt(retry_state: tenacity.RetryCallState) -> None:
    """Log retry attempts with context."""
    attempt = retry_state.attempt_number
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        logger.warning(
            f"Ollama retry attempt {attempt}: {type(exception).__name__}: {exception}"
        )
    else:
        logger.info(f"Ollama retry attempt {attempt}")


class OllamaProvider(BaseLLMProvider):
    """Ollama provider for local models.

    Retries connection errors, timeouts and overload responses with
    exponential backoff. The builder's per-file timeout bounds the total
    time spent, so retry waits are kept short by default.
    """

    def __init__(
        self,
        model: str = "qwen2.5-coder:7b",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.0,
        max_tokens: int = 1000,
        timeout: int = 120,
        max_retries: int = 3,
        retry_min_wait: float = 1.0,
        retry_max_wait: float = 10.0,
        retry_multiplier: float = 2.0,
        retry_jitter: float = 1.0
    ):
        """Initialize Ollama provider with retry configuration.

        Args:
            model: Ollama model name
            base_url: Ollama API base URL
            temperature: Sampling temperature (0.0 = deterministic)
            max_tokens: Maximum tokens in response
            timeout: Request timeout in seconds
            max_retries: Maximum attempts on failure
            retry_min_wait: Initial wait between retries (seconds)
            retry_max_wait: Maximum wait between retries (seconds)
            retry_multiplier: Exponential multiplier for wait time
            retry_jitter: Random jitter added to wait time (seconds)
        """
        super().__init__(model=model, temperature=temperature, max_tokens=max_tokens)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.max_retries = max_retries
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait
        self.retry_multiplier = retry_multiplier
        self.retry_jitter = retry_jitter

        self._retrying = tenacity.Retrying(
            wait=tenacity.wait_exponential_jitter(
                initial=self.retry_min_wait,
                max=self.retry_max_wait,
                exp_base=self.retry_multiplier,
                jitter=self.retry_jitter
            ),
            stop=tenacity.stop_after_attempt(self.max_retries),
            retry=tenacity.retry_if_exception_type((
                requests.ConnectionError,
                requests.Timeout,
                RetryableHTTPError,
            )),
            before_sleep=log_retry_attempt,
            reraise=True
        )

        logger.info(
            f"Initialized Ollama provider: {model} at {self.base_url} "
            f"(max_retries={max_retries}, timeout={timeout}s)"
        )

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """Generate completion using the Ollama API with automatic retry.

        Raises:
            RuntimeError: If Ollama rejects the request or all retries fail
        """
        try:
            return self._retrying(self._make_request, prompt, system_prompt, **kwargs)
        except (requests.ConnectionError, requests.Timeout, RetryableHTTPError) as e:
            raise RuntimeError(
                f"Ollama failed after {self.max_retries} attempts: {e}. "
                f"Check if Ollama is running: ollama serve"
            ) from e

    def _make_request(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """Make a single Ollama API request."""
        with self.rate_limiter:
            payload = {
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                }
            }
            if system_prompt:
                payload["system"] = system_prompt
            if kwargs:
                payload["options"].update(kwargs)

            logger.debug(f"Ollama request: {len(prompt)} chars, temp={self.temperature}")

            response = requests.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout
            )
            if response.status_code in RETRYABLE_STATUS:
                raise RetryableHTTPError(f"Ollama returned {response.status_code}")
            if response.status_code >= 400:
                raise RuntimeError(f"Ollama API error {response.status_code}: {response.text}")

            completion = response.json().get("response", "")
            logger.debug(f"Ollama response: {len(completion)} chars")
            return completion

    def is_available(self) -> bool:
        """Check if Ollama is running and the model is pulled."""
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Ollama not available at {self.base_url}: {e}")
            return False

        model_names = [m.get("name") for m in response.json().get("models", [])]
        if self.model not in model_names:
            logger.warning(
                f"Model '{self.model}' not found in Ollama. "
                f"Available: {model_names}. Pull with: ollama pull {self.model}"
            )
            return False
        return True
