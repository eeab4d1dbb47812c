"""LLM providers backing the LLM summarizer.

This module provides:
- Provider abstraction (Ollama, Anthropic)
- Rate limiting for external APIs
- Summary prompt templates

Example usage:
    from doc_search.llm import create_llm_provider

    provider = create_llm_provider(provider_name="ollama", model="qwen2.5-coder:7b")
"""

from typing import Optional

from loguru import logger

from doc_search.config import settings
from doc_search.exceptions import ConfigurationError
from doc_search.llm.providers import BaseLLMProvider
from doc_search.llm.providers.anthropic import AnthropicProvider
from doc_search.llm.providers.ollama import OllamaProvider


def create_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    check_available: bool = True,
    **kwargs
) -> BaseLLMProvider:
    """Factory function to create an LLM provider from config.

    Args:
        provider_name: Override config provider ("ollama", "anthropic")
        model: Override config model
        check_available: Fail fast when the provider cannot be reached
        **kwargs: Additional provider-specific parameters

    Returns:
        Configured LLM provider instance

    Raises:
        ConfigurationError: If provider is unknown or not available
    """
    provider_name = provider_name or settings.llm_provider
    model = model or settings.llm_model

    logger.info(f"Creating LLM provider: {provider_name} with model {model}")

    if provider_name == "ollama":
        provider = OllamaProvider(
            model=model,
            base_url=settings.llm_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout,
            **kwargs
        )
    elif provider_name == "anthropic":
        provider = AnthropicProvider(
            model=model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            rate_limit=settings.llm_rate_limit,
            timeout=settings.llm_timeout,
            **kwargs
        )
    else:
        raise ConfigurationError(
            f"Unknown LLM provider: {provider_name}. Supported: ollama, anthropic"
        )

    if check_available and not provider.is_available():
        raise ConfigurationError(
            f"{provider_name} provider is not available. "
            f"Check configuration and dependencies."
        )

    return provider


__all__ = [
    "BaseLLMProvider",
    "OllamaProvider",
    "AnthropicProvider",
    "create_llm_provider",
]
