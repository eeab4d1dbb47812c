"""Summarizer selection from configuration."""

from typing import Optional

from doc_search.config import settings
from doc_search.exceptions import ConfigurationError
from doc_search.llm import create_llm_provider
from doc_search.summarizers import BaseSummarizer
from doc_search.summarizers.extractive import ExtractiveSummarizer
from doc_search.summarizers.llm import LLMSummarizer


def create_summarizer(name: Optional[str] = None) -> BaseSummarizer:
    """
    Create the configured summarizer.

    Args:
        name: "extractive" or "llm" (defaults to settings.summarizer)

    Raises:
        ConfigurationError: If the name is unknown or the LLM provider is unavailable
    """
    name = name or settings.summarizer

    if name == "extractive":
        return ExtractiveSummarizer(terse_chars=settings.summary_max_chars)
    if name == "llm":
        return LLMSummarizer(create_llm_provider(), terse_chars=settings.summary_max_chars)

    raise ConfigurationError(f"Unknown summarizer: {name}. Supported: extractive, llm")
