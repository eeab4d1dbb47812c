"""Summarizer backed by an LLM provider."""

import re
from typing import Tuple

from loguru import logger

from doc_search.exceptions import SummarizerError
from doc_search.llm.prompts import SYSTEM_PROMPT, PromptTemplates
from doc_search.llm.providers import BaseLLMProvider
from doc_search.summarizers import BaseSummarizer, normalize_summary


_TERSE = re.compile(r"^\s*TERSE:\s*(.+?)\s*$", re.MULTILINE)
_DETAILED = re.compile(r"^\s*DETAILED:\s*(.+)\Z", re.MULTILINE | re.DOTALL)


class LLMSummarizer(BaseSummarizer):
    """Delegates summary writing to an LLM provider.

    Long inputs are cut to ``max_input_chars`` before prompting.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        terse_chars: int = 250,
        max_input_chars: int = 12000
    ):
        """
        Args:
            provider: LLM provider used for every call
            terse_chars: Maximum terse summary length
            max_input_chars: Input characters sent per prompt
        """
        self.provider = provider
        self.terse_chars = terse_chars
        self.max_input_chars = max_input_chars

    def summarize(self, text: str) -> Tuple[str, str]:
        prompt = PromptTemplates.file_summary(self._clip(text), self.terse_chars)
        response = self.provider.generate(prompt, system_prompt=SYSTEM_PROMPT)
        return self.parse_file_summary(response)

    def summarize_section(self, text: str) -> str:
        prompt = PromptTemplates.section_summary(self._clip(text))
        response = self.provider.generate(prompt, system_prompt=SYSTEM_PROMPT)
        return normalize_summary(response, 200)

    def parse_file_summary(self, response: str) -> Tuple[str, str]:
        """
        Parse the TERSE/DETAILED blocks of a file summary response.

        Raises:
            SummarizerError: If the TERSE block is missing
        """
        terse_match = _TERSE.search(response)
        if not terse_match:
            logger.debug(f"Unparseable summary response: {response[:200]!r}")
            raise SummarizerError(f"{self.provider.provider_name} response has no TERSE block")

        detailed_match = _DETAILED.search(response)
        terse = normalize_summary(terse_match.group(1), self.terse_chars)
        detailed = normalize_summary(detailed_match.group(1), 2000) if detailed_match else terse
        return terse, detailed

    def _clip(self, text: str) -> str:
        if len(text) <= self.max_input_chars:
            return text
        return text[:self.max_input_chars]

    @property
    def name(self) -> str:
        return f"LLMSummarizer({self.provider.provider_name}:{self.provider.model})"
