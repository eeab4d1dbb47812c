"""Base summarizer interface consumed by the index builder."""

import re
from abc import ABC, abstractmethod
from typing import Tuple


_WHITESPACE = re.compile(r"\s+")


def normalize_summary(text: str, max_chars: int) -> str:
    """
    Collapse whitespace and cut at a word boundary to at most max_chars.

    Args:
        text: Raw summary text
        max_chars: Maximum length of the result

    Returns:
        Single-line summary
    """
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) <= max_chars:
        return text

    cut = text[:max_chars + 1]
    space = cut.rfind(" ")
    if space > max_chars // 2:
        return cut[:space].rstrip(" ,;:-")
    return text[:max_chars]


class BaseSummarizer(ABC):
    """Abstract base class for summarizers.

    Implementations must be safe to call from several worker threads.
    """

    @abstractmethod
    def summarize(self, text: str) -> Tuple[str, str]:
        """Summarize a whole file.

        Args:
            text: File contents

        Returns:
            Tuple of (terse keyword-dense summary, detailed summary)
        """
        pass

    @abstractmethod
    def summarize_section(self, text: str) -> str:
        """Summarize one section.

        Args:
            text: Section contents including its heading line

        Returns:
            Short section summary
        """
        pass

    @property
    def name(self) -> str:
        """Summarizer name for logging."""
        return self.__class__.__name__
