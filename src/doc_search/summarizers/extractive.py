"""Deterministic offline summarizer built from headings and leading text."""

import re
from typing import List, Tuple

from doc_search.summarizers import BaseSummarizer, normalize_summary


_FENCE = re.compile(r"^ {0,3}(```|~~~).*?^ {0,3}\1[^\n]*$", re.MULTILINE | re.DOTALL)
_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_INLINE_MARKUP = re.compile(r"[`*>|]")
_HEADING = re.compile(r"^#{1,6}\s+(.*)$")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def plain_lines(text: str) -> Tuple[List[str], List[str]]:
    """
    Split markdown into heading texts and plain body lines.

    Code fences are dropped, links reduced to their text and inline markup
    characters removed.
    """
    text = _FENCE.sub("", text)
    headings = []
    body = []
    for raw in text.splitlines():
        line = _LINK.sub(r"\1", raw).strip()
        match = _HEADING.match(line)
        if match:
            headings.append(_INLINE_MARKUP.sub("", match.group(1)).strip(" #"))
            continue
        line = _INLINE_MARKUP.sub("", line).strip(" -")
        if line and not set(line) <= set("-=:"):
            body.append(line)
    return headings, body


class ExtractiveSummarizer(BaseSummarizer):
    """Summaries assembled from the document's own headings and first sentences.

    Output depends only on the input text, so rebuilding an unchanged tree is
    byte-identical.
    """

    def __init__(
        self,
        terse_chars: int = 250,
        detailed_chars: int = 800,
        section_chars: int = 200
    ):
        """
        Args:
            terse_chars: Maximum terse summary length
            detailed_chars: Maximum detailed summary length
            section_chars: Maximum section summary length
        """
        self.terse_chars = terse_chars
        self.detailed_chars = detailed_chars
        self.section_chars = section_chars

    def summarize(self, text: str) -> Tuple[str, str]:
        headings, body = plain_lines(text)
        body_text = " ".join(body)

        # Headings first: they are the most keyword-dense part of a doc
        terse_parts = []
        if headings:
            terse_parts.append("; ".join(headings) + ".")
        if body_text:
            terse_parts.append(body_text)
        terse = normalize_summary(" ".join(terse_parts), self.terse_chars)

        detailed = normalize_summary(self._leading_sentences(body_text), self.detailed_chars)
        return terse, detailed

    def summarize_section(self, text: str) -> str:
        _, body = plain_lines(text)
        sentences = _SENTENCE_END.split(" ".join(body))
        return normalize_summary(sentences[0] if sentences else "", self.section_chars)

    def _leading_sentences(self, body_text: str) -> str:
        """Whole sentences from the start of the body, up to the detailed budget"""
        selected = []
        length = 0
        for sentence in _SENTENCE_END.split(body_text):
            if selected and length + len(sentence) + 1 > self.detailed_chars:
                break
            selected.append(sentence)
            length += len(sentence) + 1
        return " ".join(selected)
