"""
Markdown segmenter producing exact line windows per heading.

A single line-number-tracked pass splits a file at ``##`` headings (and
``###`` when ``heading_depth`` is 3). Each span carries the 1-indexed start
line and the exclusive end line, so consecutive spans tile the file with no
gaps or overlaps.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from doc_search.config import settings
from doc_search.utils.file_handler import read_text, split_lines


PREAMBLE_HEADING = "Preamble"

_FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CLOSING_HASHES = re.compile(r"\s+#+\s*$")


@dataclass
class SegmentSpan:
    """A heading-delimited line range within one file."""
    heading: str
    level: int
    start_line: int  # 1-indexed, inclusive
    end_line: int  # 1-indexed, exclusive

    @property
    def offset(self) -> int:
        return self.start_line

    @property
    def limit(self) -> int:
        return self.end_line - self.start_line


def heading_level(line: str) -> int:
    """
    Return the ATX heading level of a line, or 0 if it is not a heading.

    A heading is ``level`` ``#`` characters at the very start of the line
    followed by a space.
    """
    count = len(line) - len(line.lstrip("#"))
    if 1 <= count <= 6 and line[count:count + 1] == " ":
        return count
    return 0


def heading_text(line: str, level: int) -> str:
    """Heading text without the leading marker or ATX closing hashes"""
    text = line[level + 1:].strip()
    return _CLOSING_HASHES.sub("", text)


class MarkdownSegmenter:
    """
    Splits markdown into heading-delimited sections.

    Usage:
        segmenter = MarkdownSegmenter(heading_depth=2)
        spans = segmenter.segment(text)
    """

    def __init__(self, heading_depth: Optional[int] = None):
        """
        Args:
            heading_depth: Deepest heading level that starts a section (2 or 3)
        """
        heading_depth = heading_depth or settings.heading_depth
        if heading_depth not in (2, 3):
            raise ValueError(f"heading_depth must be 2 or 3, got {heading_depth}")
        self.heading_depth = heading_depth

    def segment(self, text: str) -> List[SegmentSpan]:
        """
        Segment markdown text.

        Args:
            text: Full file contents

        Returns:
            Ordered spans; empty when no qualifying heading exists
        """
        lines = split_lines(text)
        headings, title = self._scan_headings(lines)

        if not headings:
            return []

        total = len(lines)
        spans: List[SegmentSpan] = []

        first_line = headings[0][0]
        if first_line > 1:
            spans.append(SegmentSpan(
                heading=title or PREAMBLE_HEADING,
                level=2,
                start_line=1,
                end_line=first_line
            ))

        for position, (line_no, level, name) in enumerate(headings):
            if position + 1 < len(headings):
                end_line = headings[position + 1][0]
            else:
                end_line = total + 1
            spans.append(SegmentSpan(
                heading=name,
                level=level,
                start_line=line_no,
                end_line=end_line
            ))

        return spans

    def segment_file(self, file_path: Path) -> Tuple[List[str], List[SegmentSpan]]:
        """
        Read and segment a file.

        Returns:
            Tuple of (lines with endings, spans)

        Raises:
            ParseError: If the file is not valid UTF-8 or cannot be read
        """
        text = read_text(file_path)
        spans = self.segment(text)
        logger.debug(f"Segmented {file_path}: {len(spans)} sections")
        return split_lines(text), spans

    def _scan_headings(self, lines: List[str]) -> Tuple[List[Tuple[int, int, str]], Optional[str]]:
        """Collect (line, level, text) for qualifying headings, plus the first H1 title"""
        headings: List[Tuple[int, int, str]] = []
        title: Optional[str] = None
        fence: Optional[str] = None

        for line_no, line in enumerate(lines, 1):
            line = line.rstrip("\r\n")
            fence_match = _FENCE_PATTERN.match(line)
            if fence is not None:
                if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                    fence = None
                continue
            if fence_match:
                fence = fence_match.group(1)
                continue

            level = heading_level(line)
            if level == 1 and title is None and not headings:
                title = heading_text(line, level) or None
            elif 2 <= level <= self.heading_depth:
                headings.append((line_no, level, heading_text(line, level)))

        return headings, title


def section_text(lines: List[str], span: SegmentSpan) -> str:
    """Join the lines covered by a span (lines keep their endings)"""
    return "".join(lines[span.start_line - 1:span.end_line - 1])
