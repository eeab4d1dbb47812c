"""
Exact line-window reads from documentation files.

A window that no longer fits the file means the index is stale. The
extractor raises instead of returning a shorter slice.
"""

from pathlib import Path

from loguru import logger

from doc_search.exceptions import StaleRangeError
from doc_search.utils.file_handler import read_lines, resolve_relative


class ContentExtractor:
    """
    Reads ``limit`` lines starting at 1-indexed ``offset``.

    Usage:
        extractor = ContentExtractor()
        text = extractor.extract(Path("docs"), "guide/setup.md", offset=5, limit=4)
    """

    def extract(self, collection_path: Path, relative_path: str, offset: int, limit: int) -> str:
        """
        Extract an exact line window.

        Args:
            collection_path: Collection root the path is relative to
            relative_path: File path as recorded in the index
            offset: First line (1-indexed)
            limit: Number of lines

        Returns:
            The window's text with original line endings

        Raises:
            ValueError: offset or limit below 1
            InvalidPathError: relative_path escapes the collection
            StaleRangeError: file missing or shorter than offset + limit - 1
            ParseError: file is not valid UTF-8
        """
        if offset < 1 or limit < 1:
            raise ValueError(f"offset and limit must be >= 1, got offset={offset} limit={limit}")

        file_path = resolve_relative(collection_path, relative_path)
        try:
            lines = read_lines(file_path)
        except FileNotFoundError as e:
            raise StaleRangeError(f"Indexed file no longer exists: {relative_path}") from e

        end_line = offset + limit - 1
        if len(lines) < end_line:
            raise StaleRangeError(
                f"{relative_path} has {len(lines)} lines, index expects lines "
                f"{offset}-{end_line}; rebuild the collection"
            )

        logger.debug(f"Extracted {relative_path} lines {offset}-{end_line}")
        return "".join(lines[offset - 1:end_line])
