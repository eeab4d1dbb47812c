"""
Unit tests for exact line-window extraction.
"""

import pytest

from doc_search.exceptions import InvalidPathError, StaleRangeError
from doc_search.retrieval.extractor import ContentExtractor


class TestContentExtractor:
    """Tests for ContentExtractor.extract()."""

    def test_exact_window(self, guide):
        text = ContentExtractor().extract(guide, "setup.md", offset=5, limit=5)

        assert text == (
            "## Installation\n"
            "\n"
            "Run pip install example-client.\n"
            "Requires Python 3.10 or newer.\n"
            "\n"
        )

    def test_window_at_end_of_file(self, tmp_path):
        (tmp_path / "a.md").write_text("one\ntwo\nthree", encoding="utf-8")

        assert ContentExtractor().extract(tmp_path, "a.md", offset=3, limit=1) == "three"

    def test_nested_relative_path(self, guide):
        text = ContentExtractor().extract(guide, "reference/api.md", offset=1, limit=1)

        assert text == "## Client\n"

    def test_shrunk_file_is_stale(self, guide):
        (guide / "setup.md").write_text("# Setup Guide\n\nShort now.\n", encoding="utf-8")

        with pytest.raises(StaleRangeError, match="rebuild"):
            ContentExtractor().extract(guide, "setup.md", offset=5, limit=5)

    def test_removed_file_is_stale(self, guide):
        (guide / "setup.md").unlink()

        with pytest.raises(StaleRangeError):
            ContentExtractor().extract(guide, "setup.md", offset=1, limit=1)

    @pytest.mark.parametrize("relative_path", ["../outside.md", "/etc/passwd", "reference/../../x.md"])
    def test_paths_outside_collection(self, guide, relative_path):
        with pytest.raises(InvalidPathError):
            ContentExtractor().extract(guide, relative_path, offset=1, limit=1)

    @pytest.mark.parametrize("offset,limit", [(0, 1), (1, 0), (-3, 2)])
    def test_invalid_window(self, guide, offset, limit):
        with pytest.raises(ValueError):
            ContentExtractor().extract(guide, "setup.md", offset=offset, limit=limit)

    def test_crlf_endings_preserved(self, tmp_path):
        (tmp_path / "a.md").write_bytes(b"## A\r\nx\r\n## B\r\ny\r\n")

        assert ContentExtractor().extract(tmp_path, "a.md", offset=1, limit=2) == "## A\r\nx\r\n"

    def test_unicode_line_separator_is_not_a_line_break(self, tmp_path):
        (tmp_path / "a.md").write_text("## A\nfoo\u2028bar\n## B\nx\n", encoding="utf-8")

        assert ContentExtractor().extract(tmp_path, "a.md", offset=3, limit=2) == "## B\nx\n"
