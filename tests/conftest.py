"""
pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import Tuple

from doc_search.indexing.builder import CollectionBuilder
from doc_search.summarizers.extractive import ExtractiveSummarizer


SAMPLE_MARKDOWN = "# Title\n\nIntro\n\n## Section A\nbody1\nbody2\n\n## Section B\nbody3\n"

SETUP_MARKDOWN = """# Setup Guide

Install the client before anything else.

## Installation

Run pip install example-client.
Requires Python 3.10 or newer.

## Configuration

Set EXAMPLE_API_KEY in the environment.
Retries are configured with max_retries.

### Advanced

Tune the backoff with retry_multiplier.
"""

API_MARKDOWN = """## Client

The Client class opens a session.

## Errors

All errors derive from ExampleError.
"""


def write(path: Path, content: str) -> Path:
    """Write a text file, creating parent directories"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def sample_markdown() -> str:
    """Markdown with a title preamble and two level-2 sections"""
    return SAMPLE_MARKDOWN


@pytest.fixture
def setup_markdown() -> str:
    """Markdown with a title, two ## sections and one ### subsection"""
    return SETUP_MARKDOWN


@pytest.fixture
def summarizer() -> ExtractiveSummarizer:
    """Deterministic summarizer for reproducible builds"""
    return ExtractiveSummarizer()


@pytest.fixture
def builder(summarizer) -> CollectionBuilder:
    """Builder with a small worker pool"""
    return CollectionBuilder(summarizer=summarizer, max_workers=2, timeout=30)


@pytest.fixture
def docs_root(tmp_path) -> Path:
    """
    Documentation tree with one primary collection and one nested vendor collection.

    docs/
      guide/            (collection, depth 1)
        setup.md
        reference/api.md
        notes.txt       (not indexed)
      scratch/          (no index files)
        draft.md
      vendor/libs/acme/ (collection, depth 3)
        readme.md
    """
    root = tmp_path / "docs"
    write(root / "guide" / "setup.md", SETUP_MARKDOWN)
    write(root / "guide" / "reference" / "api.md", API_MARKDOWN)
    write(root / "guide" / "notes.txt", "plain text\n")
    write(root / "scratch" / "draft.md", "## Draft\n\nNot a collection.\n")
    write(root / "vendor" / "libs" / "acme" / "readme.md", "# Acme\n\n## Usage\n\nCall acme.run().\n")
    return root


@pytest.fixture
def built_root(docs_root, builder) -> Path:
    """docs_root with both collections built"""
    builder.build_all([docs_root / "guide", docs_root / "vendor" / "libs" / "acme"])
    return docs_root


@pytest.fixture
def guide(built_root) -> Path:
    """Path of the built guide collection"""
    return (built_root / "guide").resolve()


@pytest.fixture
def index_pair(guide) -> Tuple[Path, Path]:
    """(index.jsonl, sections.jsonl) of the guide collection"""
    return guide / "index.jsonl", guide / "sections.jsonl"
