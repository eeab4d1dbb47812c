"""
Two-tier documentation index with section-level retrieval.

Build time: segment markdown files, summarize them, and write the
synchronized index.jsonl / sections.jsonl pair per collection.
Query time: discover collections, load indexes, resolve picks to sections and
read exact line windows.
"""

__version__ = "1.0.0"
