"""
Build-time components: segmentation, index writing and collection rebuilds.
"""

from doc_search.indexing.segmenter import MarkdownSegmenter, SegmentSpan, section_text
from doc_search.indexing.writer import IndexWriter
from doc_search.indexing.builder import CollectionBuilder

__all__ = [
    "MarkdownSegmenter",
    "SegmentSpan",
    "section_text",
    "IndexWriter",
    "CollectionBuilder",
]
