"""
Query-time components: discovery, loading, resolution and extraction.
"""

from doc_search.retrieval.scanner import CollectionScanner
from doc_search.retrieval.loader import IndexCache, IndexLoader
from doc_search.retrieval.resolver import SectionResolver
from doc_search.retrieval.extractor import ContentExtractor
from doc_search.retrieval.orchestrator import QueryOrchestrator, Ranker, StaticRanker

__all__ = [
    "CollectionScanner",
    "IndexCache",
    "IndexLoader",
    "SectionResolver",
    "ContentExtractor",
    "QueryOrchestrator",
    "Ranker",
    "StaticRanker",
]
