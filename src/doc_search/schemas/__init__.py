"""
Pydantic models for index files, build reports and query stages.
"""

from doc_search.schemas.index_models import (
    INDEX_BASE,
    Section,
    IndexEntry,
    SectionEntry,
    FileRecord,
    FileFailure,
    BuildReport,
)
from doc_search.schemas.query_models import (
    CollectionDescriptor,
    CollectionPreview,
    LoadedCollection,
    CandidateEntry,
    RankRequest,
    RankedPick,
    RankResponse,
    ResolvedCandidate,
    SectionSelection,
    ContentBundle,
)

__all__ = [
    "INDEX_BASE",
    "Section",
    "IndexEntry",
    "SectionEntry",
    "FileRecord",
    "FileFailure",
    "BuildReport",
    "CollectionDescriptor",
    "CollectionPreview",
    "LoadedCollection",
    "CandidateEntry",
    "RankRequest",
    "RankedPick",
    "RankResponse",
    "ResolvedCandidate",
    "SectionSelection",
    "ContentBundle",
]
