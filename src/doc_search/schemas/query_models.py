"""
Query-time models for the DISCOVER -> LOAD -> SELECT -> RESOLVE -> EXTRACT flow.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from doc_search.schemas.index_models import IndexEntry, Section, SectionEntry


class CollectionDescriptor(BaseModel):
    """A directory holding both index files."""
    path: Path = Field(..., description="Collection root")
    relative_path: str = Field(..., description="Path relative to the scan root ('.' for the root)")
    depth: int = Field(..., ge=0, description="Directory depth below the scan root")
    index_file: Path
    sections_file: Path


class CollectionPreview(BaseModel):
    """Cheap scope preview: only the first K lines of index.jsonl."""
    collection: CollectionDescriptor
    sample: List[IndexEntry] = Field(default_factory=list)


class LoadedCollection(BaseModel):
    """Entire index.jsonl of one collection, in line order."""
    path: Path
    entries: List[IndexEntry] = Field(default_factory=list)
    fingerprint: Tuple[int, int, int] = Field(
        ...,
        description="(st_mtime_ns, st_size, st_ino) of index.jsonl at load time"
    )

    @property
    def size(self) -> int:
        """Number of indexed files"""
        return len(self.entries)

    def entry(self, index: int) -> Optional[IndexEntry]:
        """Entry at index number, or None when out of range"""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None


class CandidateEntry(BaseModel):
    """A loaded index entry as presented to a Ranker."""
    collection: Path
    index: int
    relative_path: str
    summary: str


class RankRequest(BaseModel):
    """Input to the external ranking step."""
    query: str
    entries: List[CandidateEntry] = Field(default_factory=list)
    max_picks: int = Field(..., ge=1)


class RankedPick(BaseModel):
    """A (collection, index) chosen for deeper inspection."""
    collection: Path
    index: int = Field(..., ge=0)
    reason: Optional[str] = None


class RankResponse(BaseModel):
    """Output of the external ranking step."""
    picks: List[RankedPick] = Field(default_factory=list)


class ResolvedCandidate(BaseModel):
    """A pick resolved to its sections.jsonl row."""
    collection: Path
    entry: SectionEntry


class SectionSelection(BaseModel):
    """A section the caller wants to read."""
    collection: Path
    relative_path: str
    section: Section


class ContentBundle(BaseModel):
    """Extracted text of one section with its provenance."""
    collection: Path
    relative_path: str
    heading: str
    offset: int
    limit: int
    text: str
