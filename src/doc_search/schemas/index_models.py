"""
Models for the persisted index pair and for rebuild results.

One ``IndexEntry`` per line of ``index.jsonl`` and one ``SectionEntry`` per
line of ``sections.jsonl``. Line N of both files describes the same file, and
``index`` always equals N (0-based).
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


# First index number of every collection; index == physical line position
INDEX_BASE = 0


class Section(BaseModel):
    """
    A heading-delimited slice of a documentation file.

    ``offset``/``limit`` form a precise partial-read window: read ``limit``
    lines starting at 1-indexed line ``offset``.
    """
    heading: str = Field(..., description="Heading text without leading hashes")
    level: int = Field(..., ge=2, le=3, description="Heading level (2 or 3)")
    offset: int = Field(..., ge=1, description="Start line (1-indexed)")
    limit: int = Field(..., ge=1, description="Number of lines in the section")
    summary: str = Field(default="", description="Short section summary")

    @property
    def end_line(self) -> int:
        """Last line of the section (inclusive)"""
        return self.offset + self.limit - 1


class IndexEntry(BaseModel):
    """One line of index.jsonl: a terse, keyword-dense file summary."""
    index: int = Field(..., ge=INDEX_BASE, description="Line position in both files")
    relative_path: str = Field(..., min_length=1, description="POSIX path relative to collection root")
    summary: str = Field(..., description="Terse summary (150-250 chars)")


class SectionEntry(BaseModel):
    """One line of sections.jsonl: detailed summary plus section windows."""
    index: int = Field(..., ge=INDEX_BASE, description="Line position in both files")
    relative_path: str = Field(..., min_length=1, description="POSIX path relative to collection root")
    detailed_summary: str = Field(default="", description="Longer file summary")
    sections: List[Section] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_offsets(self) -> "SectionEntry":
        previous = 0
        for section in self.sections:
            if section.offset <= previous:
                raise ValueError(
                    f"Section offsets must be strictly increasing in {self.relative_path}: "
                    f"{section.offset} after {previous}"
                )
            previous = section.offset
        return self

    def find_section(self, heading: str) -> Optional[Section]:
        """Find first section whose heading matches exactly"""
        for section in self.sections:
            if section.heading == heading:
                return section
        return None


class FileRecord(BaseModel):
    """Per-file build output handed to the IndexWriter (index not yet assigned)."""
    relative_path: str = Field(..., min_length=1)
    summary: str
    detailed_summary: str = ""
    sections: List[Section] = Field(default_factory=list)


class FileFailure(BaseModel):
    """A file excluded from a generation, with the reason."""
    relative_path: str
    error_type: str
    message: str


class BuildReport(BaseModel):
    """Outcome of rebuilding one collection."""
    collection: Path
    indexed: int = 0
    failures: List[FileFailure] = Field(default_factory=list)
    written: bool = False
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """True when the generation was written with no file failures"""
        return self.written and not self.failures
