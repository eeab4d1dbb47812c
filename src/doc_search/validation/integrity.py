"""
Integrity verification for collection index pairs.

Checks every line of a collection against the synchronization and range
invariants and reports issues instead of raising, so a whole tree can be
audited in one pass.
"""

from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from doc_search.config import settings
from doc_search.exceptions import DocSearchError
from doc_search.retrieval.scanner import CollectionScanner
from doc_search.schemas.index_models import INDEX_BASE, SectionEntry
from doc_search.utils.file_handler import iter_jsonl, read_lines, resolve_relative


class IntegrityIssue(BaseModel):
    """A single invariant violation."""
    kind: str = Field(..., description="missing, parse, count, sync, path, stale, tiling")
    message: str
    line: Optional[int] = Field(None, description="0-based line position in the index pair")


class IntegrityReport(BaseModel):
    """Verification result for one collection."""
    collection: Path
    entries: int = 0
    issues: List[IntegrityIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def add(self, kind: str, message: str, line: Optional[int] = None):
        self.issues.append(IntegrityIssue(kind=kind, message=message, line=line))


def _check_ranges(report: IntegrityReport, entry: SectionEntry, file_path: Path, position: int):
    """Sections must tile the file from its first offset to EOF"""
    try:
        line_count = len(read_lines(file_path))
    except DocSearchError as e:
        report.add("parse", str(e), position)
        return

    sections = entry.sections
    if not sections:
        return

    if sections[0].offset != 1:
        report.add("tiling", f"{entry.relative_path}: first section starts at line {sections[0].offset}", position)

    for current, following in zip(sections, sections[1:]):
        if current.offset + current.limit != following.offset:
            report.add(
                "tiling",
                f"{entry.relative_path}: '{current.heading}' ends at {current.end_line}, "
                f"next section starts at {following.offset}",
                position
            )

    last = sections[-1]
    if last.end_line > line_count:
        report.add(
            "stale",
            f"{entry.relative_path}: '{last.heading}' ends at line {last.end_line}, file has {line_count}",
            position
        )
    elif last.end_line < line_count:
        report.add(
            "stale",
            f"{entry.relative_path}: sections cover {last.end_line} of {line_count} lines",
            position
        )


def verify_collection(collection_path: Path, check_ranges: bool = True) -> IntegrityReport:
    """
    Verify one collection's index pair.

    Args:
        collection_path: Collection root
        check_ranges: Also compare section windows with current file lengths

    Returns:
        IntegrityReport listing every issue found
    """
    collection_path = Path(collection_path).resolve()
    report = IntegrityReport(collection=collection_path)
    index_file = collection_path / settings.index_filename
    sections_file = collection_path / settings.sections_filename

    for path in (index_file, sections_file):
        if not path.exists():
            report.add("missing", f"{path.name} not found")
    if report.issues:
        return report

    try:
        index_records = [record for _, record in iter_jsonl(index_file)]
        section_records = [record for _, record in iter_jsonl(sections_file)]
    except DocSearchError as e:
        report.add("parse", str(e))
        return report

    report.entries = len(index_records)
    if len(index_records) != len(section_records):
        report.add(
            "count",
            f"{len(index_records)} index lines vs {len(section_records)} section lines"
        )

    for position, (index_record, section_record) in enumerate(zip(index_records, section_records)):
        expected = INDEX_BASE + position
        if index_record.get("index") != expected or section_record.get("index") != expected:
            report.add(
                "sync",
                f"expected index {expected}, found {index_record.get('index')} / {section_record.get('index')}",
                position
            )
        if index_record.get("relative_path") != section_record.get("relative_path"):
            report.add(
                "sync",
                f"{index_record.get('relative_path')!r} != {section_record.get('relative_path')!r}",
                position
            )
            continue

        try:
            entry = SectionEntry(**section_record)
        except ValidationError as e:
            report.add("parse", f"invalid section entry: {e}", position)
            continue

        try:
            file_path = resolve_relative(collection_path, entry.relative_path)
        except DocSearchError as e:
            report.add("path", str(e), position)
            continue
        if not file_path.is_file():
            report.add("stale", f"{entry.relative_path} no longer exists", position)
            continue

        if check_ranges:
            _check_ranges(report, entry, file_path, position)

    if report.is_valid:
        logger.info(f"Collection OK: {collection_path} ({report.entries} entries)")
    else:
        logger.warning(f"Collection {collection_path}: {len(report.issues)} issues")
    return report


def verify_tree(root: Path, check_ranges: bool = True) -> List[IntegrityReport]:
    """Verify every collection discovered under root"""
    scanner = CollectionScanner()
    return [verify_collection(d.path, check_ranges) for d in scanner.scan(root)]
