"""
Index number to SectionEntry resolution with a synchronization guard.

Line N of sections.jsonl is only trusted if line N of index.jsonl names the
same file with the same index number. A disagreement is re-read with the
loader's retry policy before it is reported, since it may come from a read
that fell between the writer's two renames.
"""

from itertools import zip_longest
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from doc_search.config import settings
from doc_search.exceptions import (
    CollectionNotFoundError,
    IndexOutOfRangeError,
    ParseError,
    SyncMismatchError,
)
from doc_search.retrieval.loader import pair_retrying
from doc_search.schemas.index_models import INDEX_BASE, SectionEntry
from doc_search.utils.file_handler import count_lines, parse_json_line


class SectionResolver:
    """
    Maps (collection, index) to the matching sections.jsonl row.

    Usage:
        resolver = SectionResolver()
        entry = resolver.resolve(Path("docs"), 3)
    """

    def __init__(
        self,
        index_filename: Optional[str] = None,
        sections_filename: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        retry_wait: Optional[float] = None
    ):
        self.index_filename = index_filename or settings.index_filename
        self.sections_filename = sections_filename or settings.sections_filename
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait

    def resolve(self, collection_path: Path, index: int) -> SectionEntry:
        """
        Resolve one index number.

        Raises:
            IndexOutOfRangeError: index is negative or past the last line
            CollectionNotFoundError: index files missing or sections.jsonl truncated
            SyncMismatchError: the two files still disagree at that line after
                every retry
        """
        return self.resolve_many(collection_path, [index])[0]

    def resolve_many(self, collection_path: Path, indexes: Iterable[int]) -> List[SectionEntry]:
        """
        Resolve several index numbers with one pass over each file.

        Returns:
            SectionEntries in the order of ``indexes``
        """
        collection_path = Path(collection_path).resolve()
        indexes = list(indexes)
        if not indexes:
            return []

        positions = set()
        for index in indexes:
            if index < INDEX_BASE:
                raise IndexOutOfRangeError(f"Index {index} is below {INDEX_BASE} in {collection_path}")
            positions.add(index - INDEX_BASE)

        retrying = pair_retrying(self.retry_attempts, self.retry_wait)
        resolved = retrying(self._resolve_once, collection_path, indexes, positions)
        logger.debug(f"Resolved {len(resolved)} entries in {collection_path}")
        return resolved

    def _resolve_once(self, collection_path: Path, indexes: List[int], positions: set) -> List[SectionEntry]:
        """One lockstep read of both files; mismatches are retried by the caller"""
        index_file = collection_path / self.index_filename
        sections_file = collection_path / self.sections_filename

        try:
            rows = self._read_rows(index_file, sections_file, positions)
        except FileNotFoundError as e:
            raise CollectionNotFoundError(
                f"Collection files missing in {collection_path}: {e.filename}"
            ) from e

        return [self._check(rows, index, index_file, sections_file) for index in indexes]

    def _read_rows(
        self,
        index_file: Path,
        sections_file: Path,
        positions: set
    ) -> Dict[int, Tuple[Optional[str], Optional[str]]]:
        """Read the wanted line positions from both files in lockstep"""
        last = max(positions)
        rows: Dict[int, Tuple[Optional[str], Optional[str]]] = {}
        with open(index_file, "r", encoding="utf-8") as index_f, \
                open(sections_file, "r", encoding="utf-8") as sections_f:
            for position, (index_line, section_line) in enumerate(zip_longest(index_f, sections_f)):
                if position in positions:
                    rows[position] = (index_line, section_line)
                if position >= last:
                    break
        return rows

    def _check(
        self,
        rows: Dict[int, Tuple[Optional[str], Optional[str]]],
        index: int,
        index_file: Path,
        sections_file: Path
    ) -> SectionEntry:
        position = index - INDEX_BASE
        index_line, section_line = rows.get(position, (None, None))

        if index_line is None:
            raise IndexOutOfRangeError(
                f"Index {index} out of range for {index_file} ({count_lines(index_file)} lines)"
            )
        if section_line is None:
            raise CollectionNotFoundError(
                f"{sections_file} is shorter than {index_file}; rebuild interrupted"
            )

        index_record = parse_json_line(index_line, index_file, position)
        section_record = parse_json_line(section_line, sections_file, position)

        if index_record.get("relative_path") != section_record.get("relative_path"):
            raise SyncMismatchError(
                f"Line {position}: index.jsonl has {index_record.get('relative_path')!r}, "
                f"sections.jsonl has {section_record.get('relative_path')!r}"
            )
        if index_record.get("index") != index or section_record.get("index") != index:
            raise SyncMismatchError(
                f"Line {position}: expected index {index}, found "
                f"{index_record.get('index')} / {section_record.get('index')}"
            )

        try:
            return SectionEntry(**section_record)
        except ValidationError as e:
            raise ParseError(f"Invalid entry in {sections_file} line {position}: {e}") from e
