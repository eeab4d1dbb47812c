"""
Index writer emitting the synchronized index.jsonl / sections.jsonl pair.

Both files are rebuilt wholesale. Line N of each describes the same file and
carries ``index == N``. The pair is written to temporary files beside the
targets and renamed into place, so a reader sees either the previous
generation or the new one.
"""

import json
import os
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from doc_search.config import settings
from doc_search.exceptions import DuplicatePathError
from doc_search.schemas.index_models import (
    INDEX_BASE,
    FileRecord,
    IndexEntry,
    SectionEntry,
)
from doc_search.utils.file_handler import fsync_directory, write_temp_file


def serialize(entry) -> str:
    """Deterministic single-line JSON for an index or section entry"""
    return json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)


class IndexWriter:
    """
    Single writer for one or more collections.

    Usage:
        writer = IndexWriter()
        entries = writer.write(Path("docs"), records)
    """

    def __init__(
        self,
        index_filename: Optional[str] = None,
        sections_filename: Optional[str] = None
    ):
        self.index_filename = index_filename or settings.index_filename
        self.sections_filename = sections_filename or settings.sections_filename
        self._lock = threading.Lock()

    def assign(self, records: Iterable[FileRecord]) -> List[Tuple[IndexEntry, SectionEntry]]:
        """
        Assign sequential index numbers in the given order.

        Raises:
            DuplicatePathError: If a relative_path appears twice
        """
        pairs = []
        seen = set()
        for position, record in enumerate(records):
            if record.relative_path in seen:
                raise DuplicatePathError(
                    f"Duplicate relative_path in rebuild: {record.relative_path}"
                )
            seen.add(record.relative_path)

            index = INDEX_BASE + position
            pairs.append((
                IndexEntry(
                    index=index,
                    relative_path=record.relative_path,
                    summary=record.summary
                ),
                SectionEntry(
                    index=index,
                    relative_path=record.relative_path,
                    detailed_summary=record.detailed_summary,
                    sections=record.sections
                ),
            ))
        return pairs

    def write(
        self,
        collection_root: Path,
        records: Iterable[FileRecord]
    ) -> List[Tuple[IndexEntry, SectionEntry]]:
        """
        Replace a collection's index pair with a new generation.

        Args:
            collection_root: Directory that receives index.jsonl/sections.jsonl
            records: Per-file results in the order they should be numbered

        Returns:
            The (IndexEntry, SectionEntry) pairs that were written

        Raises:
            DuplicatePathError: Before anything is written
        """
        collection_root = Path(collection_root)
        collection_root.mkdir(parents=True, exist_ok=True)

        with self._lock:
            pairs = self.assign(records)

            index_target = collection_root / self.index_filename
            sections_target = collection_root / self.sections_filename
            index_tmp = sections_tmp = None

            try:
                index_tmp = write_temp_file(
                    (serialize(entry) for entry, _ in pairs),
                    collection_root,
                    prefix=f".{self.index_filename}."
                )
                sections_tmp = write_temp_file(
                    (serialize(entry) for _, entry in pairs),
                    collection_root,
                    prefix=f".{self.sections_filename}."
                )

                # sections first: a reader that sees the new index.jsonl
                # always finds the matching sections.jsonl
                os.replace(sections_tmp, sections_target)
                sections_tmp = None
                os.replace(index_tmp, index_target)
                index_tmp = None
                fsync_directory(collection_root)
            finally:
                for leftover in (index_tmp, sections_tmp):
                    if leftover is not None:
                        leftover.unlink(missing_ok=True)

        logger.info(f"Wrote {len(pairs)} entries to {collection_root}")
        return pairs
