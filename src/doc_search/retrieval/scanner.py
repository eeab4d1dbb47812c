"""
Collection discovery across a documentation root.

A collection is any directory holding both index files. Results are ordered
shallowest-first so primary docs come before vendored docs nested deeper in
the tree. Previews read only the head of each index.jsonl.
"""

import os
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from doc_search.config import settings
from doc_search.exceptions import CollectionNotFoundError, ParseError
from doc_search.schemas.index_models import IndexEntry
from doc_search.schemas.query_models import CollectionDescriptor, CollectionPreview
from doc_search.utils.file_handler import parse_json_line, read_head


class CollectionScanner:
    """
    Finds collections and previews their scope.

    Usage:
        scanner = CollectionScanner()
        previews = scanner.scan_with_previews(Path("docs"))
    """

    def __init__(
        self,
        index_filename: Optional[str] = None,
        sections_filename: Optional[str] = None
    ):
        self.index_filename = index_filename or settings.index_filename
        self.sections_filename = sections_filename or settings.sections_filename

    def describe(self, root: Path, collection_path: Path) -> CollectionDescriptor:
        """Build a descriptor for a collection directory below root"""
        relative = collection_path.relative_to(root)
        return CollectionDescriptor(
            path=collection_path,
            relative_path=relative.as_posix(),
            depth=len(relative.parts),
            index_file=collection_path / self.index_filename,
            sections_file=collection_path / self.sections_filename
        )

    def scan(self, root: Path) -> List[CollectionDescriptor]:
        """
        Recursively find every collection under root.

        Hidden directories are skipped. Scanning continues below a found
        collection so nested collections are reported too.

        Raises:
            CollectionNotFoundError: If root is not a directory
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise CollectionNotFoundError(f"Documentation root not found: {root}")

        found = []
        for current, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            names = set(filenames)
            if self.index_filename in names and self.sections_filename in names:
                found.append(self.describe(root, Path(current)))

        found.sort(key=lambda d: (d.depth, d.relative_path))
        logger.info(f"Discovered {len(found)} collections under {root}")
        return found

    def preview(self, descriptor: CollectionDescriptor, k: Optional[int] = None) -> CollectionPreview:
        """
        Read the first k index lines for a cheap scope check.

        Malformed lines are logged and skipped; a file that vanished since
        the scan raises CollectionNotFoundError.
        """
        k = k or settings.preview_lines
        try:
            head = read_head(descriptor.index_file, k)
        except FileNotFoundError as e:
            raise CollectionNotFoundError(f"Index vanished: {descriptor.index_file}") from e

        sample = []
        for position, line in enumerate(head):
            try:
                sample.append(IndexEntry(**parse_json_line(line, descriptor.index_file, position)))
            except (ParseError, ValidationError) as e:
                logger.warning(f"Skipping preview line {position} of {descriptor.index_file}: {e}")

        return CollectionPreview(collection=descriptor, sample=sample)

    def scan_with_previews(self, root: Path, k: Optional[int] = None) -> List[CollectionPreview]:
        """Scan root and preview every collection, shallowest first"""
        return [self.preview(descriptor, k) for descriptor in self.scan(root)]
