"""
Full index loading with an explicit, caller-owned cache.

LOAD is the only eager stage: the whole index.jsonl of a collection is read
into memory. The loader refuses a collection whose pair is incomplete.

The writer renames sections.jsonl and then index.jsonl, so a read can land
between the two renames and see new sections next to the old index. Such a
read is repeated a few times; a mismatch that outlasts every attempt is
corruption and is raised.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

import tenacity
from loguru import logger
from pydantic import ValidationError

from doc_search.config import settings
from doc_search.exceptions import CollectionNotFoundError, ParseError, SyncMismatchError
from doc_search.schemas.index_models import INDEX_BASE, IndexEntry
from doc_search.schemas.query_models import LoadedCollection
from doc_search.utils.file_handler import count_lines, iter_jsonl


Fingerprint = Tuple[int, int, int]


def fingerprint(path: Path) -> Fingerprint:
    """(st_mtime_ns, st_size, st_ino) identifying one generation of a file"""
    stat = os.stat(path)
    return stat.st_mtime_ns, stat.st_size, stat.st_ino


def log_pair_retry(retry_state: tenacity.RetryCallState) -> None:
    """Log a read that saw the index pair mid-swap."""
    exception = retry_state.outcome.exception()
    logger.debug(
        f"Index pair read attempt {retry_state.attempt_number} inconsistent, retrying: "
        f"{type(exception).__name__}: {exception}"
    )


def pair_retrying(attempts: Optional[int] = None, wait: Optional[float] = None) -> tenacity.Retrying:
    """
    Retry policy for reads of an index pair.

    Args:
        attempts: Total reads before giving up (default settings.read_retry_attempts)
        wait: Seconds between reads (default settings.read_retry_wait)
    """
    return tenacity.Retrying(
        retry=tenacity.retry_if_exception_type((CollectionNotFoundError, SyncMismatchError)),
        stop=tenacity.stop_after_attempt(attempts or settings.read_retry_attempts),
        wait=tenacity.wait_fixed(settings.read_retry_wait if wait is None else wait),
        before_sleep=log_pair_retry,
        reraise=True
    )


class IndexCache:
    """
    Loaded collections keyed by resolved path.

    Owned by the caller and passed into the loader or orchestrator, so
    separate sessions and test runs never share state. An entry is dropped
    when index.jsonl has been replaced since it was loaded.
    """

    def __init__(self):
        self._entries: Dict[Path, LoadedCollection] = {}
        self.hits = 0
        self.misses = 0

    def get(self, collection_path: Path, index_file: Path) -> Optional[LoadedCollection]:
        key = Path(collection_path).resolve()
        cached = self._entries.get(key)
        if cached is None:
            self.misses += 1
            return None

        try:
            current = fingerprint(index_file)
        except FileNotFoundError:
            current = None
        if current != cached.fingerprint:
            logger.debug(f"Cache entry stale for {key}")
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        return cached

    def put(self, collection: LoadedCollection):
        self._entries[Path(collection.path).resolve()] = collection

    def invalidate(self, collection_path: Path) -> bool:
        """Drop one collection; returns True if it was cached"""
        return self._entries.pop(Path(collection_path).resolve(), None) is not None

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, collection_path) -> bool:
        return Path(collection_path).resolve() in self._entries


class IndexLoader:
    """
    Loads one collection's index.jsonl into an ordered list.

    Usage:
        loader = IndexLoader(cache=IndexCache())
        collection = loader.load(Path("docs"))
    """

    def __init__(
        self,
        cache: Optional[IndexCache] = None,
        index_filename: Optional[str] = None,
        sections_filename: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        retry_wait: Optional[float] = None
    ):
        self.cache = cache
        self.index_filename = index_filename or settings.index_filename
        self.sections_filename = sections_filename or settings.sections_filename
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait

    def load(self, collection_path: Path) -> LoadedCollection:
        """
        Load every IndexEntry of a collection.

        Raises:
            CollectionNotFoundError: Either file is missing, or the pair has
                different line counts on every attempt (interrupted rebuild)
            ParseError: A line is not a valid entry
            SyncMismatchError: An entry's index differs from its line position
        """
        collection_path = Path(collection_path).resolve()
        index_file = collection_path / self.index_filename

        if self.cache is not None:
            cached = self.cache.get(collection_path, index_file)
            if cached is not None:
                logger.debug(f"Cache hit: {collection_path}")
                return cached

        retrying = pair_retrying(self.retry_attempts, self.retry_wait)
        collection = retrying(self._read_pair, collection_path)

        if self.cache is not None:
            self.cache.put(collection)

        logger.info(f"Loaded {collection.size} entries from {collection_path}")
        return collection

    def _read_pair(self, collection_path: Path) -> LoadedCollection:
        """One read of index.jsonl checked against the sections.jsonl line count"""
        index_file = collection_path / self.index_filename
        sections_file = collection_path / self.sections_filename

        try:
            before = fingerprint(index_file)
            entries = [
                self._entry(record, index_file, position)
                for position, record in iter_jsonl(index_file)
            ]
            sections_count = count_lines(sections_file)
        except FileNotFoundError as e:
            raise CollectionNotFoundError(
                f"Collection files missing in {collection_path}: {e.filename}"
            ) from e

        if len(entries) != sections_count:
            raise CollectionNotFoundError(
                f"Incomplete collection {collection_path}: {len(entries)} index lines, "
                f"{sections_count} section lines"
            )

        return LoadedCollection(path=collection_path, entries=entries, fingerprint=before)

    @staticmethod
    def _entry(record: dict, index_file: Path, position: int) -> IndexEntry:
        try:
            entry = IndexEntry(**record)
        except ValidationError as e:
            raise ParseError(f"Invalid entry in {index_file} line {position}: {e}") from e
        if entry.index != INDEX_BASE + position:
            raise SyncMismatchError(
                f"{index_file} line {position} carries index {entry.index}"
            )
        return entry
