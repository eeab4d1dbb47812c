"""
Collection builder: segment and summarize every file, then write one generation.

Files are processed concurrently in a bounded ThreadPoolExecutor. Per-file
failures (undecodable text, summarizer errors or timeouts) are recorded in the
BuildReport and the file is left out of the generation; they never abort the
batch. Index numbering and the final write go through the single IndexWriter.

Each summarizer call runs on a daemon thread so the per-file deadline can
abandon it; an abandoned call never blocks the calls behind it or the exit of
the process.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, TypeVar

from loguru import logger
from tqdm import tqdm

from doc_search.config import settings
from doc_search.exceptions import DocSearchError, SummarizerError, SummarizerTimeoutError
from doc_search.indexing.segmenter import MarkdownSegmenter, section_text
from doc_search.indexing.writer import IndexWriter
from doc_search.schemas.index_models import BuildReport, FileFailure, FileRecord, Section
from doc_search.summarizers import BaseSummarizer, normalize_summary
from doc_search.utils.file_handler import list_files

T = TypeVar("T")


def run_detached(fn: Callable[..., T], *args) -> "Future[T]":
    """
    Run fn on its own daemon thread and return a Future for its result.

    A call abandoned after a timeout keeps running until the provider's own
    timeout ends it, but it holds no pool slot and does not keep the
    interpreter alive at exit.
    """
    future: "Future[T]" = Future()

    def target():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as e:
            future.set_exception(e)

    threading.Thread(target=target, name="summarize", daemon=True).start()
    return future


class CollectionBuilder:
    """
    Rebuilds the index pair of documentation collections.

    Usage:
        builder = CollectionBuilder(summarizer=ExtractiveSummarizer())
        report = builder.build(Path("docs"))
    """

    def __init__(
        self,
        summarizer: BaseSummarizer,
        segmenter: Optional[MarkdownSegmenter] = None,
        writer: Optional[IndexWriter] = None,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
        include_patterns: Optional[List[str]] = None,
        show_progress: bool = False
    ):
        """
        Args:
            summarizer: Summarizer adapter used for files and sections
            segmenter: Markdown segmenter (default uses settings.heading_depth)
            writer: Index writer shared across collections
            max_workers: Worker pool size (default CPU count)
            timeout: Per-file summarizer budget in seconds
            include_patterns: File name globs to index
            show_progress: Show a tqdm progress bar
        """
        self.summarizer = summarizer
        self.segmenter = segmenter or MarkdownSegmenter()
        self.writer = writer or IndexWriter()
        self.max_workers = max_workers or settings.resolved_workers()
        self.timeout = timeout or settings.summarizer_timeout
        self.include_patterns = include_patterns or list(settings.include_patterns)
        self.show_progress = show_progress

    def discover_files(self, collection_root: Path, exclude_dirs: Optional[Set[Path]] = None) -> List[Path]:
        """
        List documentation files of a collection.

        Nested directories holding their own index pair belong to a separate
        collection and are skipped.
        """
        collection_root = Path(collection_root).resolve()
        excluded = {Path(d).resolve() for d in (exclude_dirs or set())}
        excluded.discard(collection_root)

        for candidate in collection_root.rglob(self.writer.index_filename):
            if candidate.parent != collection_root:
                excluded.add(candidate.parent.resolve())

        return list_files(collection_root, self.include_patterns, exclude_dirs=excluded)

    def build(self, collection_root: Path, exclude_dirs: Optional[Set[Path]] = None) -> BuildReport:
        """
        Rebuild one collection.

        Args:
            collection_root: Directory whose files are indexed
            exclude_dirs: Extra directories to leave out (other collections)

        Returns:
            BuildReport with counts and per-file failures

        Raises:
            DuplicatePathError: Structural failure; nothing is written
        """
        started = time.monotonic()
        collection_root = Path(collection_root).resolve()
        files = self.discover_files(collection_root, exclude_dirs)

        logger.info(
            f"Building {collection_root}: {len(files)} files, "
            f"{self.max_workers} workers, summarizer={self.summarizer.name}"
        )

        records: List[FileRecord] = []
        failures: List[FileFailure] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="build") as executor:
            future_to_path: Dict[Future, str] = {
                executor.submit(self._process_file, collection_root, path):
                    path.relative_to(collection_root).as_posix()
                for path in files
            }

            with tqdm(total=len(files), desc=f"Indexing {collection_root.name}", unit="file",
                      disable=not self.show_progress) as pbar:
                for future in as_completed(future_to_path):
                    relative_path = future_to_path[future]
                    try:
                        records.append(future.result())
                    except (DocSearchError, OSError) as e:
                        logger.warning(f"Skipping {relative_path}: {type(e).__name__}: {e}")
                        failures.append(FileFailure(
                            relative_path=relative_path,
                            error_type=type(e).__name__,
                            message=str(e)
                        ))
                    pbar.update(1)

        report = BuildReport(collection=collection_root, failures=sorted(failures, key=lambda f: f.relative_path))

        if files and not records:
            logger.error(f"All {len(files)} files failed in {collection_root}; keeping previous generation")
        else:
            records.sort(key=lambda r: r.relative_path)
            self.writer.write(collection_root, records)
            report.indexed = len(records)
            report.written = True

        report.duration_seconds = round(time.monotonic() - started, 3)
        if report.ok:
            logger.info(f"Indexed {report.indexed} files in {collection_root} ({report.duration_seconds}s)")
        else:
            logger.warning(
                f"Indexed {report.indexed} files in {collection_root} with "
                f"{len(report.failures)} failures"
            )
        return report

    def build_all(self, collection_roots: Iterable[Path]) -> List[BuildReport]:
        """
        Rebuild several collections, excluding each from its ancestors.
        """
        roots = [Path(root).resolve() for root in collection_roots]
        all_roots = set(roots)
        return [self.build(root, exclude_dirs=all_roots - {root}) for root in roots]

    def _process_file(self, collection_root: Path, path: Path) -> FileRecord:
        """Segment and summarize one file within the per-file time budget"""
        deadline = time.monotonic() + self.timeout
        relative_path = path.relative_to(collection_root).as_posix()

        lines, spans = self.segmenter.segment_file(path)
        text = "".join(lines)

        terse, detailed = self._call(deadline, relative_path, self.summarizer.summarize, text)

        sections = []
        for span in spans:
            summary = self._call(
                deadline, relative_path,
                self.summarizer.summarize_section, section_text(lines, span)
            )
            sections.append(Section(
                heading=span.heading,
                level=span.level,
                offset=span.offset,
                limit=span.limit,
                summary=normalize_summary(summary, settings.summary_max_chars)
            ))

        return FileRecord(
            relative_path=relative_path,
            summary=normalize_summary(terse, settings.summary_max_chars),
            detailed_summary=detailed.strip(),
            sections=sections
        )

    def _call(
        self,
        deadline: float,
        relative_path: str,
        fn: Callable[..., T],
        *args
    ) -> T:
        """Run a summarizer call with the remaining file budget"""
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise SummarizerTimeoutError(f"{relative_path}: exceeded {self.timeout}s budget")

        future = run_detached(fn, *args)
        try:
            return future.result(timeout=remaining)
        except FutureTimeout as e:
            raise SummarizerTimeoutError(f"{relative_path}: exceeded {self.timeout}s budget") from e
        except DocSearchError:
            raise
        except Exception as e:
            raise SummarizerError(f"{relative_path}: {type(e).__name__}: {e}") from e
