"""
Five-stage query workflow over documentation collections.

DISCOVER -> LOAD -> SELECT -> RESOLVE -> EXTRACT

Every stage is a separate call, so a caller can stop after any of them.
Irrelevant collections should be dropped after DISCOVER because LOAD reads
each chosen index in full. SELECT is delegated to an injected Ranker; this
module does no relevance scoring.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from doc_search.config import settings
from doc_search.exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    IndexOutOfRangeError,
)
from doc_search.retrieval.extractor import ContentExtractor
from doc_search.retrieval.loader import IndexCache, IndexLoader
from doc_search.retrieval.resolver import SectionResolver
from doc_search.retrieval.scanner import CollectionScanner
from doc_search.schemas.index_models import Section
from doc_search.schemas.query_models import (
    CandidateEntry,
    CollectionPreview,
    ContentBundle,
    LoadedCollection,
    RankedPick,
    RankRequest,
    RankResponse,
    ResolvedCandidate,
    SectionSelection,
)


class Ranker(ABC):
    """External candidate selection (an LLM, a human, a heuristic).

    Receives the query and every loaded entry; returns at most
    ``request.max_picks`` (collection, index) picks.
    """

    @abstractmethod
    def rank(self, request: RankRequest) -> RankResponse:
        pass


class StaticRanker(Ranker):
    """Returns picks fixed in advance, ignoring the query."""

    def __init__(self, picks: Iterable[RankedPick]):
        self.picks = list(picks)

    def rank(self, request: RankRequest) -> RankResponse:
        return RankResponse(picks=self.picks)


CollectionFilter = Callable[[List[CollectionPreview]], Iterable[Path]]
SectionFilter = Callable[[ResolvedCandidate], Iterable[Section]]


class QueryOrchestrator:
    """
    Drives the retrieval stages for one documentation root.

    Usage:
        orchestrator = QueryOrchestrator(Path("docs"), ranker=my_ranker, cache=IndexCache())
        previews = orchestrator.discover()
        loaded = orchestrator.load([p.collection.path for p in previews[:2]])
        picks = orchestrator.select("how do I configure retries", loaded)
        candidates = orchestrator.resolve(picks)
        bundles = orchestrator.extract(orchestrator.selections(candidates))
    """

    def __init__(
        self,
        root: Path,
        ranker: Optional[Ranker] = None,
        cache: Optional[IndexCache] = None,
        scanner: Optional[CollectionScanner] = None,
        resolver: Optional[SectionResolver] = None,
        extractor: Optional[ContentExtractor] = None,
        max_picks: Optional[int] = None
    ):
        """
        Args:
            root: Documentation root scanned at DISCOVER
            ranker: Candidate selection strategy used at SELECT
            cache: Caller-owned cache of loaded indexes (None disables caching)
            scanner: Collection scanner
            resolver: Section resolver
            extractor: Content extractor
            max_picks: Upper bound on picks accepted from the ranker
        """
        self.root = Path(root).resolve()
        self.ranker = ranker
        self.cache = cache
        self.scanner = scanner or CollectionScanner()
        self.loader = IndexLoader(
            cache=cache,
            index_filename=self.scanner.index_filename,
            sections_filename=self.scanner.sections_filename
        )
        self.resolver = resolver or SectionResolver(
            index_filename=self.scanner.index_filename,
            sections_filename=self.scanner.sections_filename
        )
        self.extractor = extractor or ContentExtractor()
        self.max_picks = max_picks or settings.max_picks

    # Stage 1
    def discover(self, preview_lines: Optional[int] = None) -> List[CollectionPreview]:
        """Find collections under root with a cheap preview of each"""
        previews = self.scanner.scan_with_previews(self.root, preview_lines)
        logger.info(f"DISCOVER: {len(previews)} collections")
        return previews

    # Stage 2
    def load(self, collection_paths: Iterable[Path]) -> List[LoadedCollection]:
        """
        Eagerly load the full index of each chosen collection.

        Relative paths are taken relative to root.
        """
        loaded = [self.loader.load(self._absolute(path)) for path in collection_paths]
        logger.info(f"LOAD: {len(loaded)} collections, {sum(c.size for c in loaded)} entries")
        return loaded

    # Stage 3
    def select(
        self,
        query: str,
        loaded: Sequence[LoadedCollection],
        max_picks: Optional[int] = None
    ) -> List[RankedPick]:
        """
        Hand loaded entries to the ranker and validate its picks.

        Raises:
            ConfigurationError: No ranker configured
            CollectionNotFoundError: A pick names a collection that was not loaded
            IndexOutOfRangeError: A pick's index is outside its collection
        """
        if self.ranker is None:
            raise ConfigurationError("No ranker configured for SELECT")

        max_picks = max_picks or self.max_picks
        by_path: Dict[Path, LoadedCollection] = {c.path: c for c in loaded}
        request = RankRequest(
            query=query,
            entries=[
                CandidateEntry(
                    collection=collection.path,
                    index=entry.index,
                    relative_path=entry.relative_path,
                    summary=entry.summary
                )
                for collection in loaded
                for entry in collection.entries
            ],
            max_picks=max_picks
        )

        picks = self.ranker.rank(request).picks
        if len(picks) > max_picks:
            logger.warning(f"Ranker returned {len(picks)} picks; keeping first {max_picks}")
            picks = picks[:max_picks]

        validated = []
        for pick in picks:
            collection_path = self._absolute(pick.collection)
            collection = by_path.get(collection_path)
            if collection is None:
                raise CollectionNotFoundError(f"Pick refers to a collection that was not loaded: {pick.collection}")
            if collection.entry(pick.index) is None:
                raise IndexOutOfRangeError(
                    f"Pick index {pick.index} out of range for {collection_path} ({collection.size} entries)"
                )
            validated.append(pick.model_copy(update={"collection": collection_path}))

        logger.info(f"SELECT: {len(validated)} picks for {query!r}")
        return validated

    # Stage 4
    def resolve(self, picks: Iterable[RankedPick]) -> List[ResolvedCandidate]:
        """Resolve picks to their sections, one pass per collection"""
        grouped: Dict[Path, List[int]] = {}
        order = []
        for pick in picks:
            collection_path = self._absolute(pick.collection)
            grouped.setdefault(collection_path, []).append(pick.index)
            order.append((collection_path, pick.index))

        entries = {}
        for collection_path, indexes in grouped.items():
            for entry in self.resolver.resolve_many(collection_path, indexes):
                entries[(collection_path, entry.index)] = entry

        candidates = [
            ResolvedCandidate(collection=collection_path, entry=entries[(collection_path, index)])
            for collection_path, index in order
        ]
        logger.info(f"RESOLVE: {len(candidates)} candidates")
        return candidates

    @staticmethod
    def selections(
        candidates: Iterable[ResolvedCandidate],
        section_filter: Optional[SectionFilter] = None
    ) -> List[SectionSelection]:
        """Turn candidates into section selections, optionally narrowed per candidate"""
        chosen = []
        for candidate in candidates:
            sections = section_filter(candidate) if section_filter else candidate.entry.sections
            for section in sections:
                chosen.append(SectionSelection(
                    collection=candidate.collection,
                    relative_path=candidate.entry.relative_path,
                    section=section
                ))
        return chosen

    # Stage 5
    def extract(self, selections: Iterable[SectionSelection]) -> List[ContentBundle]:
        """Read the exact text of each selected section"""
        bundles = []
        for selection in selections:
            section = selection.section
            text = self.extractor.extract(
                selection.collection,
                selection.relative_path,
                section.offset,
                section.limit
            )
            bundles.append(ContentBundle(
                collection=selection.collection,
                relative_path=selection.relative_path,
                heading=section.heading,
                offset=section.offset,
                limit=section.limit,
                text=text
            ))
        logger.info(f"EXTRACT: {len(bundles)} sections, {sum(len(b.text) for b in bundles)} chars")
        return bundles

    def run(
        self,
        query: str,
        collection_filter: Optional[CollectionFilter] = None,
        section_filter: Optional[SectionFilter] = None,
        max_picks: Optional[int] = None
    ) -> List[ContentBundle]:
        """
        Run all five stages.

        Args:
            query: Question passed to the ranker
            collection_filter: Narrows DISCOVER results to the collections to load
            section_filter: Narrows each resolved candidate to the sections to read
            max_picks: Override for the pick bound

        Returns:
            Extracted bundles; empty when any narrowing step keeps nothing
        """
        previews = self.discover()
        if collection_filter:
            chosen = list(collection_filter(previews))
        else:
            chosen = [preview.collection.path for preview in previews]
        if not chosen:
            logger.info("No collections selected after DISCOVER")
            return []

        loaded = self.load(chosen)
        picks = self.select(query, loaded, max_picks)
        if not picks:
            logger.info("Ranker selected no candidates")
            return []

        selections = self.selections(self.resolve(picks), section_filter)
        if not selections:
            logger.info("No sections selected after RESOLVE")
            return []

        return self.extract(selections)

    def _absolute(self, path: Path) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return path.resolve()
