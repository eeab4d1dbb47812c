"""
Unit tests for the five-stage QueryOrchestrator.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from doc_search.exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    IndexOutOfRangeError,
)
from doc_search.retrieval.loader import IndexCache
from doc_search.retrieval.orchestrator import QueryOrchestrator, Ranker, StaticRanker
from doc_search.schemas.query_models import RankedPick, RankResponse


def pick(collection, index):
    return RankedPick(collection=Path(collection), index=index)


class TestStages:
    """Tests for individual stages."""

    def test_discover(self, built_root):
        previews = QueryOrchestrator(built_root).discover()

        assert [p.collection.relative_path for p in previews] == ["guide", "vendor/libs/acme"]

    def test_load_relative_paths(self, built_root, guide):
        loaded = QueryOrchestrator(built_root).load([Path("guide")])

        assert [c.path for c in loaded] == [guide]

    def test_load_uses_shared_cache(self, built_root):
        cache = IndexCache()
        orchestrator = QueryOrchestrator(built_root, cache=cache)

        orchestrator.load(["guide"])
        orchestrator.load(["guide"])

        assert cache.hits == 1

    def test_select_passes_all_entries_to_ranker(self, built_root, guide):
        ranker = Mock(spec=Ranker)
        ranker.rank.return_value = RankResponse(picks=[pick("guide", 1)])
        orchestrator = QueryOrchestrator(built_root, ranker=ranker)
        loaded = orchestrator.load(["guide", "vendor/libs/acme"])

        picks = orchestrator.select("configure retries", loaded, max_picks=3)

        request = ranker.rank.call_args[0][0]
        assert request.query == "configure retries"
        assert request.max_picks == 3
        assert [e.relative_path for e in request.entries] == ["reference/api.md", "setup.md", "readme.md"]
        assert picks == [RankedPick(collection=guide, index=1)]

    def test_select_truncates_to_max_picks(self, built_root):
        ranker = StaticRanker([pick("guide", 0), pick("guide", 1), pick("guide", 0)])
        orchestrator = QueryOrchestrator(built_root, ranker=ranker)
        loaded = orchestrator.load(["guide"])

        assert len(orchestrator.select("q", loaded, max_picks=2)) == 2

    def test_select_rejects_unloaded_collection(self, built_root):
        orchestrator = QueryOrchestrator(built_root, ranker=StaticRanker([pick("vendor/libs/acme", 0)]))
        loaded = orchestrator.load(["guide"])

        with pytest.raises(CollectionNotFoundError):
            orchestrator.select("q", loaded)

    def test_select_rejects_out_of_range_index(self, built_root):
        orchestrator = QueryOrchestrator(built_root, ranker=StaticRanker([pick("guide", 5)]))
        loaded = orchestrator.load(["guide"])

        with pytest.raises(IndexOutOfRangeError):
            orchestrator.select("q", loaded)

    def test_select_without_ranker(self, built_root):
        orchestrator = QueryOrchestrator(built_root)

        with pytest.raises(ConfigurationError):
            orchestrator.select("q", orchestrator.load(["guide"]))

    def test_resolve_preserves_pick_order_across_collections(self, built_root):
        orchestrator = QueryOrchestrator(built_root)

        candidates = orchestrator.resolve([
            pick("guide", 1),
            pick("vendor/libs/acme", 0),
            pick("guide", 0),
        ])

        assert [(c.collection.name, c.entry.relative_path) for c in candidates] == [
            ("guide", "setup.md"),
            ("acme", "readme.md"),
            ("guide", "reference/api.md"),
        ]

    def test_selections_with_filter(self, built_root):
        orchestrator = QueryOrchestrator(built_root)
        candidates = orchestrator.resolve([pick("guide", 1)])

        everything = orchestrator.selections(candidates)
        narrowed = orchestrator.selections(
            candidates,
            lambda c: [s for s in c.entry.sections if s.heading == "Installation"]
        )

        assert len(everything) == 3
        assert [s.section.heading for s in narrowed] == ["Installation"]

    def test_extract_bundles(self, built_root, guide):
        orchestrator = QueryOrchestrator(built_root)
        candidates = orchestrator.resolve([pick("vendor/libs/acme", 0)])

        bundles = orchestrator.extract(orchestrator.selections(candidates))

        assert [(b.heading, b.offset, b.limit) for b in bundles] == [("Acme", 1, 2), ("Usage", 3, 3)]
        assert bundles[1].text == "## Usage\n\nCall acme.run().\n"
        assert bundles[1].relative_path == "readme.md"


class TestRun:
    """Tests for the full workflow."""

    def test_run_end_to_end(self, built_root):
        orchestrator = QueryOrchestrator(
            built_root,
            ranker=StaticRanker([pick("guide", 1)]),
            cache=IndexCache()
        )

        bundles = orchestrator.run(
            "how do I set the API key",
            collection_filter=lambda previews: [p.collection.path for p in previews if p.collection.depth == 1],
            section_filter=lambda c: [c.entry.find_section("Configuration")]
        )

        assert len(bundles) == 1
        assert bundles[0].text.startswith("## Configuration\n")
        assert "### Advanced" in bundles[0].text

    def test_run_stops_when_no_collection_chosen(self, built_root):
        ranker = Mock(spec=Ranker)
        orchestrator = QueryOrchestrator(built_root, ranker=ranker)

        assert orchestrator.run("q", collection_filter=lambda previews: []) == []
        ranker.rank.assert_not_called()

    def test_run_stops_when_ranker_picks_nothing(self, built_root):
        orchestrator = QueryOrchestrator(built_root, ranker=StaticRanker([]))

        assert orchestrator.run("q") == []

    def test_run_stops_when_no_section_chosen(self, built_root):
        extractor = Mock()
        orchestrator = QueryOrchestrator(
            built_root,
            ranker=StaticRanker([pick("guide", 0)]),
            extractor=extractor
        )

        assert orchestrator.run("q", section_filter=lambda c: []) == []
        extractor.extract.assert_not_called()
