"""
CLI commands for building, querying and verifying collection indexes.

Exit codes for build: 0 success, 1 some files failed, 2 fatal error or no
collections.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from loguru import logger

from ...exceptions import DocSearchError
from ...indexing.builder import CollectionBuilder
from ...indexing.segmenter import MarkdownSegmenter
from ...retrieval.loader import IndexCache
from ...retrieval.orchestrator import QueryOrchestrator, StaticRanker
from ...retrieval.scanner import CollectionScanner
from ...schemas.query_models import RankedPick, SectionSelection
from ...summarizers.factory import create_summarizer
from ...utils.logger import setup_logger
from ...validation.integrity import verify_tree

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def emit_json(models) -> None:
    """Print a list of pydantic models as JSON on stdout."""
    click.echo(json.dumps(
        [model.model_dump(mode="json") for model in models],
        indent=2,
        ensure_ascii=False
    ))


def parse_pick(value: str) -> Tuple[str, int]:
    """Parse DIR:N into (collection, index)."""
    collection, _, index = value.rpartition(":")
    if not collection or not index.isdigit():
        raise click.BadParameter(f"expected DIR:N, got {value!r}")
    return collection, int(index)


def parse_section(value: str) -> Tuple[str, int, str]:
    """Parse DIR:N:HEADING into (collection, index, heading)."""
    parts = value.split(":", 2)
    if len(parts) != 3 or not parts[1].isdigit() or not parts[2]:
        raise click.BadParameter(f"expected DIR:N:HEADING, got {value!r}")
    return parts[0], int(parts[1]), parts[2]


@click.group(name="index")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
def index_commands(log_level: Optional[str]):
    """Documentation index commands."""
    setup_logger(level=log_level)


@index_commands.command(name="build")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--collection", "-c", "collections", multiple=True,
              help="Directory (relative to ROOT) to index as a new collection")
@click.option("--heading-depth", type=click.IntRange(2, 3), default=None, help="Split at ## (2) or ##/### (3)")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker pool size (default: CPU count)")
@click.option("--timeout", type=float, default=None, help="Per-file summarizer budget in seconds")
@click.option("--summarizer", type=click.Choice(["extractive", "llm"]), default=None, help="Summarizer adapter")
@click.option("--progress", is_flag=True, help="Show a progress bar")
def build_index(root: Path, collections: Tuple[str, ...], heading_depth: Optional[int],
                workers: Optional[int], timeout: Optional[float], summarizer: Optional[str],
                progress: bool):
    """
    Rebuild every collection under ROOT.

    Existing collections are discovered automatically; --collection adds new ones.
    """
    root = root.resolve()
    targets = [d.path for d in CollectionScanner().scan(root)]

    for name in collections:
        path = (root / name).resolve()
        if not path.is_dir():
            logger.error(f"Collection directory not found: {path}")
            sys.exit(EXIT_FATAL)
        if path not in targets:
            targets.append(path)

    if not targets:
        logger.error(f"No collections under {root}. Use --collection to create one.")
        sys.exit(EXIT_FATAL)

    try:
        builder = CollectionBuilder(
            summarizer=create_summarizer(summarizer),
            segmenter=MarkdownSegmenter(heading_depth=heading_depth),
            max_workers=workers,
            timeout=timeout,
            show_progress=progress
        )
        reports = builder.build_all(targets)
    except DocSearchError as e:
        logger.error(f"Build aborted: {type(e).__name__}: {e}")
        sys.exit(EXIT_FATAL)

    exit_code = EXIT_OK
    for report in reports:
        status = "ok" if report.ok else "FAILED" if not report.written else "partial"
        click.echo(f"{report.collection}: {report.indexed} indexed, {len(report.failures)} failed [{status}]")
        for failure in report.failures:
            click.echo(f"  {failure.relative_path}: {failure.error_type}: {failure.message}")
        if not report.ok:
            exit_code = EXIT_PARTIAL

    sys.exit(exit_code)


@index_commands.command(name="query")
@click.option("--root", required=True, type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Documentation root")
@click.option("--collection", "-c", "collections", multiple=True, help="LOAD: collection to load (relative to root)")
@click.option("--pick", "-p", "picks", multiple=True, help="RESOLVE: DIR:N index pick")
@click.option("--section", "-s", "sections", multiple=True, help="EXTRACT: DIR:N:HEADING section to read")
@click.option("--preview-lines", type=click.IntRange(min=1), default=None, help="DISCOVER: index lines per preview")
def query_index(root: Path, collections: Tuple[str, ...], picks: Tuple[str, ...],
                sections: Tuple[str, ...], preview_lines: Optional[int]):
    """
    Run the retrieval stages by hand and print JSON.

    With no options, DISCOVER. --collection stops after LOAD, --pick after
    RESOLVE, --section after EXTRACT.
    """
    orchestrator = QueryOrchestrator(root, cache=IndexCache())

    try:
        if sections:
            emit_json(orchestrator.extract(_section_selections(orchestrator, sections)))
        elif picks:
            parsed = [parse_pick(value) for value in picks]
            ranked = [RankedPick(collection=Path(c), index=i) for c, i in parsed]
            orchestrator.ranker = StaticRanker(ranked)
            loaded = orchestrator.load(sorted({Path(c) for c, _ in parsed}))
            selected = orchestrator.select("", loaded, max_picks=max(len(ranked), 1))
            emit_json(orchestrator.resolve(selected))
        elif collections:
            emit_json(orchestrator.load([Path(c) for c in collections]))
        else:
            emit_json(orchestrator.discover(preview_lines))
    except DocSearchError as e:
        click.echo(f"{type(e).__name__}: {e}", err=True)
        sys.exit(EXIT_FATAL)


def _section_selections(orchestrator: QueryOrchestrator, values: Tuple[str, ...]) -> List[SectionSelection]:
    parsed = [parse_section(value) for value in values]
    candidates = orchestrator.resolve(RankedPick(collection=Path(c), index=i) for c, i, _ in parsed)

    selections = []
    for (_, _, heading), candidate in zip(parsed, candidates):
        section = candidate.entry.find_section(heading)
        if section is None:
            raise click.BadParameter(f"No section {heading!r} in {candidate.entry.relative_path}")
        selections.append(SectionSelection(
            collection=candidate.collection,
            relative_path=candidate.entry.relative_path,
            section=section
        ))
    return selections


@index_commands.command(name="verify")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--skip-ranges", is_flag=True, help="Skip comparing section windows with file lengths")
def verify_index(root: Path, skip_ranges: bool):
    """Check every collection under ROOT for sync and staleness problems."""
    reports = verify_tree(root, check_ranges=not skip_ranges)
    if not reports:
        logger.error(f"No collections under {root}")
        sys.exit(EXIT_FATAL)

    exit_code = EXIT_OK
    for report in reports:
        click.echo(f"{report.collection}: {report.entries} entries, {len(report.issues)} issues")
        for issue in report.issues:
            where = f"line {issue.line}: " if issue.line is not None else ""
            click.echo(f"  [{issue.kind}] {where}{issue.message}")
        if not report.is_valid:
            exit_code = EXIT_PARTIAL

    sys.exit(exit_code)
