"""
Unit tests for collection integrity verification.
"""

from doc_search.indexing.writer import IndexWriter
from doc_search.schemas.index_models import FileRecord, Section
from doc_search.validation.integrity import verify_collection, verify_tree


def kinds(report):
    return [issue.kind for issue in report.issues]


class TestVerifyCollection:
    """Tests for verify_collection()."""

    def test_fresh_build_is_valid(self, guide):
        report = verify_collection(guide)

        assert report.is_valid
        assert report.entries == 2

    def test_missing_sections_file(self, guide, index_pair):
        index_pair[1].unlink()

        assert kinds(verify_collection(guide)) == ["missing"]

    def test_count_mismatch(self, guide, index_pair):
        first = index_pair[1].read_text(encoding="utf-8").splitlines(keepends=True)[0]
        index_pair[1].write_text(first, encoding="utf-8")

        assert "count" in kinds(verify_collection(guide))

    def test_swapped_lines(self, guide, index_pair):
        lines = index_pair[1].read_text(encoding="utf-8").splitlines(keepends=True)
        index_pair[1].write_text("".join(reversed(lines)), encoding="utf-8")

        report = verify_collection(guide)

        assert set(kinds(report)) == {"sync"}
        assert {issue.line for issue in report.issues} == {0, 1}

    def test_corrupt_json(self, guide, index_pair):
        index_pair[0].write_text("{nope\n", encoding="utf-8")

        assert kinds(verify_collection(guide)) == ["parse"]

    def test_shrunk_file_is_stale(self, guide):
        (guide / "setup.md").write_text("# Setup Guide\n", encoding="utf-8")

        report = verify_collection(guide)

        assert kinds(report) == ["stale"]
        assert report.issues[0].line == 1

    def test_grown_file_is_stale(self, guide):
        with open(guide / "setup.md", "a", encoding="utf-8") as f:
            f.write("\nAppended after the build.\n")

        assert kinds(verify_collection(guide)) == ["stale"]

    def test_skip_ranges(self, guide):
        (guide / "setup.md").write_text("# Setup Guide\n", encoding="utf-8")

        assert verify_collection(guide, check_ranges=False).is_valid

    def test_deleted_file(self, guide):
        (guide / "reference" / "api.md").unlink()

        report = verify_collection(guide)

        assert kinds(report) == ["stale"]
        assert report.issues[0].line == 0

    def test_gap_between_sections(self, tmp_path):
        (tmp_path / "a.md").write_text("".join(f"line {n}\n" for n in range(1, 9)), encoding="utf-8")
        IndexWriter().write(tmp_path, [FileRecord(
            relative_path="a.md",
            summary="a",
            sections=[
                Section(heading="A", level=2, offset=1, limit=2),
                Section(heading="B", level=2, offset=5, limit=4),
            ]
        )])

        assert kinds(verify_collection(tmp_path)) == ["tiling"]

    def test_path_outside_collection(self, tmp_path):
        collection = tmp_path / "docs"
        IndexWriter().write(collection, [FileRecord(relative_path="../secret.md", summary="x")])

        assert kinds(verify_collection(collection)) == ["path"]

    def test_line_separator_inside_paragraph(self, tmp_path, builder):
        (tmp_path / "a.md").write_text("## A\nfoo\u2028bar\n## B\nx\n", encoding="utf-8")
        builder.build(tmp_path)

        assert verify_collection(tmp_path).is_valid


class TestVerifyTree:
    """Tests for verify_tree()."""

    def test_every_collection_reported(self, built_root):
        reports = verify_tree(built_root)

        assert [r.collection.name for r in reports] == ["guide", "acme"]
        assert all(r.is_valid for r in reports)
