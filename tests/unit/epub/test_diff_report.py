"""Unit tests for the container comparison report."""

from epub_scribe.core.epub.archive import ArchiveEntry, EpubArchive
from epub_scribe.core.epub.diff_report import diff_containers


def archive(**entries):
    return EpubArchive([ArchiveEntry(name.replace("__", "/"), data) for name, data in entries.items()])


class TestDiffContainers:
    """Test name and size comparisons."""

    def test_identical_containers_are_clean(self):
        original = archive(mimetype=b"application/epub+zip", a=b"x" * 500)

        report = diff_containers(original, original)

        assert report.is_clean
        assert "No differences found." in report.to_text()

    def test_missing_and_extra(self):
        original = archive(mimetype=b"m", a=b"1", b=b"2")
        output = archive(mimetype=b"m", b=b"2", c=b"3")

        report = diff_containers(original, output)

        assert report.missing == ["a"]
        assert report.extra == ["c"]

    def test_threshold_is_strict(self):
        original = archive(small=b"a" * 1000, big=b"a" * 1000)
        output = archive(small=b"a" * 1100, big=b"a" * 1101)

        report = diff_containers(original, output, threshold=100)

        assert [change.entry for change in report.size_changes] == ["big"]
        change = report.size_changes[0]
        assert change.original_size == 1000
        assert change.translated_size == 1101
        assert change.delta == 101

    def test_shrinking_reported(self):
        report = diff_containers(archive(a=b"a" * 500), archive(a=b"a" * 100))
        assert report.size_changes[0].delta == -400

    def test_lengths_are_characters_not_bytes(self):
        """Multi-byte text of the same character count is not a change."""
        original = archive(a=("e" * 300).encode("utf-8"))
        output = archive(a=("é" * 300).encode("utf-8"))

        assert diff_containers(original, output).size_changes == []

    def test_undecodable_entries_listed(self):
        original = archive(img=b"\xff\xd8\xff\xe0" * 50, text=b"hello")
        output = archive(img=b"\xff\xd8\xff\xe0" * 50, text=b"hello")

        report = diff_containers(original, output)

        assert report.uncomparable == ["img"]
        assert "Could not compare (1):" in report.to_text()

    def test_report_text(self):
        original = archive(a=b"1", b=b"x" * 10)
        output = archive(b=b"x" * 300, c=b"3")

        text = diff_containers(original, output).to_text()

        assert "Missing entries (1):" in text
        assert "  - a" in text
        assert "Extra entries (1):" in text
        assert "  + c" in text
        assert "b: 10 -> 300 (+290 chars)" in text
