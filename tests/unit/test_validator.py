# ABOUTME: Unit tests for the per-book validation state machine.
# ABOUTME: Covers state progression, lookup failures, match issues, page checks, and archive errors.

import zipfile
from pathlib import Path

import pytest

from cbzcheck.config import CheckerConfig, PagePolicy
from cbzcheck.core.issues import IssueKind
from cbzcheck.core.validator import BookValidator, ValidationState, validate_books
from cbzcheck.formats.cbz import ArchiveReadError, PageEntry
from cbzcheck.metadata.types import Candidate
from tests.fixtures.builders import (
    ZIP_EPOCH_TUPLE,
    FakeProvider,
    corrupt_entry,
    make_image,
    mark_entry_encrypted,
    write_cbz,
)


def _kinds(report) -> list[IssueKind]:
    return [issue.kind for issue in report.issues]


def _pages(*widths: int) -> list[PageEntry]:
    return [
        PageEntry(name=f"{i:03d}.png", data=make_image(width), timestamp=None)
        for i, width in enumerate(widths, start=1)
    ]


def _broken_pages():
    yield from _pages(1000)
    raise ArchiveReadError("failed to read 002.png: Bad CRC-32")


class TestStates:
    """Tests for state progression."""

    def test_clean_book_ends_done(self, cbz_factory, series_candidate: Candidate) -> None:
        validator = BookValidator(FakeProvider([series_candidate]))
        report = validator.validate(cbz_factory("Series-01-2010-Smith.cbz"))
        assert report.state is ValidationState.DONE
        assert report.issues == []
        assert report.page_count == 2
        assert report.source == series_candidate.source

    def test_query_uses_search_title_and_volume(self, series_candidate: Candidate) -> None:
        provider = FakeProvider([series_candidate])
        BookValidator(provider).check_book("One-Piece-03-2000-Oda.cbz", [])
        assert provider.queries == [("One Piece", 3)]

    def test_malformed_name_fails_before_lookup(self) -> None:
        provider = FakeProvider()
        report = BookValidator(provider).check_book("random file.cbz", _pages(1000))
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.MALFORMED_NAME]
        assert provider.queries == []

    def test_volume_overflow_fails(self) -> None:
        provider = FakeProvider()
        report = BookValidator(provider).check_book("Akira T65536 (Otomo) (1991).cbz", [])
        assert report.failed
        assert _kinds(report) == [IssueKind.COUNT_OVERFLOW]
        assert provider.queries == []


class TestLookup:
    """Tests for lookup and match outcomes."""

    def test_resolution_failure_fails_book(self, failing_provider: FakeProvider) -> None:
        report = BookValidator(failing_provider).check_book("Series-01-2010-Smith.cbz", _pages(1000))
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.RESOLUTION_FAILED]
        assert "timed out" in report.issues[0].detail
        assert report.page_count == 0

    def test_keep_going_still_checks_pages(self, failing_provider: FakeProvider) -> None:
        validator = BookValidator(failing_provider, CheckerConfig(keep_going=True))
        report = validator.check_book("Series-01-2010-Smith [Digital-1000].cbz", _pages(1000, 1300))
        assert report.state is ValidationState.DONE
        assert _kinds(report) == [IssueKind.RESOLUTION_FAILED, IssueKind.RESOLUTION_MISMATCH]
        assert report.page_count == 2

    def test_no_match(self) -> None:
        report = BookValidator(FakeProvider([])).check_book("Series-01-2010-Smith.cbz", [])
        assert report.state is ValidationState.DONE
        assert _kinds(report) == [IssueKind.NO_MATCH]
        assert report.issues[0].detail == "no fake album titled 'Series' volume 1"
        assert report.source is None

    def test_year_mismatch(self, series_candidate: Candidate) -> None:
        candidate = Candidate("Series", 2011, ("Smith",), series_candidate.source, volume=1)
        report = BookValidator(FakeProvider([candidate])).check_book("Series-01-2010-Smith.cbz", [])
        assert _kinds(report) == [IssueKind.YEAR_MISMATCH]
        assert report.issues[0].detail == "invalid year 2010, expected 2011"
        assert report.source == series_candidate.source

    def test_year_mismatch_lists_every_edition(self) -> None:
        candidate = Candidate("Series", 2008, ("Smith",), "u", reprint_years=(2012,))
        report = BookValidator(FakeProvider([candidate])).check_book("Series-01-2010-Smith.cbz", [])
        assert report.issues[0].detail == "invalid year 2010, expected one of 2008, 2012"

    def test_author_order_mismatch(self) -> None:
        candidate = Candidate("Oishinbo", 2008, ("Kariya", "Hanasaki"), "u", volume=1)
        report = BookValidator(FakeProvider([candidate])).check_book(
            "Oishinbo-01-2008-Hanasaki-Kariya.cbz", []
        )
        assert _kinds(report) == [IssueKind.AUTHOR_ORDER_MISMATCH]
        assert report.issues[0].detail == "authors out of order, expected (Kariya-Hanasaki)"

    def test_author_issue_before_year_issue(self) -> None:
        candidate = Candidate("Series", 2011, ("Jones",), "u", volume=1)
        report = BookValidator(FakeProvider([candidate])).check_book("Series-01-2010-Smith.cbz", [])
        assert _kinds(report) == [IssueKind.AUTHOR_MISMATCH, IssueKind.YEAR_MISMATCH]

    def test_ambiguous(self) -> None:
        first = Candidate("Series", 2010, ("Smith",), "https://example.com/a", volume=1)
        second = Candidate("Series", 2012, ("Smith",), "https://example.com/b", volume=1)
        report = BookValidator(FakeProvider([first, second])).check_book("Series-01-Smith.cbz", [])
        assert _kinds(report) == [IssueKind.AMBIGUOUS_MATCH]
        assert "https://example.com/a, https://example.com/b" in report.issues[0].detail
        assert report.source is None

    def test_custom_romanization(self) -> None:
        candidate = Candidate("Series", 2010, ("Junji",), "u", volume=1)
        config = CheckerConfig(romanization={"jyunji": "junji"})
        report = BookValidator(FakeProvider([candidate]), config).check_book(
            "Series-01-2010-Jyunji.cbz", []
        )
        assert report.issues == []


class TestPages:
    """Tests for the page-checking phase."""

    def test_page_issues_follow_match_issues(self) -> None:
        report = BookValidator(FakeProvider([])).check_book(
            "Series-01-2010-Smith [Digital-1000].cbz", _pages(1000, 1300)
        )
        assert _kinds(report) == [IssueKind.NO_MATCH, IssueKind.RESOLUTION_MISMATCH]
        assert report.issues[1].page == 2

    def test_page_policy_from_config(self, series_candidate: Candidate) -> None:
        config = CheckerConfig(pages=PagePolicy(tolerance_percent=50))
        report = BookValidator(FakeProvider([series_candidate]), config).check_book(
            "Series-01-2010-Smith [Digital-1000].cbz", _pages(1300)
        )
        assert report.issues == []

    def test_unreadable_entry_keeps_earlier_issues(self) -> None:
        report = BookValidator(FakeProvider([])).check_book(
            "Series-01-2010-Smith.cbz", _broken_pages()
        )
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.NO_MATCH, IssueKind.UNREADABLE_ARCHIVE]
        assert report.page_count == 1

    def test_unreadable_archive_file(self, tmp_path: Path, series_candidate: Candidate) -> None:
        path = tmp_path / "Series-01-2010-Smith.cbz"
        path.write_bytes(b"garbage")
        report = BookValidator(FakeProvider([series_candidate])).validate(path)
        assert report.failed
        assert _kinds(report) == [IssueKind.UNREADABLE_ARCHIVE]

    def test_corrupt_compressed_page_fails_book(
        self, tmp_path: Path, series_candidate: Candidate
    ) -> None:
        pages = [("001.png", make_image(1000, 150), ZIP_EPOCH_TUPLE)]
        path = write_cbz(
            tmp_path / "Series-01-2010-Smith.cbz", pages, compression=zipfile.ZIP_DEFLATED
        )
        corrupt_entry(path, "001.png")

        report = BookValidator(FakeProvider([series_candidate])).validate(path)
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.UNREADABLE_ARCHIVE]
        assert "001.png" in report.issues[0].detail

    def test_encrypted_page_fails_book(self, tmp_path: Path, series_candidate: Candidate) -> None:
        pages = [
            ("001.png", make_image(1000, 150), ZIP_EPOCH_TUPLE),
            ("002.png", make_image(1000, 150), ZIP_EPOCH_TUPLE),
        ]
        path = write_cbz(tmp_path / "Series-01-2010-Smith.cbz", pages)
        mark_entry_encrypted(path, "002.png")

        report = BookValidator(FakeProvider([series_candidate])).validate(path)
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.UNREADABLE_ARCHIVE]
        assert report.page_count == 1

    def test_page_overflow_fails_book(
        self, monkeypatch: pytest.MonkeyPatch, series_candidate: Candidate
    ) -> None:
        """A page count past the counter width fails instead of wrapping."""
        monkeypatch.setattr("cbzcheck.metadata.types.MAX_COUNT", 2)
        report = BookValidator(FakeProvider([series_candidate])).check_book(
            "Series-01-2010-Smith.cbz", _pages(1000, 1000, 1000)
        )
        assert report.state is ValidationState.FAILED
        assert _kinds(report) == [IssueKind.COUNT_OVERFLOW]
        assert report.page_count == 2


class TestValidateBooks:
    """Tests for validate_books()."""

    @pytest.mark.parametrize("jobs", [1, 4])
    def test_reports_in_input_order(self, cbz_factory, series_candidate: Candidate, jobs: int) -> None:
        paths = [
            cbz_factory("Series-01-2010-Smith.cbz"),
            cbz_factory("not a valid name.cbz"),
            cbz_factory("Series-01-2011-Smith.cbz"),
        ]
        validator = BookValidator(FakeProvider([series_candidate]))
        reports = validate_books(validator, paths, jobs=jobs)
        assert [r.name for r in reports] == [p.name for p in paths]
        assert [r.state for r in reports] == [
            ValidationState.DONE,
            ValidationState.FAILED,
            ValidationState.DONE,
        ]
        assert _kinds(reports[2]) == [IssueKind.YEAR_MISMATCH]
