# ABOUTME: Book validation: filename parsing, candidate lookup, matching, then per-page checks.
# ABOUTME: A forward-only state machine per book; one failing book never stops the run.

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from cbzcheck.config import CheckerConfig
from cbzcheck.core.images import inspect_page
from cbzcheck.core.issues import Issue, IssueKind
from cbzcheck.formats.cbz import ArchiveReadError, PageEntry, iter_pages
from cbzcheck.metadata.filename import MalformedNameError, parse_filename
from cbzcheck.metadata.matcher import AuthorComparison, MatchKind, MatchResult, match_candidates
from cbzcheck.metadata.provider import CandidateProvider, ResolutionFailedError
from cbzcheck.metadata.types import CountOverflowError, ParsedName

logger = logging.getLogger(__name__)


class ValidationState(Enum):
    """Where a book is in its check. States are only ever entered in this order."""

    PARSING_NAME = "parsing-name"
    RESOLVING_CANDIDATES = "resolving-candidates"
    MATCHING = "matching"
    VALIDATING_PAGES = "validating-pages"
    DONE = "done"
    FAILED = "failed"


_ORDER = list(ValidationState)


@dataclass
class BookReport:
    """Everything found while checking one book, in discovery order."""

    name: str
    issues: list[Issue] = field(default_factory=list)
    state: ValidationState = ValidationState.PARSING_NAME
    source: str | None = None
    page_count: int = 0

    @property
    def failed(self) -> bool:
        return self.state is ValidationState.FAILED

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


def _advance(report: BookReport, state: ValidationState) -> None:
    """Move a book to a later state; FAILED is reachable from anywhere."""
    if state is not ValidationState.FAILED and _ORDER.index(state) <= _ORDER.index(report.state):
        raise RuntimeError(f"{report.name}: cannot go from {report.state.value} to {state.value}")
    logger.debug("%s: %s -> %s", report.name, report.state.value, state.value)
    report.state = state


def _join_years(years: tuple[int, ...]) -> str:
    if not years:
        return "no known year"
    if len(years) == 1:
        return str(years[0])
    return "one of " + ", ".join(str(y) for y in years)


def _match_issues(parsed: ParsedName, result: MatchResult, book: str, source: str) -> list[Issue]:
    """Translate a match outcome into issues; a confident match yields none."""
    if result.kind is MatchKind.NO_MATCH:
        return [
            Issue(
                kind=IssueKind.NO_MATCH,
                detail=f"no {source} album titled {parsed.series!r}"
                + (f" volume {parsed.volume}" if parsed.volume is not None else ""),
                book=book,
            )
        ]
    if result.kind is MatchKind.AMBIGUOUS:
        refs = ", ".join(c.source for c in result.tied)
        return [
            Issue(
                kind=IssueKind.AMBIGUOUS_MATCH,
                detail=f"{len(result.tied)} candidates match equally: {refs}",
                book=book,
            )
        ]

    candidate = result.candidate
    assert candidate is not None
    issues = []
    expected_authors = "-".join(candidate.authors)
    if result.authors is AuthorComparison.PERMUTED:
        issues.append(
            Issue(
                kind=IssueKind.AUTHOR_ORDER_MISMATCH,
                detail=f"authors out of order, expected ({expected_authors})",
                book=book,
            )
        )
    elif result.authors is AuthorComparison.DIFFERENT:
        issues.append(
            Issue(
                kind=IssueKind.AUTHOR_MISMATCH,
                detail=f"invalid authors, expected ({expected_authors})",
                book=book,
            )
        )
    if not result.year_matches:
        issues.append(
            Issue(
                kind=IssueKind.YEAR_MISMATCH,
                detail=f"invalid year {parsed.year}, expected {_join_years(candidate.years)}",
                book=book,
            )
        )
    return issues


class BookValidator:
    """Checks books one at a time against a candidate provider.

    Holds no per-book state: everything about a book lives in the
    BookReport returned by check_book, so one validator can serve several
    worker threads.
    """

    def __init__(self, provider: CandidateProvider, config: CheckerConfig | None = None) -> None:
        self._provider = provider
        self._config = config or CheckerConfig()
        self._table = self._config.romanization_table()

    def validate(self, path: Path) -> BookReport:
        """Check the CBZ file at path."""
        return self.check_book(path.name, iter_pages(path))

    def check_book(self, name: str, pages: Iterable[PageEntry]) -> BookReport:
        """Check a book given its file name and its pages in archive order.

        pages may be lazy; an ArchiveReadError raised while iterating fails
        the book with the issues found so far.
        """
        report = BookReport(name=name)

        def fail(kind: IssueKind, detail: str) -> BookReport:
            report.issues.append(Issue(kind=kind, detail=detail, book=name))
            _advance(report, ValidationState.FAILED)
            return report

        try:
            parsed = parse_filename(name)
        except MalformedNameError as exc:
            return fail(IssueKind.MALFORMED_NAME, str(exc))
        except CountOverflowError as exc:
            return fail(IssueKind.COUNT_OVERFLOW, str(exc))

        _advance(report, ValidationState.RESOLVING_CANDIDATES)
        try:
            candidates = self._provider.search(parsed.search_title, parsed.volume)
        except ResolutionFailedError as exc:
            if not self._config.keep_going:
                return fail(IssueKind.RESOLUTION_FAILED, str(exc))
            report.issues.append(Issue(kind=IssueKind.RESOLUTION_FAILED, detail=str(exc), book=name))
            candidates = None

        if candidates is not None:
            _advance(report, ValidationState.MATCHING)
            result = match_candidates(parsed, candidates, self._table)
            if result.candidate is not None:
                report.source = result.candidate.source
            report.issues.extend(_match_issues(parsed, result, name, self._provider.name))

        _advance(report, ValidationState.VALIDATING_PAGES)
        try:
            for index, page in enumerate(pages, start=1):
                inspection = inspect_page(
                    page,
                    index,
                    book=name,
                    declared_width=parsed.width,
                    physical_scan=parsed.is_physical_scan,
                    policy=self._config.pages,
                )
                report.issues.extend(inspection.issues)
                report.page_count = index
        except CountOverflowError as exc:
            return fail(IssueKind.COUNT_OVERFLOW, str(exc))
        except ArchiveReadError as exc:
            return fail(IssueKind.UNREADABLE_ARCHIVE, str(exc))

        _advance(report, ValidationState.DONE)
        return report


def validate_books(validator: BookValidator, paths: list[Path], *, jobs: int = 1) -> list[BookReport]:
    """Check every book, returning reports in input order.

    With jobs > 1 books are checked concurrently; results are still
    returned in the order of paths.
    """
    if jobs <= 1:
        return [validator.validate(path) for path in paths]
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        return list(executor.map(validator.validate, paths))
