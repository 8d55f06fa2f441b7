# ABOUTME: Matches a parsed filename against bibliographic candidates.
# ABOUTME: Filters on normalized title, breaks ties on year then authors, and never guesses between equals.

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from cbzcheck.metadata.normalizer import RomanizationTable, normalize_key
from cbzcheck.metadata.types import Candidate, ParsedName


class MatchKind(Enum):
    """Outcome of matching a filename against the candidate set."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    YEAR_MISMATCH = "year-mismatch"
    AUTHOR_MISMATCH = "author-mismatch"
    AUTHOR_ORDER_MISMATCH = "author-order-mismatch"
    NO_MATCH = "no-match"
    AMBIGUOUS = "ambiguous-match"


class AuthorComparison(Enum):
    """How two ordered author lists compare after normalization."""

    MATCH = "match"
    PERMUTED = "permuted"
    DIFFERENT = "different"


@dataclass(frozen=True)
class MatchResult:
    """The selected candidate (if any) and how well it agrees with the filename.

    candidate is set only when exactly one record was selected; tied holds
    every equally good record of an ambiguous match.
    """

    kind: MatchKind
    candidate: Candidate | None = None
    tied: tuple[Candidate, ...] = ()
    year_matches: bool = True
    authors: AuthorComparison = AuthorComparison.MATCH

    @property
    def is_confident(self) -> bool:
        return self.kind in (MatchKind.EXACT, MatchKind.FUZZY)


def _author_tokens(authors: tuple[str, ...], table: RomanizationTable) -> list[str]:
    """Split names on hyphens and normalize, so both sides tokenize identically."""
    tokens = []
    for name in authors:
        for part in name.split("-"):
            key = normalize_key(part, table)
            if key:
                tokens.append(key)
    return tokens


def compare_authors(
    expected: tuple[str, ...], actual: tuple[str, ...], table: RomanizationTable
) -> AuthorComparison:
    """Order-sensitive author comparison; a permutation is reported distinctly."""
    left = _author_tokens(expected, table)
    right = _author_tokens(actual, table)
    if left == right:
        return AuthorComparison.MATCH
    if Counter(left) == Counter(right):
        return AuthorComparison.PERMUTED
    return AuthorComparison.DIFFERENT


def year_matches(parsed: ParsedName, candidate: Candidate) -> bool:
    """Exact year check; a filename without a year is not checked."""
    if parsed.year is None:
        return True
    return parsed.year in candidate.years


def _classify(parsed: ParsedName, candidate: Candidate, table: RomanizationTable) -> MatchResult:
    years_ok = year_matches(parsed, candidate)
    authors = compare_authors(parsed.authors, candidate.authors, table)

    if not years_ok:
        kind = MatchKind.YEAR_MISMATCH
    elif authors is AuthorComparison.PERMUTED:
        kind = MatchKind.AUTHOR_ORDER_MISMATCH
    elif authors is AuthorComparison.DIFFERENT:
        kind = MatchKind.AUTHOR_MISMATCH
    elif candidate.title == parsed.series and "-".join(candidate.authors) == "-".join(
        parsed.authors
    ):
        kind = MatchKind.EXACT
    else:
        kind = MatchKind.FUZZY

    return MatchResult(kind=kind, candidate=candidate, year_matches=years_ok, authors=authors)


def match_candidates(
    parsed: ParsedName,
    candidates: list[Candidate],
    table: RomanizationTable | None = None,
) -> MatchResult:
    """Select the candidate describing the same book as the filename.

    1. Keep candidates whose normalized title equals the normalized series.
    2. One survivor is selected. Among several, prefer those whose year
       matches, then those whose author list matches exactly.
    3. If more than one remains, report an ambiguous match listing them all.

    Candidate order does not affect the outcome; tied candidates are listed
    in the order they were given.
    """
    table = table if table is not None else RomanizationTable.default()
    series_key = normalize_key(parsed.series, table)

    survivors = [c for c in candidates if normalize_key(c.title, table) == series_key]
    if not survivors:
        return MatchResult(kind=MatchKind.NO_MATCH)

    if len(survivors) > 1 and parsed.year is not None:
        same_year = [c for c in survivors if year_matches(parsed, c)]
        if same_year:
            survivors = same_year

    if len(survivors) > 1:
        same_authors = [
            c
            for c in survivors
            if compare_authors(parsed.authors, c.authors, table) is AuthorComparison.MATCH
        ]
        if same_authors:
            survivors = same_authors

    if len(survivors) > 1:
        return MatchResult(kind=MatchKind.AMBIGUOUS, tied=tuple(survivors))

    return _classify(parsed, survivors[0], table)
