# ABOUTME: Unit tests for ParsedName, Candidate, and the counter width guard.
# ABOUTME: Validates derived properties and overflow detection.

import pytest

from cbzcheck.metadata.types import MAX_COUNT, Candidate, CountOverflowError, ParsedName, check_count


class TestCheckCount:
    def test_limits_accepted(self) -> None:
        assert check_count(0, "page") == 0
        assert check_count(MAX_COUNT, "page") == MAX_COUNT

    def test_above_limit(self) -> None:
        with pytest.raises(CountOverflowError, match="page counter 65536"):
            check_count(MAX_COUNT + 1, "page")

    def test_negative(self) -> None:
        with pytest.raises(CountOverflowError):
            check_count(-1, "volume")

    def test_is_an_overflow_error(self) -> None:
        assert issubclass(CountOverflowError, OverflowError)


class TestParsedName:
    def test_search_title(self) -> None:
        assert ParsedName(series="Spider-Man  Noir").search_title == "Spider Man Noir"

    def test_physical_scan_only_for_scan_tag(self) -> None:
        assert ParsedName(series="X", release="Scan").is_physical_scan
        assert not ParsedName(series="X", release="Digital").is_physical_scan
        assert not ParsedName(series="X").is_physical_scan

    def test_frozen(self) -> None:
        parsed = ParsedName(series="X")
        with pytest.raises(AttributeError):
            parsed.series = "Y"  # type: ignore[misc]


class TestCandidate:
    def test_years_first_edition_then_reprints(self) -> None:
        candidate = Candidate("X", 2000, (), "u", reprint_years=(2013, 2020))
        assert candidate.years == (2000, 2013, 2020)

    def test_unknown_year(self) -> None:
        candidate = Candidate("X", None, (), "u", reprint_years=(2013,))
        assert candidate.years == (2013,)
        assert Candidate("X", None, (), "u").years == ()
