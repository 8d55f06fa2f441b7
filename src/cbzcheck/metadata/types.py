# ABOUTME: Core data structures for filename fields and bibliographic candidates.
# ABOUTME: ParsedName and Candidate are the interchange format between parsing, lookup, and matching.

from dataclasses import dataclass

# Volume and page counters are unsigned 16-bit values.
MAX_COUNT = 0xFFFF


class CountOverflowError(OverflowError):
    """Raised when a volume or page counter exceeds MAX_COUNT."""


def check_count(value: int, what: str) -> int:
    """Return value unchanged if it fits the counter width.

    Raises:
        CountOverflowError: If value is negative or above MAX_COUNT.
    """
    if value < 0 or value > MAX_COUNT:
        raise CountOverflowError(f"{what} counter {value} exceeds the limit of {MAX_COUNT}")
    return value


@dataclass(frozen=True)
class ParsedName:
    """Structured fields extracted from a CBZ filename.

    Authors keep the filename order: it encodes credit precedence, writers
    before pencillers. release/width come from the "[Digital-1600]" tag.
    """

    series: str
    volume: int | None = None
    year: int | None = None
    authors: tuple[str, ...] = ()
    release: str | None = None
    width: int | None = None

    @property
    def is_physical_scan(self) -> bool:
        """Whether the tag marks a scan of a printed book rather than a digital release."""
        return self.release == "Scan"

    @property
    def search_title(self) -> str:
        """Series title with hyphens turned into spaces, for search queries."""
        return " ".join(self.series.replace("-", " ").split())


@dataclass(frozen=True)
class Candidate:
    """A bibliographic record returned by the external source."""

    title: str
    year: int | None
    authors: tuple[str, ...]
    source: str
    volume: int | None = None
    reprint_years: tuple[int, ...] = ()

    @property
    def years(self) -> tuple[int, ...]:
        """Every known publication year: first edition, then reprints."""
        first = (self.year,) if self.year is not None else ()
        return first + self.reprint_years
