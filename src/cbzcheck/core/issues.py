# ABOUTME: Issue records produced while checking a book.
# ABOUTME: Each Issue names its kind, a human-readable detail, and the book/page it refers to.

from dataclasses import dataclass
from enum import Enum


class IssueKind(Enum):
    """Every kind of finding the checker can report."""

    MALFORMED_NAME = "malformed-name"
    RESOLUTION_FAILED = "resolution-failed"
    NO_MATCH = "no-match"
    AMBIGUOUS_MATCH = "ambiguous-match"
    YEAR_MISMATCH = "year-mismatch"
    AUTHOR_MISMATCH = "author-mismatch"
    AUTHOR_ORDER_MISMATCH = "author-order-mismatch"
    RESOLUTION_MISMATCH = "resolution-mismatch"
    SUSPICIOUS_TIMESTAMP = "suspicious-timestamp"
    EMBEDDED_METADATA_PRESENT = "embedded-metadata-present"
    UNDECODABLE_IMAGE = "undecodable-image"
    UNREADABLE_ARCHIVE = "unreadable-archive"
    COUNT_OVERFLOW = "count-overflow"


@dataclass(frozen=True)
class Issue:
    """A single finding about a book, or about one of its pages."""

    kind: IssueKind
    detail: str
    book: str
    page: int | None = None
    page_name: str | None = None

    def __str__(self) -> str:
        if self.page is None:
            return f"{self.kind.value}: {self.detail}"
        where = f"page {self.page}"
        if self.page_name:
            where += f" ({self.page_name})"
        return f"{where}: {self.kind.value}: {self.detail}"
