# ABOUTME: Run-level report aggregation across all checked books.
# ABOUTME: Renders one blank-line-separated block per book, issues in discovery order.

from dataclasses import dataclass, field

from cbzcheck.core.validator import BookReport


@dataclass
class ReportBlock:
    """The lines printed for one book."""

    name: str
    ok: bool
    lines: list[str] = field(default_factory=list)

    @property
    def header(self) -> str:
        return f"{'OK   ' if self.ok else 'ERROR'} {self.name}"

    def render(self) -> str:
        return "\n".join([self.header, *self.lines])


@dataclass
class RunReport:
    """Book reports of one run, kept in input order."""

    books: list[BookReport] = field(default_factory=list)

    def add(self, report: BookReport) -> None:
        self.books.append(report)

    @property
    def total_issues(self) -> int:
        return sum(len(book.issues) for book in self.books)

    @property
    def has_issues(self) -> bool:
        return any(book.has_issues for book in self.books)

    @property
    def books_with_issues(self) -> int:
        return sum(1 for book in self.books if book.has_issues)

    def blocks(self, *, show_clean: bool = False) -> list[ReportBlock]:
        """One block per book; books without issues only when show_clean is set."""
        blocks = []
        for book in self.books:
            if not book.has_issues and not show_clean:
                continue
            lines = []
            if book.source and book.has_issues:
                lines.append(f"Checked against {book.source}")
            lines.extend(f"==> {issue}" for issue in book.issues)
            blocks.append(ReportBlock(name=book.name, ok=not book.has_issues, lines=lines))
        return blocks

    def render(self, *, show_clean: bool = False) -> str:
        """Plain-text report, blocks separated by a blank line. Empty when nothing to show."""
        return "\n\n".join(block.render() for block in self.blocks(show_clean=show_clean))
