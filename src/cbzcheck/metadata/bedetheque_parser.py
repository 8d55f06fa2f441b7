# ABOUTME: Parsing functions for bedetheque.com HTML pages.
# ABOUTME: Extracts the CSRF token, album search results, and album credits/legal-deposit years.

import re
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

# "Scénario : Oda, Eiichiro" -> category "Scénario", name "Oda"
_AUTHOR_RE = re.compile(r"(?P<category>Scénario|Dessin)\s*:\s*(?P<name>[^,]+)")
# "Dépot légal : 03/2000 (Parution le 01/03/2000)" -> 2000
_YEAR_RE = re.compile(r"D[ée]p[oô]t l[ée]gal\s*:\s*(?:[0-9]{2}/)?(?P<year>[0-9]{4})")


class BedethequeParseError(ValueError):
    """Raised when a bedetheque page does not have the expected structure."""


@dataclass(frozen=True)
class SearchResult:
    """One album link from the search result list."""

    url: str
    series: str
    volume: int | None


@dataclass(frozen=True)
class AlbumInfo:
    """Credits and publication years read from an album page."""

    authors: tuple[str, ...]
    years: tuple[int, ...]


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def parse_csrf_token(html: str) -> str:
    """Extract the CSRF token the search form expects."""
    node = _soup(html).select_one("#csrf")
    if node is None:
        raise BedethequeParseError("CSRF token not found")
    value = node.get("value")
    if not value:
        raise BedethequeParseError("CSRF token missing")
    return str(value)


def parse_volume_number(text: str) -> int | None:
    """Parse a ".num" label such as "#12"; one-shots have an empty label."""
    text = text.strip()
    if not text:
        return None
    number = text.lstrip("#").strip()
    if not number.isdigit():
        raise BedethequeParseError(f"invalid book number: {text!r}")
    return int(number)


def _series_label(link: Tag) -> str:
    node = link.select_one(".serie")
    if node is not None:
        return node.get_text(" ", strip=True)
    title = link.get("title")
    if title:
        return str(title).strip()
    return link.get_text(" ", strip=True)


def parse_search_results(html: str, base_url: str) -> list[SearchResult]:
    """Parse the album search result list into SearchResult records.

    Relative links are resolved against base_url.

    Raises:
        BedethequeParseError: If a result lacks its link or book number.
    """
    results: list[SearchResult] = []
    for link in _soup(html).select(".search-list li a"):
        href = link.get("href")
        if not href:
            raise BedethequeParseError("book URL not found")

        num = link.select_one(".num")
        if num is None:
            raise BedethequeParseError(f"book number not found for {href}")

        results.append(
            SearchResult(
                url=urljoin(base_url, str(href)),
                series=_series_label(link),
                volume=parse_volume_number(num.get_text()),
            )
        )
    return results


def parse_album_page(html: str) -> AlbumInfo:
    """Extract authors and legal-deposit years from an album page.

    Writers come first, then pencillers, each in page order. A penciller
    who is also credited as writer is listed once, as writer. Years are
    returned sorted, first edition first.
    """
    writers: list[str] = []
    pencillers: list[str] = []
    years: set[int] = set()

    for item in _soup(html).select(".infos li"):
        content = item.get_text(" ", strip=True)

        author = _AUTHOR_RE.search(content)
        if author:
            name = author.group("name").strip()
            if author.group("category") == "Dessin":
                if name not in writers and name not in pencillers:
                    pencillers.append(name)
            elif name not in writers:
                writers.append(name)
            continue

        year = _YEAR_RE.search(content)
        if year:
            years.add(int(year.group("year")))

    # A name first seen as penciller and later as writer is kept as writer only.
    pencillers = [name for name in pencillers if name not in writers]

    return AlbumInfo(authors=tuple(writers + pencillers), years=tuple(sorted(years)))
