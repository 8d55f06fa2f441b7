# ABOUTME: bedetheque.com candidate provider implementation.
# ABOUTME: Searches albums by series title, keeps the requested volume, and reads each album page.

import logging

from cbzcheck.metadata.bedetheque_parser import (
    BedethequeParseError,
    parse_album_page,
    parse_csrf_token,
    parse_search_results,
)
from cbzcheck.metadata.http import HttpClient, MetadataFetchError
from cbzcheck.metadata.provider import ResolutionFailedError
from cbzcheck.metadata.types import Candidate

logger = logging.getLogger(__name__)

BEDETHEQUE_HOME = "https://www.bedetheque.com/"
_SEARCH_URL = "https://www.bedetheque.com/search/albums"

# Search filters: Asian comics, French editions.
_ORIGIN_ASIA = "2"
_LANGUAGE = "Français"


class BedethequeProvider:
    """Candidate provider backed by bedetheque.com.

    A single source on purpose: an empty search is reported as "no
    candidate", never followed by a query to another catalog.
    Uses dependency-injected HttpClient for testability.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "bedetheque"

    def search(self, title: str, volume: int | None = None) -> list[Candidate]:
        """Find the albums of a series matching the given volume number.

        One-shots (volume None) match results without a number.

        Raises:
            ResolutionFailedError: If any page cannot be fetched or parsed.
        """
        try:
            return self._search(title, volume)
        except (MetadataFetchError, BedethequeParseError) as exc:
            logger.warning("Lookup failed for title=%s volume=%s: %s", title, volume, exc)
            raise ResolutionFailedError(f"bedetheque lookup failed for {title!r}: {exc}") from exc

    def _search(self, title: str, volume: int | None) -> list[Candidate]:
        csrf_token = parse_csrf_token(self._http.get_html(BEDETHEQUE_HOME))

        params = {
            "csrf_token_bel": csrf_token,
            "RechSerie": title,
            "RechOrigine": _ORIGIN_ASIA,
            "RechLangue": _LANGUAGE,
        }
        results = parse_search_results(self._http.get_html(_SEARCH_URL, params=params), _SEARCH_URL)
        wanted = [r for r in results if r.volume == volume]
        logger.debug(
            "%d result(s) for %r, %d with volume %s", len(results), title, len(wanted), volume
        )

        candidates = []
        for result in wanted:
            info = parse_album_page(self._http.get_html(result.url))
            candidates.append(
                Candidate(
                    title=result.series,
                    year=info.years[0] if info.years else None,
                    authors=info.authors,
                    source=result.url,
                    volume=result.volume,
                    reprint_years=info.years[1:],
                )
            )
        return candidates
