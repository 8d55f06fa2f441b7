# ABOUTME: Filename parser turning CBZ names into ParsedName records, and back.
# ABOUTME: Supports the catalogue form "Title T01 (Authors) (2010) [Digital-1600]" and "Series-01-2010-Authors".

import re

from cbzcheck.metadata.types import ParsedName, check_count

_CBZ_SUFFIX_RE = re.compile(r"\.cbz$", re.IGNORECASE)

_RELEASE_TAG = r"(?: \[(?P<release>Digital|Scan)-(?P<width>\d+)\])?"

# "Title T01 (Writer-Penciller) (2010) [Digital-1600]"; volume, year and tag are optional.
_CATALOGUE_RE = re.compile(
    r"^(?P<series>.+?)"
    r"(?: T(?P<volume>\d+))?"
    r" \((?P<authors>[^()]*[^()\d\s][^()]*)\)"
    r"(?: \((?P<year>\d{4})\))?"
    + _RELEASE_TAG
    + r"$"
)

# An author segment never starts with a digit, so "-01-" always ends the series.
_AUTHOR_SEGMENT = r"[^\d\-()\[\]\s][^\-()\[\]]*"

# "Series-01-2010-Writer-Penciller"; needs a volume, a year, or both.
_COMPACT_RE = re.compile(
    r"^(?P<series>.+?)"
    r"(?:-(?P<volume>\d{1,3})(?:-(?P<year>\d{4}))?|-(?P<year_only>\d{4}))"
    rf"-(?P<authors>{_AUTHOR_SEGMENT}(?:-{_AUTHOR_SEGMENT})*)"
    + _RELEASE_TAG
    + r"$"
)


class MalformedNameError(ValueError):
    """Raised when a filename matches none of the recognized grammars."""


def parse_filename(filename: str) -> ParsedName:
    """Parse a CBZ filename into its series, volume, year and author fields.

    The catalogue form is tried first, then the compact hyphenated form.
    A trailing ".cbz" extension is ignored.

    Raises:
        MalformedNameError: If the name matches neither grammar.
        CountOverflowError: If the volume number exceeds the counter width.
    """
    stem = _CBZ_SUFFIX_RE.sub("", filename.strip())

    m = _CATALOGUE_RE.match(stem) or _COMPACT_RE.match(stem)
    if m is None:
        raise MalformedNameError(f"cannot extract info from filename: {filename}")

    groups = m.groupdict()
    series = groups["series"].strip()
    if not series:
        raise MalformedNameError(f"empty series title in filename: {filename}")

    volume = None
    if groups["volume"] is not None:
        volume = check_count(int(groups["volume"]), "volume")
        if volume == 0:
            raise MalformedNameError(f"volume number must be positive: {filename}")

    year_text = groups["year"] or groups.get("year_only")
    year = int(year_text) if year_text else None

    authors = tuple(name.strip() for name in groups["authors"].split("-"))
    if not all(authors):
        raise MalformedNameError(f"empty author name in filename: {filename}")

    width = int(groups["width"]) if groups["width"] else None

    return ParsedName(
        series=series,
        volume=volume,
        year=year,
        authors=authors,
        release=groups["release"],
        width=width,
    )


def format_filename(parsed: ParsedName) -> str:
    """Render a ParsedName in the canonical catalogue form, without extension."""
    parts = [parsed.series]
    if parsed.volume is not None:
        parts.append(f" T{parsed.volume:02d}")
    parts.append(f" ({'-'.join(parsed.authors)})")
    if parsed.year is not None:
        parts.append(f" ({parsed.year})")
    if parsed.release and parsed.width is not None:
        parts.append(f" [{parsed.release}-{parsed.width}]")
    return "".join(parts)
