# ABOUTME: Per-page image checks: header resolution, entry timestamp, and embedded capture metadata.
# ABOUTME: Uses Pillow to read image headers; produces a PageRecord and the page's issues.

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime

from PIL import Image
from PIL.ExifTags import TAGS

from cbzcheck.config import PagePolicy
from cbzcheck.core.issues import Issue, IssueKind
from cbzcheck.formats.cbz import PageEntry
from cbzcheck.metadata.types import check_count

logger = logging.getLogger(__name__)

# Keys Pillow uses for XMP packets (JPEG, PNG/WebP respectively).
_XMP_INFO_KEYS = ("xmp", "XML:com.adobe.xmp")


@dataclass(frozen=True)
class PageRecord:
    """What was declared and what was found for one page."""

    index: int
    name: str
    declared_width: int | None
    width: int | None
    height: int | None
    timestamp: datetime | None
    metadata_tags: tuple[str, ...] = ()
    declared_height: int | None = None

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata_tags)


@dataclass
class PageInspection:
    """Result of inspecting one page."""

    record: PageRecord
    issues: list[Issue] = field(default_factory=list)


def within_tolerance(actual: int, declared: int, tolerance_percent: int) -> bool:
    """Whether actual lies in declared ± tolerance_percent, boundaries included."""
    return abs(actual - declared) * 100 <= declared * tolerance_percent


def width_matches(actual: int, declared: int, policy: PagePolicy) -> bool:
    """Check a page width against the declared one.

    A double-page spread may be twice as wide as a single page.
    """
    if within_tolerance(actual, declared, policy.tolerance_percent):
        return True
    return policy.allow_double_page and within_tolerance(
        actual, 2 * declared, policy.tolerance_percent
    )


def _metadata_tags(image: Image.Image) -> tuple[str, ...]:
    """Names of the EXIF tags (and XMP packet) embedded in an image.

    Only the raw blocks Pillow collects in `info` while opening are read;
    `Image.getexif()` would load (decode) the whole PNG first.
    """
    names: list[str] = []
    raw_exif = image.info.get("exif")
    if raw_exif:
        exif = Image.Exif()
        try:
            exif.load(raw_exif)
            names = [TAGS.get(tag_id, f"0x{tag_id:04x}") for tag_id in exif]
        except (OSError, SyntaxError, ValueError) as exc:
            logger.debug("Unparsable EXIF block: %s", exc)
        # A present but empty or unparsable block still counts.
        names = names or ["EXIF"]
    if any(key in image.info for key in _XMP_INFO_KEYS):
        names.append("XMP")
    return tuple(names)


def inspect_page(
    page: PageEntry,
    index: int,
    *,
    book: str,
    declared_width: int | None,
    physical_scan: bool,
    policy: PagePolicy,
) -> PageInspection:
    """Check one page image and collect its issues.

    Checks, in order: the image header can be read and its width matches
    the declared width; the entry timestamp equals the sentinel (skipped for
    physical scans, which legitimately carry real times); no capture
    metadata is embedded.

    Raises:
        CountOverflowError: If index exceeds the page counter width.
    """
    check_count(index, "page")
    issues: list[Issue] = []

    def report(kind: IssueKind, detail: str) -> None:
        issues.append(Issue(kind=kind, detail=detail, book=book, page=index, page_name=page.name))

    width = height = None
    tags: tuple[str, ...] = ()
    try:
        with Image.open(io.BytesIO(page.data)) as image:
            width, height = image.size
            tags = _metadata_tags(image)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        logger.debug("Cannot decode %s: %s", page.name, exc)
        report(IssueKind.UNDECODABLE_IMAGE, f"cannot read image header: {exc}")

    if width is not None and declared_width is not None:
        if not width_matches(width, declared_width, policy):
            report(
                IssueKind.RESOLUTION_MISMATCH,
                f"unexpected width ({width}), expected {declared_width} "
                f"±{policy.tolerance_percent}%",
            )

    if (
        not physical_scan
        and page.timestamp is not None
        and page.timestamp != policy.timestamp_sentinel
    ):
        report(
            IssueKind.SUSPICIOUS_TIMESTAMP,
            f"timestamp {page.timestamp.isoformat(sep=' ')}, "
            f"expected {policy.timestamp_sentinel.isoformat(sep=' ')}",
        )

    if tags:
        report(IssueKind.EMBEDDED_METADATA_PRESENT, f"embedded metadata: {', '.join(tags)}")

    record = PageRecord(
        index=index,
        name=page.name,
        declared_width=declared_width,
        width=width,
        height=height,
        timestamp=page.timestamp,
        metadata_tags=tags,
    )
    return PageInspection(record=record, issues=issues)
