# ABOUTME: CBZ archive reading and path expansion using zipfile.
# ABOUTME: Yields page images with their bytes and timestamps, and expands directories into archives.

import logging
import zipfile
import zlib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

CBZ_EXTENSION = ".cbz"

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"}
)


class ArchiveReadError(Exception):
    """Raised when a CBZ file cannot be opened or one of its entries cannot be read."""


@dataclass(frozen=True)
class PageEntry:
    """One image file inside an archive."""

    name: str
    data: bytes
    timestamp: datetime | None


def _entry_timestamp(info: zipfile.ZipInfo) -> datetime | None:
    """Convert a ZIP entry's DOS timestamp; a zeroed date field holds no time at all."""
    try:
        return datetime(*info.date_time)
    except ValueError:
        return None


def _is_image(name: str) -> bool:
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def iter_pages(path: Path) -> Iterator[PageEntry]:
    """Yield the image entries of a CBZ archive in archive order.

    Directories and non-image entries (ComicInfo.xml, etc.) are skipped.

    Raises:
        ArchiveReadError: If the archive or one of its entries is unreadable.
    """
    try:
        archive = zipfile.ZipFile(path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveReadError(f"cannot open {path.name}: {exc}") from exc

    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            if not _is_image(info.filename):
                logger.debug("Skipping non-image entry %s in %s", info.filename, path.name)
                continue
            # zlib.error: corrupt stream. EOFError: truncated stream.
            # RuntimeError: encrypted entry, or NotImplementedError for an unknown compression.
            try:
                data = archive.read(info)
            except (
                OSError,
                EOFError,
                RuntimeError,
                zipfile.BadZipFile,
                zlib.error,
            ) as exc:
                raise ArchiveReadError(f"failed to read {info.filename}: {exc}") from exc
            yield PageEntry(name=info.filename, data=data, timestamp=_entry_timestamp(info))


@dataclass
class CollectResult:
    """CBZ files found under the given paths, and the files passed over."""

    archives: list[Path] = field(default_factory=list)
    skipped: list[tuple[Path, str]] = field(default_factory=list)


def _is_cbz(path: Path) -> bool:
    return path.suffix.lower() == CBZ_EXTENSION


def collect_archives(paths: Iterable[Path]) -> CollectResult:
    """Expand paths into the list of CBZ files to check.

    A file path is used directly; a directory contributes the CBZ files it
    contains (not recursively), sorted by name. Non-CBZ files are recorded
    as skipped. Input order is preserved.
    """
    result = CollectResult()
    for path in paths:
        if not path.is_dir():
            if _is_cbz(path):
                result.archives.append(path)
            else:
                result.skipped.append((path, "not a CBZ"))
            continue

        for entry in sorted(path.iterdir()):
            if entry.is_dir():
                logger.debug("Not descending into %s", entry)
            elif _is_cbz(entry):
                result.archives.append(entry)
            else:
                result.skipped.append((entry, "not a CBZ"))
    return result
