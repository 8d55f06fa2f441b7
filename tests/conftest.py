# ABOUTME: Shared pytest fixtures for cbzcheck tests.
# ABOUTME: Provides CBZ archive builders, a reference candidate, and fake providers.

from collections.abc import Callable
from pathlib import Path

import pytest

from cbzcheck.metadata.provider import ResolutionFailedError
from cbzcheck.metadata.types import Candidate
from tests.fixtures.builders import ZIP_EPOCH_TUPLE, FakeProvider, make_image, write_cbz


@pytest.fixture
def cbz_factory(tmp_path: Path) -> Callable[..., Path]:
    """Build a CBZ in tmp_path from page widths, all timestamps at the ZIP epoch."""

    def build(name: str, widths: list[int] | None = None, **kwargs) -> Path:
        pages = [
            (f"{i:03d}.png", make_image(width, 150), ZIP_EPOCH_TUPLE)
            for i, width in enumerate(widths or [1000, 1000], start=1)
        ]
        return write_cbz(tmp_path / name, pages, **kwargs)

    return build


@pytest.fixture
def series_candidate() -> Candidate:
    """The bibliographic record matching "Series-01-2010-Smith"."""
    return Candidate(
        title="Series",
        year=2010,
        authors=("Smith",),
        source="https://www.bedetheque.com/BD-Series-Tome-1-1.html",
        volume=1,
    )


@pytest.fixture
def failing_provider() -> FakeProvider:
    """A provider whose lookups always fail."""
    return FakeProvider(error=ResolutionFailedError("bedetheque lookup failed: timed out"))
