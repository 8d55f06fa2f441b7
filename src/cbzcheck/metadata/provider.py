# ABOUTME: CandidateProvider protocol defining the contract for bibliographic sources.
# ABOUTME: A provider turns a series title into zero or more Candidate records, or fails loudly.

from typing import Protocol, runtime_checkable

from cbzcheck.metadata.types import Candidate


class ResolutionFailedError(Exception):
    """Raised when the bibliographic source cannot be queried or understood.

    Distinct from an empty result: "no candidate found" is a valid answer,
    a timeout or an unparseable page is not.
    """


@runtime_checkable
class CandidateProvider(Protocol):
    """Protocol for bibliographic lookup services.

    Implementations query a single source; there is no fallback chain.
    """

    @property
    def name(self) -> str: ...

    def search(self, title: str, volume: int | None = None) -> list[Candidate]: ...
