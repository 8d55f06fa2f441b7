# ABOUTME: Metadata package for filename parsing, bibliographic lookup, and matching.
# ABOUTME: Exports the ParsedName and Candidate records used throughout cbzcheck.

from cbzcheck.metadata.filename import MalformedNameError, format_filename, parse_filename
from cbzcheck.metadata.matcher import MatchKind, MatchResult, match_candidates
from cbzcheck.metadata.provider import CandidateProvider, ResolutionFailedError
from cbzcheck.metadata.types import Candidate, CountOverflowError, ParsedName

__all__ = [
    "Candidate",
    "CandidateProvider",
    "CountOverflowError",
    "MalformedNameError",
    "MatchKind",
    "MatchResult",
    "ParsedName",
    "ResolutionFailedError",
    "format_filename",
    "match_candidates",
    "parse_filename",
]
