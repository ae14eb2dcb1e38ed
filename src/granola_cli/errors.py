"""Error classes for the granola CLI.

Every error a user can trigger maps to one of these. The dispatcher
catches ``GranolaError`` and turns it into a message on stderr plus a
non-zero exit status; anything else is a bug and propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types import Document


class GranolaError(Exception):
    """Base error with a stable code and a process exit status."""

    code = "ERROR"
    exit_code = 1

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CacheNotFoundError(GranolaError):
    """Raised when the cache file does not exist at the resolved path."""

    code = "CACHE_NOT_FOUND"


class CacheParseError(GranolaError):
    """Raised when either JSON layer of the cache cannot be decoded."""

    code = "CACHE_PARSE_ERROR"


class CacheReadError(GranolaError):
    """Raised when the cache path exists but cannot be opened or read."""

    code = "CACHE_READ_ERROR"


class MeetingNotFoundError(GranolaError):
    """Raised when an identifier or prefix matches no meeting."""

    code = "NOT_FOUND"


class AmbiguousIdError(GranolaError):
    """Raised when an identifier prefix matches more than one meeting."""

    code = "AMBIGUOUS_ID"

    def __init__(self, prefix: str, matches: list[Document]) -> None:
        lines = [f'Multiple meetings match "{prefix}". Be more specific:']
        lines.extend(f"  {doc.id[:12]} - {doc.title}" for doc in matches)
        super().__init__("\n".join(lines), {"prefix": prefix})
        self.matches = matches


class UsageError(GranolaError):
    """Raised when a command is missing a required argument."""

    code = "USAGE"
