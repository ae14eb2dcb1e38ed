"""Resolution of full or shortened meeting identifiers."""

from collections.abc import Iterable

from .errors import AmbiguousIdError, MeetingNotFoundError
from .types import Document

# Granola document ids are UUIDs
FULL_ID_LENGTH = 36


def match_prefix(documents: Iterable[Document], prefix: str) -> list[Document]:
    """Return every document whose id starts with *prefix*."""
    return [doc for doc in documents if doc.id.startswith(prefix)]


def resolve_document_id(documents: Iterable[Document], ident: str) -> Document:
    """Resolve *ident* to exactly one document.

    Identifiers of full length are matched exactly. Anything shorter is
    treated as a prefix and must match a single document.

    Raises:
        MeetingNotFoundError: Nothing matches.
        AmbiguousIdError: A prefix matches more than one document.
    """
    if len(ident) >= FULL_ID_LENGTH:
        for doc in documents:
            if doc.id == ident:
                return doc
        raise MeetingNotFoundError(f"Meeting not found: {ident}", {"id": ident})

    matches = match_prefix(documents, ident)
    if len(matches) > 1:
        raise AmbiguousIdError(ident, matches)
    if not matches:
        raise MeetingNotFoundError(f"Meeting not found: {ident}", {"id": ident})
    return matches[0]
