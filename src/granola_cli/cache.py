"""Cache loading and read-only queries over the Granola snapshot.

Granola writes ``cache-v3.json`` as a JSON object whose ``cache`` field
is itself a JSON-encoded string. Loading is therefore two explicit
stages: :func:`read_envelope` parses the outer file into a
:class:`CacheEnvelope`, and :meth:`CacheEnvelope.decode` unwraps the
inner string into the state container holding ``documents`` and
``transcripts``. The file is only ever opened for reading.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import default_cache_path
from .errors import CacheNotFoundError, CacheParseError, CacheReadError
from .types import CacheState, Document, TranscriptSegment, resolve_person_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEnvelope:
    """The outer JSON object of the cache file, before unwrapping."""

    path: Path
    raw: dict[str, Any]

    def decode(self) -> dict[str, Any]:
        """Return the state container, decoding the nested JSON string if present."""
        payload = self.raw.get("cache")
        if isinstance(payload, str):
            try:
                inner = json.loads(payload)
            except json.JSONDecodeError as e:
                raise CacheParseError(
                    f"Failed to decode nested cache JSON in {self.path}: {e}",
                    {"path": str(self.path)},
                ) from e
        elif isinstance(payload, dict):
            inner = payload
        else:
            inner = self.raw

        if not isinstance(inner, dict):
            raise CacheParseError(
                f"Unexpected cache structure in {self.path}: "
                f"expected an object, got {type(inner).__name__}",
                {"path": str(self.path)},
            )

        state = inner.get("state")
        return state if isinstance(state, dict) else inner


def read_envelope(path: str | Path) -> CacheEnvelope:
    """Read and parse the outer JSON layer of the cache file."""
    path = Path(path)
    if not path.exists():
        raise CacheNotFoundError(
            f"Granola cache not found at {path}. Is Granola installed?",
            {"path": str(path)},
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CacheParseError(
            f"Failed to parse cache file {path}: {e}", {"path": str(path)}
        ) from e
    except OSError as e:
        raise CacheReadError(
            f"Failed to read cache file {path}: {e.strerror or e}", {"path": str(path)}
        ) from e

    if not isinstance(raw, dict):
        raise CacheParseError(
            f"Unexpected cache structure in {path}: "
            f"expected an object, got {type(raw).__name__}",
            {"path": str(path)},
        )
    return CacheEnvelope(path=path, raw=raw)


def _parse_documents(documents_raw: Any) -> dict[str, Document]:
    if not isinstance(documents_raw, dict):
        return {}

    documents: dict[str, Document] = {}
    for doc_id, data in documents_raw.items():
        if not isinstance(data, dict):
            logger.warning("Skipping document %s: not an object", doc_id)
            continue
        try:
            documents[doc_id] = Document.model_validate(
                {**data, "id": data.get("id") or doc_id}
            )
        except ValidationError as e:
            logger.warning("Skipping document %s: %s", doc_id, e)
    return documents


def _parse_transcripts(
    transcripts_raw: Any,
) -> dict[str, list[TranscriptSegment]]:
    if not isinstance(transcripts_raw, dict):
        return {}

    transcripts: dict[str, list[TranscriptSegment]] = {}
    for doc_id, segments_raw in transcripts_raw.items():
        if not isinstance(segments_raw, list):
            logger.warning("Skipping transcript %s: not a segment list", doc_id)
            continue
        segments: list[TranscriptSegment] = []
        for segment in segments_raw:
            try:
                segments.append(TranscriptSegment.model_validate(segment))
            except ValidationError as e:
                logger.warning("Skipping transcript segment for %s: %s", doc_id, e)
        transcripts[doc_id] = segments
    return transcripts


def build_state(container: dict[str, Any]) -> CacheState:
    """Build a snapshot from a decoded state container."""
    return CacheState(
        documents=_parse_documents(container.get("documents")),
        transcripts=_parse_transcripts(container.get("transcripts")),
    )


class GranolaCache:
    """Read-only accessors and search over one loaded snapshot."""

    def __init__(self, state: CacheState, path: str | None = None) -> None:
        self.state = state
        self.path = path

    @property
    def document_count(self) -> int:
        return len(self.state.documents)

    @property
    def transcript_count(self) -> int:
        return len(self.state.transcripts)

    def get_documents(self) -> list[Document]:
        return list(self.state.documents.values())

    def get_document(self, doc_id: str) -> Document | None:
        """Exact-match lookup; ``None`` when absent."""
        return self.state.documents.get(doc_id)

    def get_transcript(self, doc_id: str) -> list[TranscriptSegment]:
        """Transcript segments in storage order, or ``[]`` if none were recorded."""
        return list(self.state.transcripts.get(doc_id, []))

    def get_recent_documents(
        self, days: int = 7, now: datetime | None = None
    ) -> list[Document]:
        """Documents created within the last *days* days, most recent first.

        Documents without a parseable ``created_at`` are excluded.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=days)

        recent: list[tuple[datetime, Document]] = []
        for doc in self.state.documents.values():
            created = doc.created
            if created is not None and cutoff <= created <= now:
                recent.append((created, doc))

        recent.sort(key=lambda pair: pair[0], reverse=True)
        return [doc for _created, doc in recent]

    def search_documents(self, query: str) -> list[Document]:
        """Case-insensitive substring search over title, plain notes and attendees.

        Results keep snapshot enumeration order; there is no ranking.
        """
        q = query.lower()
        results: list[Document] = []
        for doc in self.state.documents.values():
            title = doc.title.lower()
            notes = (doc.notes_plain or "").lower()
            attendees = " ".join(
                resolve_person_name(a) or "" for a in doc.attendees
            ).lower()
            if q in title or q in notes or q in attendees:
                results.append(doc)
        return results


def load_cache(cache_path: str | Path | None = None) -> GranolaCache:
    """Load and parse Granola cache data.

    Args:
        cache_path: Path to the cache file. Defaults to the platform location.

    Raises:
        CacheNotFoundError: The file does not exist.
        CacheParseError: Either JSON layer is malformed.
        CacheReadError: The file exists but cannot be read.
    """
    path = Path(cache_path or default_cache_path())
    logger.debug("Loading Granola cache from %s", path)

    envelope = read_envelope(path)
    cache = GranolaCache(build_state(envelope.decode()), path=str(path))

    logger.debug(
        "Loaded %d documents and %d transcripts",
        cache.document_count,
        cache.transcript_count,
    )
    return cache
