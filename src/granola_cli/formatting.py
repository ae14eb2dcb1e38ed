"""Markdown rendering for meetings and transcripts.

All functions here are pure: they take snapshot records and return text.
Output is deterministic for a given timezone.
"""

import re
from datetime import datetime, timezone, tzinfo

from .timezone import format_local_datetime, format_local_time
from .types import Document, TranscriptSegment

NO_TRANSCRIPT = "No transcript available."
NO_NOTES = "No notes available."
SLUG_MAX_LENGTH = 50

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _display_date(doc: Document, tz: tzinfo | None) -> str:
    created = doc.created
    if created is None:
        return doc.created_at or "Unknown"
    return format_local_datetime(created, tz)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_document(
    doc: Document, include_notes: bool = False, tz: tzinfo | None = None
) -> str:
    """Render a meeting's header, participants, summary and (optionally) notes."""
    lines = [
        f"# {doc.title}",
        "",
        f"**ID:** {doc.id}",
        f"**Date:** {_display_date(doc, tz)}",
    ]

    attendees = doc.attendee_names
    if attendees:
        lines.append(f"**Participants:** {', '.join(attendees)}")

    if doc.summary:
        lines.extend(["", "## Summary", doc.summary])

    notes = doc.markdown_notes
    if include_notes and notes:
        lines.extend(["", "## Notes", notes])

    return "\n".join(lines)


def _segment_order(segment: TranscriptSegment) -> tuple:
    start = segment.start
    # Unparseable timestamps sort first; the rest of the key makes ties deterministic
    return (
        start is not None,
        start or _EPOCH,
        segment.end_timestamp,
        segment.id,
        segment.text,
    )


def format_transcript(
    segments: list[TranscriptSegment], tz: tzinfo | None = None
) -> str:
    """Render segments as ``[time] text`` lines in chronological order.

    The input list is not modified.
    """
    if not segments:
        return NO_TRANSCRIPT

    lines: list[str] = []
    for segment in sorted(segments, key=_segment_order):
        start = segment.start
        time = format_local_time(start, tz) if start else segment.start_timestamp
        lines.append(f"[{time}] {segment.text}")
    return "\n".join(lines)


def format_export(
    doc: Document,
    segments: list[TranscriptSegment],
    tz: tzinfo | None = None,
) -> str:
    """Render the standalone markdown file written by ``export``."""
    attendees = doc.attendee_names
    participants = ", ".join(_quote(name) for name in attendees)

    parts = [
        "---",
        f"id: {doc.id}",
        f"title: {_quote(doc.title)}",
        f"date: {doc.created_at}",
        f"participants: [{participants}]",
        "---",
        "",
        f"# {doc.title}",
        "",
        f"**Date:** {_display_date(doc, tz)}",
        f"**Participants:** {', '.join(attendees) or 'Unknown'}",
        "",
    ]

    if doc.summary:
        parts.extend(["## Summary", "", doc.summary, ""])

    parts.extend(["## Notes", "", doc.markdown_notes or NO_NOTES, ""])
    parts.extend(["## Transcript", "", format_transcript(segments, tz), ""])

    return "\n".join(parts)


def slugify(title: str) -> str:
    """Lowercase *title*, collapse non-alphanumeric runs to ``-`` and truncate.

    Leading and trailing separators are kept, so ``"(Draft) Plan"`` becomes
    ``"-draft-plan"``.
    """
    return _NON_ALNUM.sub("-", title.lower())[:SLUG_MAX_LENGTH]


def export_filename(doc: Document) -> str:
    """``YYYY-MM-DD-<slug>.md`` using the UTC creation date."""
    created = doc.created
    date = created.astimezone(timezone.utc).date().isoformat() if created else "undated"
    return f"{date}-{slugify(doc.title)}.md"
