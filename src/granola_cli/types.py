"""Data models for the Granola cache snapshot."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .timezone import parse_timestamp

UNTITLED = "Untitled Meeting"


class _CacheModel(BaseModel):
    """Base for cache records: unknown keys ignored, camelCase aliases accepted."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PersonName(_CacheModel):
    full_name: str | None = Field(default=None, alias="fullName")


class PersonInfo(_CacheModel):
    name: PersonName | None = None
    avatar: str | None = None


class CompanyInfo(_CacheModel):
    name: str | None = None


class PersonDetails(_CacheModel):
    """Enrichment Granola attaches to a participant."""

    person: PersonInfo | None = None
    company: CompanyInfo | None = None


class Person(_CacheModel):
    """A meeting creator or attendee."""

    name: str | None = None
    email: str | None = None
    details: PersonDetails | None = None

    @property
    def full_name(self) -> str | None:
        if self.details and self.details.person and self.details.person.name:
            return self.details.person.name.full_name or None
        return None

    @property
    def company(self) -> str | None:
        if self.details and self.details.company:
            return self.details.company.name
        return None

    @property
    def short_name(self) -> str | None:
        """Full name, else the local part of the email address."""
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split("@")[0] or None
        return None


def resolve_person_name(person: Person) -> str | None:
    """Return the display name for *person*: full name, then email, else None."""
    return person.full_name or person.email or None


class People(_CacheModel):
    title: str | None = None
    creator: Person | None = None
    attendees: list[Person] = []

    @field_validator("attendees", mode="before")
    @classmethod
    def _null_attendees(cls, v: Any) -> Any:
        return [] if v is None else v


class EventTime(_CacheModel):
    date_time: str | None = Field(default=None, alias="dateTime")


class CalendarEvent(_CacheModel):
    """The Google Calendar event a meeting was created from."""

    summary: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None


def _node_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    if node.get("type") == "text":
        return str(node.get("text", ""))
    children = node.get("content")
    if not isinstance(children, list):
        return ""
    inline = all(isinstance(c, dict) and c.get("type") == "text" for c in children)
    return ("" if inline else "\n").join(_node_text(c) for c in children)


def extract_structured_notes(notes: Any) -> str:
    """Extract text from Granola's structured notes tree.

    Notes are stored as nested ``{"type": ..., "content": [...]}`` nodes
    with ``text`` leaves. Top-level blocks are separated by blank lines.
    """
    if not isinstance(notes, dict) or not isinstance(notes.get("content"), list):
        return ""
    blocks = (_node_text(block).strip() for block in notes["content"])
    return "\n\n".join(block for block in blocks if block)


class Document(_CacheModel):
    """A single meeting record."""

    id: str
    title: str = UNTITLED
    created_at: str = ""
    updated_at: str = ""
    notes_markdown: str | None = None
    notes_plain: str | None = None
    notes: Any = None
    summary: str | None = None
    overview: str | None = None
    people: People | None = None
    status: str | None = None
    type: str | None = None
    google_calendar_event: CalendarEvent | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, v: Any) -> Any:
        return v or UNTITLED

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _default_timestamp(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("people", mode="before")
    @classmethod
    def _people_from_list(cls, v: Any) -> Any:
        # Older caches store attendees as a bare list
        if isinstance(v, list):
            return {"attendees": v}
        return v

    @property
    def created(self) -> datetime | None:
        return parse_timestamp(self.created_at)

    @property
    def attendees(self) -> list[Person]:
        return self.people.attendees if self.people else []

    @property
    def attendee_names(self) -> list[str]:
        """Resolved attendee names; attendees with neither name nor email are dropped."""
        names = (resolve_person_name(p) for p in self.attendees)
        return [name for name in names if name]

    @property
    def markdown_notes(self) -> str:
        """Markdown notes, falling back to the structured notes tree."""
        if self.notes_markdown:
            return self.notes_markdown
        return extract_structured_notes(self.notes)


class TranscriptSegment(_CacheModel):
    """One timestamped utterance. Non-final segments may still be revised."""

    id: str = ""
    document_id: str = ""
    start_timestamp: str = ""
    end_timestamp: str = ""
    text: str = ""
    source: str | None = None
    is_final: bool = True

    @field_validator("start_timestamp", "end_timestamp", "text", mode="before")
    @classmethod
    def _null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def start(self) -> datetime | None:
        return parse_timestamp(self.start_timestamp)


class CacheState(BaseModel):
    """One read-only snapshot of the Granola cache."""

    model_config = ConfigDict(frozen=True)

    documents: dict[str, Document] = {}
    transcripts: dict[str, list[TranscriptSegment]] = {}
