"""Shared fixtures for tests."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from granola_cli.cache import GranolaCache, load_cache
from granola_cli.config import Config

WEEKLY_ID = "abc12345-0000-4000-8000-000000000001"
ROADMAP_ID = "abc99999-0000-4000-8000-000000000002"
OFFSITE_ID = "f0e1d2c3-0000-4000-8000-000000000003"


def iso_days_ago(days: float) -> str:
    """ISO timestamp *days* before now, in Granola's ``Z``-suffixed form."""
    dt = datetime.now(timezone.utc) - timedelta(days=days)
    return dt.isoformat().replace("+00:00", "Z")


# Sample data matching Granola's real cache layout: documents keyed by id,
# participants under people.attendees, transcripts as segment lists.
SAMPLE_STATE: dict = {
    "documents": {
        WEEKLY_ID: {
            "id": WEEKLY_ID,
            "title": "Weekly Sync",
            "created_at": iso_days_ago(2),
            "updated_at": iso_days_ago(2),
            "type": "meeting",
            "notes_markdown": "# Plan",
            "notes_plain": "Plan for the quarter",
            "summary": "Agreed on the quarterly plan",
            "people": {
                "creator": {"name": "Alice Smith", "email": "alice@example.com"},
                "attendees": [
                    {
                        "email": "alice@example.com",
                        "details": {
                            "person": {"name": {"fullName": "Alice Smith"}},
                            "company": {"name": "Acme"},
                        },
                    },
                    {"email": "bob@example.com"},
                    {"name": "nobody"},
                ],
            },
            "google_calendar_event": {
                "summary": "Weekly Sync",
                "start": {"dateTime": "2025-01-15T10:00:00Z"},
            },
            "unknown_field": {"ignored": True},
        },
        ROADMAP_ID: {
            "id": ROADMAP_ID,
            "title": "Product Roadmap Review",
            "created_at": iso_days_ago(5),
            "updated_at": iso_days_ago(5),
            "notes_plain": "Discuss roadmap priorities",
            "people": {
                "attendees": [
                    {"details": {"person": {"name": {"fullName": "Carol Jones"}}}},
                ],
            },
        },
        OFFSITE_ID: {
            "id": OFFSITE_ID,
            "title": "Quarterly Offsite",
            "created_at": iso_days_ago(40),
            "updated_at": iso_days_ago(40),
        },
    },
    "transcripts": {
        WEEKLY_ID: [
            {
                "id": "seg-2",
                "document_id": WEEKLY_ID,
                "start_timestamp": "2025-01-15T10:00:05Z",
                "end_timestamp": "2025-01-15T10:00:09Z",
                "text": "Let's review the plan.",
                "source": "system",
                "is_final": True,
            },
            {
                "id": "seg-1",
                "document_id": WEEKLY_ID,
                "start_timestamp": "2025-01-15T10:00:00Z",
                "end_timestamp": "2025-01-15T10:00:04Z",
                "text": "Good morning everyone.",
                "source": "microphone",
                "is_final": True,
            },
            {
                "id": "seg-3",
                "document_id": WEEKLY_ID,
                "start_timestamp": "2025-01-15T10:01:00Z",
                "end_timestamp": "2025-01-15T10:01:03Z",
                "text": "Sounds good",
                "source": "microphone",
                "is_final": False,
            },
        ],
    },
    "documentPanels": {},
}

# The same state wrapped in Granola's real JSON-string-inside-JSON format.
SAMPLE_CACHE_NESTED: dict = {
    "cache": json.dumps({"state": SAMPLE_STATE, "version": 3}),
}


@pytest.fixture
def sample_cache_path(tmp_path: Path) -> Path:
    """Write a flat (already unwrapped) cache to a temp file."""
    path = tmp_path / "cache-v3.json"
    path.write_text(json.dumps(SAMPLE_STATE))
    return path


@pytest.fixture
def sample_nested_cache_path(tmp_path: Path) -> Path:
    """Write the nested (real Granola) cache format to a temp file."""
    path = tmp_path / "cache-v3.json"
    path.write_text(json.dumps(SAMPLE_CACHE_NESTED))
    return path


@pytest.fixture
def cache(sample_nested_cache_path: Path) -> GranolaCache:
    return load_cache(sample_nested_cache_path)


@pytest.fixture
def config(sample_nested_cache_path: Path, tmp_path: Path) -> Config:
    return Config(
        cache_path=str(sample_nested_cache_path),
        export_dir=str(tmp_path / "exports"),
        timezone="UTC",
    )


def write_cache(path: Path, state: dict) -> Path:
    """Write *state* to *path* in the nested format."""
    path.write_text(json.dumps({"cache": json.dumps({"state": state})}))
    return path
