"""Command line interface for browsing the Granola meeting cache."""

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path

from .cache import GranolaCache, load_cache
from .config import Config
from .errors import (
    CacheNotFoundError,
    CacheParseError,
    CacheReadError,
    GranolaError,
    UsageError,
)
from .formatting import export_filename, format_document, format_export, format_transcript
from .resolve import resolve_document_id
from .timezone import format_local_date, format_local_time, local_timezone
from .types import Document

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7
SEARCH_DISPLAY_LIMIT = 20
LIST_ATTENDEE_LIMIT = 3

USAGE = """
granola - Access your Granola meeting notes

COMMANDS:
  list [--days N]           List recent meetings (default: 7 days)
  show <id> [--transcript]  Show meeting details
  search <query>            Search meetings by title, notes, or participant
  export <id> [--output DIR] Export meeting to markdown

OPTIONS:
  --days N       Number of days to look back (default: 7)
  --transcript   Include full transcript in output
  --output DIR   Output directory for export (default: ./granola-exports)
  --help         Show this help message

ENVIRONMENT:
  GRANOLA_CACHE_PATH   Cache file to read instead of the platform default
  GRANOLA_EXPORT_DIR   Default export directory
  GRANOLA_TIMEZONE     IANA zone used for displayed times
  GRANOLA_LOG_LEVEL    Logging level (default: warning)

EXAMPLES:
  granola list --days 30
  granola show abc123 --transcript
  granola search "product review"
  granola export abc123 --output ./meetings
"""

# Commands that need a positional argument, and the usage line shown without one
_POSITIONAL_USAGE = {
    "show": "Usage: granola show <meeting-id> [--transcript]",
    "search": "Usage: granola search <query>",
    "export": "Usage: granola export <meeting-id> [--output DIR]",
}


@dataclass
class ParsedArgs:
    command: str = ""
    positional: list[str] = field(default_factory=list)
    flags: dict[str, str | bool] = field(default_factory=dict)


def parse_args(argv: Sequence[str]) -> ParsedArgs:
    """Split *argv* into a command, positional arguments and ``--flags``.

    The first token not starting with ``-`` is the command. A ``--flag``
    takes the following token as its value unless that token starts with
    ``-``, in which case the flag is ``True``.
    """
    parsed = ParsedArgs()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if not parsed.command and not arg.startswith("-"):
            parsed.command = arg
        elif arg.startswith("--"):
            key = arg[2:]
            nxt = argv[i + 1] if i + 1 < len(argv) else ""
            if nxt and not nxt.startswith("-"):
                parsed.flags[key] = nxt
                i += 1
            else:
                parsed.flags[key] = True
        elif not arg.startswith("-"):
            parsed.positional.append(arg)
        i += 1
    return parsed


def parse_days(value: str | bool | None) -> int:
    """Interpret ``--days``; anything but a positive integer means the default."""
    if isinstance(value, str):
        try:
            days = int(value)
        except ValueError:
            return DEFAULT_DAYS
        if days > 0:
            return days
    return DEFAULT_DAYS


def configure_logging(level: str) -> None:
    package_logger = logging.getLogger("granola_cli")
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _short_attendees(doc: Document) -> str:
    names = (a.short_name for a in doc.attendees[:LIST_ATTENDEE_LIMIT])
    return ", ".join(name for name in names if name)


def list_meetings(cache: GranolaCache, days: int, tz: tzinfo | None) -> None:
    docs = cache.get_recent_documents(days)

    if not docs:
        print(f"No meetings found in the last {days} days.")
        return

    print(f"## Recent Meetings (last {days} days)\n")

    for doc in docs:
        created = doc.created
        date = format_local_date(created, tz)
        time = format_local_time(created, tz, seconds=False)
        print(f"- **{doc.title}**")
        print(f"  ID: `{doc.id[:8]}` | {date} {time}")
        attendees = _short_attendees(doc)
        if attendees:
            print(f"  With: {attendees}")
        print("")

    print(f"\nTotal: {len(docs)} meetings")


def show_meeting(
    cache: GranolaCache, ident: str, include_transcript: bool, tz: tzinfo | None
) -> None:
    doc = resolve_document_id(cache.get_documents(), ident)

    print(format_document(doc, include_notes=True, tz=tz))

    if include_transcript:
        print("\n## Transcript\n")
        print(format_transcript(cache.get_transcript(doc.id), tz=tz))


def search_meetings(cache: GranolaCache, query: str, tz: tzinfo | None) -> None:
    results = cache.search_documents(query)

    if not results:
        print(f'No meetings found matching "{query}"')
        return

    print(f'## Search Results for "{query}"\n')

    for doc in results[:SEARCH_DISPLAY_LIMIT]:
        created = doc.created
        date = format_local_date(created, tz) if created else "Unknown"
        print(f"- **{doc.title}**")
        print(f"  ID: `{doc.id[:8]}` | {date}")
        print("")

    print(f"\nFound: {len(results)} meetings")


def export_meeting(
    cache: GranolaCache, ident: str, output_dir: str, tz: tzinfo | None
) -> Path:
    doc = resolve_document_id(cache.get_documents(), ident)

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    content = format_export(doc, cache.get_transcript(doc.id), tz=tz)
    filepath = out / export_filename(doc)
    filepath.write_text(content, encoding="utf-8")
    logger.debug("Wrote %d bytes to %s", len(content), filepath)

    print(f"Exported to: {filepath}")
    return filepath


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _run_list(cache: GranolaCache, args: ParsedArgs, config: Config, tz: tzinfo | None) -> None:
    list_meetings(cache, parse_days(args.flags.get("days")), tz)


def _run_show(cache: GranolaCache, args: ParsedArgs, config: Config, tz: tzinfo | None) -> None:
    show_meeting(cache, args.positional[0], bool(args.flags.get("transcript")), tz)


def _run_search(cache: GranolaCache, args: ParsedArgs, config: Config, tz: tzinfo | None) -> None:
    search_meetings(cache, " ".join(args.positional), tz)


def _run_export(cache: GranolaCache, args: ParsedArgs, config: Config, tz: tzinfo | None) -> None:
    output = args.flags.get("output")
    export_meeting(
        cache,
        args.positional[0],
        output if isinstance(output, str) else config.export_dir,
        tz,
    )


COMMANDS: dict[str, Callable[[GranolaCache, ParsedArgs, Config, tzinfo | None], None]] = {
    "list": _run_list,
    "show": _run_show,
    "search": _run_search,
    "export": _run_export,
}


def run(argv: Sequence[str], config: Config | None = None) -> int:
    """Execute one command and return the process exit status."""
    args = parse_args(argv)

    if not args.command or args.flags.get("help"):
        print(USAGE)
        return 0

    handler = COMMANDS.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        print(USAGE)
        return 1

    config = config or Config()
    configure_logging(config.log_level)
    tz = local_timezone(config.timezone)

    try:
        if args.command in _POSITIONAL_USAGE and not args.positional:
            raise UsageError(_POSITIONAL_USAGE[args.command])
        cache = load_cache(config.cache_path)
        handler(cache, args, config, tz)
    except (CacheNotFoundError, CacheParseError, CacheReadError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return e.exit_code
    except GranolaError as e:
        print(e.message, file=sys.stderr)
        return e.exit_code

    return 0


def main() -> None:
    """CLI entry point for ``granola``."""
    sys.exit(run(sys.argv[1:]))
