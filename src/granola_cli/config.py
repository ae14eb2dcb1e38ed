"""Application settings via pydantic-settings."""

import os
import sys

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CACHE_FILENAME = "cache-v3.json"
DEFAULT_EXPORT_DIR = "./granola-exports"


def default_cache_path(platform: str | None = None) -> str:
    """Return where the Granola desktop app keeps its cache on *platform*."""
    platform = platform or sys.platform
    if platform == "darwin":
        base = os.path.join("~", "Library", "Application Support")
    elif platform.startswith("win"):
        base = os.environ.get("APPDATA") or os.path.join("~", "AppData", "Roaming")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or os.path.join("~", ".config")
    return os.path.expanduser(os.path.join(base, "Granola", CACHE_FILENAME))


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GRANOLA_")

    cache_path: str = Field(
        default_factory=default_cache_path,
        description=(
            "Path to Granola's local cache JSON file. "
            "Defaults to the standard location for this platform."
        ),
    )
    export_dir: str = Field(
        default=DEFAULT_EXPORT_DIR,
        description="Directory that `export` writes to when --output is not given.",
    )
    log_level: str = Field(default="warning", description="Logging level")
    timezone: str | None = Field(
        default=None,
        description="IANA zone for displayed times. Defaults to the system zone.",
    )

    @model_validator(mode="after")
    def _expand_paths(self) -> "Config":
        object.__setattr__(self, "cache_path", os.path.expanduser(self.cache_path))
        object.__setattr__(self, "export_dir", os.path.expanduser(self.export_dir))
        return self
