"""
Run configuration for the update center generator.
"""

from dataclasses import dataclass, replace
from pathlib import Path

from .wiki import DEFAULT_WIKI_URL


class UpdateCenterConfigError(Exception):
    """Raised for inconsistent run options."""

    pass


@dataclass
class UpdateCenterConfig:
    """Options for one generator run."""

    id: str
    manifest: Path | None = None
    output: Path = Path("update-center.json")
    release_history: Path = Path("release-history.json")
    plugin_count_txt: Path | None = None
    latest_core_txt: Path | None = None
    wiki_url: str = DEFAULT_WIKI_URL
    cache_dir: Path | None = None
    nowiki: bool = False
    max_plugins: int | None = None
    cap_plugin: str | None = None
    cap_core: str | None = None
    experimental_only: bool = False
    no_experimental: bool = False
    connection_check_url: str | None = None
    pretty: bool = False

    def __post_init__(self):
        """Validate option combinations."""
        if not self.id:
            raise UpdateCenterConfigError("An update center id is required")
        if self.experimental_only and self.no_experimental:
            raise UpdateCenterConfigError(
                "--experimental-only and --no-experimental are mutually exclusive"
            )
        if self.max_plugins is not None and self.max_plugins < 0:
            raise UpdateCenterConfigError("--max-plugins must not be negative")

    @property
    def effective_cap_core(self) -> str | None:
        """Core cap, defaulting to the plugin cap."""
        return self.cap_core if self.cap_core is not None else self.cap_plugin

    def with_www_layout(self, www: Path) -> "UpdateCenterConfig":
        """Place every output file in the standard update site layout under ``www``."""
        return replace(
            self,
            output=www / "update-center.json",
            release_history=www / "release-history.json",
            latest_core_txt=www / "latestCore.txt",
        )
