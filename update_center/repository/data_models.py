"""
Data models for released artifacts and their per-plugin histories.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import total_ordering
from typing import Any

_TOKEN_PATTERN = re.compile(r"\d+|[a-zA-Z]+")

# Pre-release qualifiers sort below the plain release, in this order
_PRE_RELEASE_RANK = {
    "alpha": 0,
    "a": 0,
    "beta": 1,
    "b": 1,
    "milestone": 2,
    "m": 2,
    "rc": 3,
    "cr": 3,
    "snapshot": 4,
}
_RELEASE_MARKERS = {"ga", "final", "release"}
_PADDING = (1, 0, "")


@total_ordering
class VersionNumber:
    """
    Maven-style version number.

    Numeric components compare numerically; qualifiers such as ``alpha``,
    ``beta`` or ``rc`` sort below the plain release, any other qualifier sorts
    above it but below the next numeric component. ``1.0`` and ``1.0.0`` are
    equal. :attr:`ANY` sorts above every version and stands for "uncapped".
    """

    ANY: "VersionNumber"

    def __init__(self, version: str):
        self.raw = str(version).strip()
        self._key = self._parse(self.raw)

    @staticmethod
    def _strip_zeros(key: list[tuple[int, int, str]]) -> None:
        # 1.0 == 1.0.0 and 1.0-beta == 1-beta
        while key and key[-1] == (2, 0, ""):
            key.pop()

    @classmethod
    def _parse(cls, version: str) -> tuple[tuple[int, int, str], ...]:
        key: list[tuple[int, int, str]] = []
        for token in _TOKEN_PATTERN.findall(version.lower()):
            if token.isdigit():
                key.append((2, int(token), ""))
                continue
            if token in _RELEASE_MARKERS:
                continue
            cls._strip_zeros(key)
            if token in _PRE_RELEASE_RANK:
                key.append((0, _PRE_RELEASE_RANK[token], ""))
            else:
                key.append((1, 1, token))

        cls._strip_zeros(key)
        return tuple(key)

    def _padded(self, other: "VersionNumber"):
        length = max(len(self._key), len(other._key))
        mine = self._key + (_PADDING,) * (length - len(self._key))
        theirs = other._key + (_PADDING,) * (length - len(other._key))
        return mine, theirs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionNumber):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: "VersionNumber") -> bool:
        if not isinstance(other, VersionNumber):
            return NotImplemented
        mine, theirs = self._padded(other)
        return mine < theirs

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"VersionNumber({self.raw!r})"

    @classmethod
    def _unbounded(cls) -> "VersionNumber":
        version = cls.__new__(cls)
        version.raw = "*"
        # ranks above every parsed component, so every real version is lower
        version._key = ((3, 0, ""),)
        return version


VersionNumber.ANY = VersionNumber._unbounded()


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Maven coordinate of a published artifact."""

    group_id: str
    artifact_id: str
    version: str
    timestamp: int  # release time, milliseconds since epoch (UTC)

    @property
    def gav(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class Dependency:
    """Plugin-to-plugin dependency declared by a release."""

    name: str
    version: str
    optional: bool = False

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "optional": self.optional, "version": self.version}


def format_date(timestamp: int) -> str:
    """Format a millisecond timestamp as a ``YYYY-MM-DD`` UTC date."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


def format_build_date(timestamp: int) -> str:
    """Format a millisecond timestamp the way buildDate appears in the catalog."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%b %d, %Y")


@dataclass(frozen=True)
class PluginRelease:
    """One released version of a plugin (an HPI in the artifact repository)."""

    coordinate: ArtifactCoordinate
    url: str = ""
    wiki_url: str | None = None  # <url> element from the POM
    description: str | None = None
    required_core: str | None = None
    dependencies: tuple[Dependency, ...] = ()
    sha1: str | None = None

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def version(self) -> VersionNumber:
        return VersionNumber(self.coordinate.version)

    @property
    def timestamp(self) -> int:
        return self.coordinate.timestamp

    @property
    def release_date(self) -> str:
        return format_date(self.coordinate.timestamp)

    @property
    def build_date(self) -> str:
        return format_build_date(self.coordinate.timestamp)


@dataclass(frozen=True)
class CoreRelease:
    """One released version of the core war."""

    coordinate: ArtifactCoordinate
    url: str = ""
    sha1: str | None = None

    @property
    def version(self) -> VersionNumber:
        return VersionNumber(self.coordinate.version)

    def to_json(self, name: str) -> dict[str, Any]:
        """Render the catalog record for this war under the given name."""
        json_data: dict[str, Any] = {
            "buildDate": format_build_date(self.coordinate.timestamp),
            "name": name,
            "url": self.url,
            "version": self.coordinate.version,
        }
        if self.sha1:
            json_data["sha1"] = self.sha1
        return json_data


@dataclass(frozen=True)
class PluginHistory:
    """
    All visible releases of one plugin, ordered by ascending version.

    Histories are never modified in place; filtering produces a new history
    through :meth:`with_releases`.
    """

    artifact_id: str
    releases: tuple[PluginRelease, ...] = field(default=())

    def __post_init__(self):
        ordered = sorted(self.releases, key=lambda r: r.version)
        versions = [r.version for r in ordered]
        if len(set(versions)) != len(versions):
            raise ValueError(f"Duplicate versions in history of {self.artifact_id}")
        object.__setattr__(self, "releases", tuple(ordered))

    @classmethod
    def of(cls, releases: Iterable[PluginRelease]) -> "PluginHistory":
        """Build a history from releases that all share one artifactId."""
        releases = tuple(releases)
        if not releases:
            raise ValueError("A plugin history needs at least one release")
        return cls(releases[0].artifact_id, releases)

    def with_releases(self, releases: Iterable[PluginRelease]) -> "PluginHistory":
        """Derive a history with the given subset of releases."""
        return PluginHistory(self.artifact_id, tuple(releases))

    def __len__(self) -> int:
        return len(self.releases)

    def __iter__(self):
        return iter(self.releases)

    def __bool__(self) -> bool:
        return bool(self.releases)

    @property
    def versions(self) -> list[VersionNumber]:
        return [r.version for r in self.releases]

    def first(self) -> PluginRelease:
        """The oldest (lowest) version."""
        return self.releases[0]

    def latest(self) -> PluginRelease:
        """The newest (highest) version."""
        return self.releases[-1]

    def previous(self, release: PluginRelease) -> PluginRelease | None:
        """The release right before ``release``, if any."""
        index = self.releases.index(release)
        return self.releases[index - 1] if index > 0 else None

    def is_first(self, release: PluginRelease) -> bool:
        return bool(self.releases) and self.first().version == release.version

    def is_latest(self, release: PluginRelease) -> bool:
        return bool(self.releases) and self.latest().version == release.version


@dataclass(frozen=True)
class DatedRelease:
    """A release together with the history of the view that listed it."""

    history: PluginHistory
    release: PluginRelease
