"""
Repository views over all released plugin and core versions.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..shared_utilities import get_logger
from .data_models import (
    ArtifactCoordinate,
    CoreRelease,
    DatedRelease,
    Dependency,
    PluginHistory,
    PluginRelease,
    VersionNumber,
)


class RepositoryError(Exception):
    """Raised when repository contents cannot be loaded."""

    pass


class RepositoryView(ABC):
    """
    Read-only projection of the artifact repository.

    Implementations provide the plugin histories and the core history;
    the release-by-date listing is derived from the plugin histories so that
    every view, decorated or not, reports releases against its own histories.
    """

    @abstractmethod
    def list_plugin_histories(self) -> dict[str, PluginHistory]:
        """Return artifactId -> history for every visible plugin."""

    @abstractmethod
    def core_history(self) -> dict[VersionNumber, CoreRelease]:
        """Return version -> core release, newest first."""

    def latest_core(self) -> CoreRelease | None:
        """The newest visible core release, if any."""
        return next(iter(self.core_history().values()), None)

    def list_releases_by_date(self) -> dict[str, dict[str, DatedRelease]]:
        """
        Group every visible plugin release by its UTC release date.

        Returns:
            ``YYYY-MM-DD`` -> (artifactId -> release), dates ascending and
            artifactIds sorted within a date. When a plugin released more
            than once on the same day the higher version is kept.
        """
        by_date: dict[str, dict[str, DatedRelease]] = {}
        for history in self.list_plugin_histories().values():
            for release in history:
                on_date = by_date.setdefault(release.release_date, {})
                current = on_date.get(history.artifact_id)
                if current is None or current.release.version < release.version:
                    on_date[history.artifact_id] = DatedRelease(history, release)

        return {
            date: dict(sorted(by_date[date].items()))
            for date in sorted(by_date)
        }


class InMemoryRepository(RepositoryView):
    """Repository view backed by release lists held in memory."""

    def __init__(
        self,
        plugins: Iterable[PluginHistory | PluginRelease] = (),
        core: Iterable[CoreRelease] = (),
    ):
        grouped: dict[str, list[PluginRelease]] = {}
        for item in plugins:
            if isinstance(item, PluginHistory):
                grouped.setdefault(item.artifact_id, []).extend(item.releases)
            else:
                grouped.setdefault(item.artifact_id, []).append(item)

        self._plugins = {
            artifact_id: PluginHistory(artifact_id, tuple(releases))
            for artifact_id, releases in grouped.items()
            if releases
        }
        self._core = {
            war.version: war
            for war in sorted(core, key=lambda w: w.version, reverse=True)
        }

    def list_plugin_histories(self) -> dict[str, PluginHistory]:
        return dict(self._plugins)

    def core_history(self) -> dict[VersionNumber, CoreRelease]:
        return dict(self._core)


def _parse_timestamp(value: Any) -> int:
    """Accept epoch milliseconds or an ISO-8601 string."""
    if isinstance(value, bool):
        raise RepositoryError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise RepositoryError(f"Invalid timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    raise RepositoryError(f"Invalid timestamp: {value!r}")


def _coordinate(entry: dict[str, Any], default_group: str) -> ArtifactCoordinate:
    return ArtifactCoordinate(
        group_id=entry.get("groupId", default_group),
        artifact_id=entry["artifactId"],
        version=str(entry["version"]),
        timestamp=_parse_timestamp(entry["timestamp"]),
    )


def load_manifest(path: str | Path) -> InMemoryRepository:
    """
    Load a repository from a JSON manifest.

    The manifest lists the releases found in the artifact repository::

        {
          "core": [{"version": "2.0", "timestamp": "2020-01-01T00:00:00Z",
                    "url": "..."}],
          "plugins": [{"groupId": "org.jenkins-ci.plugins", "artifactId": "git",
                       "version": "1.0", "timestamp": 1577836800000,
                       "url": "...", "wikiUrl": "...", "requiredCore": "1.424",
                       "dependencies": [{"name": "scm-api", "version": "1.0"}]}]
        }

    Args:
        path: Manifest file

    Returns:
        Repository view over the manifest contents

    Raises:
        RepositoryError: If the manifest is unreadable or malformed
    """
    logger = get_logger(__name__)
    manifest_path = Path(path)

    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RepositoryError(f"Failed to read manifest {manifest_path}: {e}") from e

    try:
        core = [
            CoreRelease(
                coordinate=_coordinate(
                    {"artifactId": "jenkins-war", **entry}, "org.jenkins-ci.main"
                ),
                url=entry.get("url", ""),
                sha1=entry.get("sha1"),
            )
            for entry in data.get("core", [])
        ]
        plugins = [
            PluginRelease(
                coordinate=_coordinate(entry, "org.jenkins-ci.plugins"),
                url=entry.get("url", ""),
                wiki_url=entry.get("wikiUrl"),
                description=entry.get("description"),
                required_core=entry.get("requiredCore"),
                dependencies=tuple(
                    Dependency(
                        name=dep["name"],
                        version=str(dep["version"]),
                        optional=bool(dep.get("optional", False)),
                    )
                    for dep in entry.get("dependencies", [])
                ),
                sha1=entry.get("sha1"),
            )
            for entry in data.get("plugins", [])
        ]
        repository = InMemoryRepository(plugins, core)
    except (KeyError, TypeError, ValueError) as e:
        raise RepositoryError(f"Malformed manifest {manifest_path}: {e}") from e

    logger.info(
        f"Loaded {len(plugins)} plugin releases and {len(core)} core releases "
        f"from {manifest_path}"
    )
    return repository
