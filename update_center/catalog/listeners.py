"""
Hooks for collaborators that act on catalog entries as they are built.

Staging binaries into a download layout or writing permalink redirects
happens outside the builder; such collaborators implement
:class:`CatalogListener`. A listener that raises aborts the build.
"""

from typing import Protocol
from urllib.parse import urlparse

from ..repository import CoreRelease, PluginHistory
from .plugin import Plugin

CORE_PERMALINK = "jenkins.war"


class CatalogListener(Protocol):
    def core_added(self, release: CoreRelease) -> None: ...

    def plugin_added(self, history: PluginHistory, plugin: Plugin) -> None: ...


class LatestLinkRecorder:
    """Collects ``latest/<name>`` permalinks and the paths they point to."""

    def __init__(self):
        self.links: dict[str, str] = {}

    def add(self, name: str, url: str) -> None:
        self.links[name] = urlparse(url).path

    def core_added(self, release: CoreRelease) -> None:
        self.add(CORE_PERMALINK, release.url)

    def plugin_added(self, history: PluginHistory, plugin: Plugin) -> None:
        self.add(f"{plugin.artifact_id}.hpi", plugin.release.url)
