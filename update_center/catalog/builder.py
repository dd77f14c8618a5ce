"""
Assembles the update center catalog and the release history.
"""

import time
from collections.abc import Iterable
from typing import Any

from ..repository import PluginHistory, PluginRelease, RepositoryView
from ..shared_utilities import get_logger, get_logging_manager, trace_operation
from ..wiki import ResolverNotInitializedError, WikiMetadataResolver
from .listeners import CatalogListener
from .plugin import Plugin

UPDATE_CENTER_VERSION = "1"


class CatalogBuilder:
    """
    Walks a repository view and joins each plugin with its wiki metadata.

    Metadata lookup failures of any kind are contained per plugin: the
    plugin stays in the output with its artifactId as title and an empty wiki
    URL. Using an uninitialized resolver and listener failures are not
    contained.
    """

    def __init__(
        self,
        repository: RepositoryView,
        resolver: WikiMetadataResolver,
        update_center_id: str,
        connection_check_url: str | None = None,
        listeners: Iterable[CatalogListener] = (),
    ):
        """
        Initialize the builder.

        Args:
            repository: View of the releases to publish
            resolver: Wiki resolver, initialized on first use if needed
            update_center_id: Identifier written to the catalog ``id`` field
            connection_check_url: Optional always-up URL for connection checks
            listeners: Collaborators notified of each published core and plugin
        """
        self.repository = repository
        self.resolver = resolver
        self.update_center_id = update_center_id
        self.connection_check_url = connection_check_url
        self.listeners = list(listeners)
        self.total = 0
        self.logger = get_logger(__name__)
        self.logging_manager = get_logging_manager()

    def _ensure_resolver(self) -> None:
        if not self.resolver.initialized:
            self.resolver.initialize()

    def _load_plugin(self, history: PluginHistory, release: PluginRelease) -> Plugin:
        """Join a release with its wiki page, degrading to no metadata on failure."""
        try:
            return Plugin.from_release(history, release, self.resolver)
        except ResolverNotInitializedError:
            raise
        except Exception as e:
            self.logger.warning(
                f"Failed to resolve wiki page for {release.artifact_id}, using defaults: {e}"
            )
            return Plugin(history, release)

    def build_core(self) -> dict[str, Any] | None:
        """Catalog record of the newest core release, or None if there is none."""
        latest = self.repository.latest_core()
        if latest is None:
            return None

        core = latest.to_json("core")
        self.logger.info(f"core => {latest.coordinate.version}")
        for listener in self.listeners:
            listener.core_added(latest)
        return core

    def build_plugins(self) -> dict[str, dict[str, Any]]:
        """
        Catalog records of the latest release of every visible plugin.

        Deprecated plugins are left out. :attr:`total` holds the number of
        plugins listed.
        """
        self._ensure_resolver()

        plugins: dict[str, dict[str, Any]] = {}
        total = 0
        for artifact_id, history in self.repository.list_plugin_histories().items():
            self.logger.info(artifact_id)

            with trace_operation("build_plugin", {"artifact_id": artifact_id}):
                plugin = self._load_plugin(history, history.latest())
                if plugin.deprecated:
                    self.logger.info("=> Plugin is deprecated.. skipping.")
                    continue

                if plugin.page is not None:
                    self.logger.info(f"=> {plugin.page.title}")
                else:
                    self.logger.info("=> No wiki page found")

                plugins[artifact_id] = plugin.to_json()
                for listener in self.listeners:
                    listener.plugin_added(history, plugin)
                total += 1

        self.total = total
        self.logger.info(f"Total {total} plugins listed.")
        return plugins

    def build_update_center(self) -> dict[str, Any]:
        """The complete update center catalog."""
        start = time.time()
        self.logging_manager.log_operation_start("build_update_center")

        root: dict[str, Any] = {"updateCenterVersion": UPDATE_CENTER_VERSION}
        core = self.build_core()
        if core is not None:
            root["core"] = core
        root["plugins"] = self.build_plugins()
        root["id"] = self.update_center_id
        if self.connection_check_url is not None:
            root["connectionCheckUrl"] = self.connection_check_url

        self.logging_manager.log_operation_complete(
            "build_update_center", time.time() - start, plugins=self.total
        )
        return root

    def build_release_history(self) -> dict[str, Any]:
        """
        Every release of every plugin, grouped by release date.

        Each release is flagged ``firstRelease``/``latestRelease`` relative to
        the full visible history of its plugin.
        """
        self._ensure_resolver()
        start = time.time()
        self.logging_manager.log_operation_start("build_release_history")

        release_history = []
        for release_date, releases_on_date in self.repository.list_releases_by_date().items():
            self.logger.info(f"Releases on {release_date}")

            releases = []
            for dated in releases_on_date.values():
                history, release = dated.history, dated.release
                plugin = self._load_plugin(history, release)

                entry: dict[str, Any] = {
                    "title": plugin.title,
                    "gav": release.coordinate.gav,
                    "timestamp": release.timestamp,
                    "wiki": plugin.wiki,
                }
                if history.is_latest(release):
                    entry["latestRelease"] = True
                if history.is_first(release):
                    entry["firstRelease"] = True
                entry["version"] = release.coordinate.version

                self.logger.debug(f"\t{entry['title']}:{entry['version']}")
                releases.append(entry)

            release_history.append({"date": release_date, "releases": releases})

        self.logging_manager.log_operation_complete(
            "build_release_history", time.time() - start, dates=len(release_history)
        )
        return {"releaseHistory": release_history}
