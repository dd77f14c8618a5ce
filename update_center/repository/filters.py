"""
Repository view decorators.

Each decorator wraps another :class:`RepositoryView` and narrows what it
exposes. Wrapped views are never modified: narrowed histories are new
objects, so ``first()``/``latest()`` always reflect what the decorated view
actually shows. Decorators compose in any order.
"""

import re
from collections.abc import Callable

from ..shared_utilities import get_logger
from .base import RepositoryView
from .data_models import CoreRelease, PluginHistory, PluginRelease, VersionNumber

_EXPERIMENTAL_PATTERN = re.compile(r"alpha|beta|(?<![a-z])rc(?![a-z])")


def is_experimental(version: str | VersionNumber) -> bool:
    """True when the version string carries an alpha, beta or rc qualifier."""
    return _EXPERIMENTAL_PATTERN.search(str(version).lower()) is not None


class FilteringRepository(RepositoryView):
    """Base for decorators that keep a subset of each plugin's releases."""

    def __init__(self, base: RepositoryView):
        self.base = base

    def accept_plugin_release(self, release: PluginRelease) -> bool:
        return True

    def accept_core_release(self, release: CoreRelease) -> bool:
        return True

    def list_plugin_histories(self) -> dict[str, PluginHistory]:
        histories = {}
        for artifact_id, history in self.base.list_plugin_histories().items():
            kept = [r for r in history if self.accept_plugin_release(r)]
            # a history filtered down to nothing disappears from the view
            if kept:
                histories[artifact_id] = (
                    history if len(kept) == len(history) else history.with_releases(kept)
                )
        return histories

    def core_history(self) -> dict[VersionNumber, CoreRelease]:
        return {
            version: war
            for version, war in self.base.core_history().items()
            if self.accept_core_release(war)
        }


class VersionCappedRepository(FilteringRepository):
    """
    Hides releases that need a newer core than a ceiling.

    A plugin release is kept when the core version it requires is at most
    ``cap_plugin``; releases that declare no required core are kept. Core
    releases are kept up to ``cap_core``. :attr:`VersionNumber.ANY` leaves
    that axis uncapped.
    """

    def __init__(
        self,
        base: RepositoryView,
        cap_plugin: VersionNumber = VersionNumber.ANY,
        cap_core: VersionNumber = VersionNumber.ANY,
    ):
        super().__init__(base)
        self.cap_plugin = cap_plugin
        self.cap_core = cap_core

    def accept_plugin_release(self, release: PluginRelease) -> bool:
        if self.cap_plugin is VersionNumber.ANY or not release.required_core:
            return True
        return VersionNumber(release.required_core) <= self.cap_plugin

    def accept_core_release(self, release: CoreRelease) -> bool:
        return release.version <= self.cap_core


class ExperimentalFilterRepository(FilteringRepository):
    """
    Keeps only experimental plugin releases, or drops them.

    Core releases are passed through unchanged.
    """

    def __init__(self, base: RepositoryView, include_only: bool):
        super().__init__(base)
        self.include_only = include_only

    def accept_plugin_release(self, release: PluginRelease) -> bool:
        return is_experimental(release.coordinate.version) == self.include_only


class TruncatedRepository(RepositoryView):
    """
    Limits the view to the first ``max_plugins`` plugins of the wrapped view.

    Meant for test runs. "First" is whatever order the wrapped view returns
    its histories in; no ordering is imposed here.
    """

    def __init__(self, base: RepositoryView, max_plugins: int):
        if max_plugins < 0:
            raise ValueError("max_plugins must not be negative")
        self.base = base
        self.max_plugins = max_plugins

    def list_plugin_histories(self) -> dict[str, PluginHistory]:
        histories = self.base.list_plugin_histories()
        return dict(list(histories.items())[: self.max_plugins])

    def core_history(self) -> dict[VersionNumber, CoreRelease]:
        return self.base.core_history()


def compose_repository(
    base: RepositoryView,
    max_plugins: int | None = None,
    cap_plugin: str | None = None,
    cap_core: str | None = None,
    experimental_only: bool = False,
    no_experimental: bool = False,
) -> RepositoryView:
    """
    Wrap ``base`` with the decorators selected by the run options.

    Decorators are applied in a fixed order: truncation, version cap,
    experimental filter. ``cap_core`` falls back to ``cap_plugin``.
    """
    logger = get_logger(__name__)
    repository = base
    steps: list[tuple[str, Callable[[RepositoryView], RepositoryView]]] = []

    if max_plugins is not None:
        steps.append(
            (f"truncate to {max_plugins}", lambda r: TruncatedRepository(r, max_plugins))
        )

    effective_cap_core = cap_core if cap_core is not None else cap_plugin
    if cap_plugin is not None or effective_cap_core is not None:
        plugin_ceiling = VersionNumber(cap_plugin) if cap_plugin else VersionNumber.ANY
        core_ceiling = (
            VersionNumber(effective_cap_core) if effective_cap_core else VersionNumber.ANY
        )
        steps.append(
            (
                f"cap plugins at {plugin_ceiling}, core at {core_ceiling}",
                lambda r: VersionCappedRepository(r, plugin_ceiling, core_ceiling),
            )
        )

    if experimental_only:
        steps.append(
            ("experimental releases only", lambda r: ExperimentalFilterRepository(r, True))
        )
    if no_experimental:
        steps.append(
            ("no experimental releases", lambda r: ExperimentalFilterRepository(r, False))
        )

    for description, wrap in steps:
        logger.debug(f"Repository view: {description}")
        repository = wrap(repository)

    return repository
