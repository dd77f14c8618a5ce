"""
Views over the artifact repository and the decorators that narrow them
"""

from .base import InMemoryRepository, RepositoryError, RepositoryView, load_manifest
from .data_models import (
    ArtifactCoordinate,
    CoreRelease,
    DatedRelease,
    Dependency,
    PluginHistory,
    PluginRelease,
    VersionNumber,
)
from .filters import (
    ExperimentalFilterRepository,
    TruncatedRepository,
    VersionCappedRepository,
    compose_repository,
    is_experimental,
)

__all__ = [
    "ArtifactCoordinate",
    "CoreRelease",
    "DatedRelease",
    "Dependency",
    "ExperimentalFilterRepository",
    "InMemoryRepository",
    "PluginHistory",
    "PluginRelease",
    "RepositoryError",
    "RepositoryView",
    "TruncatedRepository",
    "VersionCappedRepository",
    "VersionNumber",
    "compose_repository",
    "is_experimental",
    "load_manifest",
]
