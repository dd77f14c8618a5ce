"""
Catalog and release-history assembly
"""

from .builder import UPDATE_CENTER_VERSION, CatalogBuilder
from .listeners import CatalogListener, LatestLinkRecorder
from .plugin import Plugin, find_page, format_release_timestamp

__all__ = [
    "UPDATE_CENTER_VERSION",
    "CatalogBuilder",
    "CatalogListener",
    "LatestLinkRecorder",
    "Plugin",
    "find_page",
    "format_release_timestamp",
]
