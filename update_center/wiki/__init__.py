"""
Wiki metadata lookup for plugins
"""

from .client import DEFAULT_WIKI_URL, WikiClient
from .data_models import CacheEntry, WikiPage
from .exceptions import (
    ResolverNotInitializedError,
    UnresolvableReferenceError,
    WikiError,
    WikiFetchError,
)
from .matching import edit_distance, find_nearest_title, normalize_title
from .page_cache import PageCache
from .resolver import NoWikiResolver, WikiMetadataResolver

__all__ = [
    "DEFAULT_WIKI_URL",
    "CacheEntry",
    "NoWikiResolver",
    "PageCache",
    "ResolverNotInitializedError",
    "UnresolvableReferenceError",
    "WikiClient",
    "WikiError",
    "WikiFetchError",
    "WikiMetadataResolver",
    "WikiPage",
    "edit_distance",
    "find_nearest_title",
    "normalize_title",
]
