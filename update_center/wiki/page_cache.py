"""
Disk-backed cache for wiki pages and resolved tiny links.

Layout of the cache directory:

- ``<title>.page``: JSON page record or tombstone, valid for one day
- ``<id>.link``: plain-text URL a tiny link redirected to
- ``<file>.tmp``: write in progress, atomically renamed over the target

Several generator runs may share one cache directory. Writes never expose a
partial file; a reader racing a writer at worst sees a cache miss.
"""

import json
import time
from datetime import timedelta
from pathlib import Path

from ..shared_utilities import atomic_write_text, get_logging_manager
from .data_models import CacheEntry, WikiPage

DEFAULT_CACHE_DIR = Path.home() / ".wiki.jenkins-ci.org-cache"
DEFAULT_TTL = timedelta(days=1)


class PageCache:
    """Stores wiki lookups on disk."""

    def __init__(self, cache_dir: str | Path | None = None, ttl: timedelta = DEFAULT_TTL):
        """
        Initialize the cache, creating the directory if needed.

        Args:
            cache_dir: Cache directory, defaults to ``~/.wiki.jenkins-ci.org-cache``
            ttl: How long a page record stays valid
        """
        self.cache_dir = Path(cache_dir) if cache_dir is not None else DEFAULT_CACHE_DIR
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl = ttl
        self.logging_manager = get_logging_manager()

    @staticmethod
    def _safe_name(key: str) -> str:
        return key.replace("/", "_")

    def page_file(self, title: str) -> Path:
        """Cache file for a page title."""
        return self.cache_dir / f"{self._safe_name(title)}.page"

    def link_file(self, link_id: str) -> Path:
        """Cache file for a tiny link id."""
        return self.cache_dir / f"{self._safe_name(link_id)}.link"

    def is_fresh(self, path: Path) -> bool:
        """True if ``path`` exists and is younger than the TTL."""
        try:
            age = time.time() - path.stat().st_mtime
        except OSError:
            return False
        return age < self.ttl.total_seconds()

    def load_page(self, title: str) -> CacheEntry | None:
        """
        Look up a page record.

        Returns:
            The cached entry (possibly a tombstone), or None on a miss.
            Missing, expired, unreadable and malformed records are all misses.
        """
        cache_file = self.page_file(title)

        if not self.is_fresh(cache_file):
            self.logging_manager.log_cache_operation("load", title, hit=False)
            return None

        try:
            with open(cache_file, encoding="utf-8") as f:
                entry = CacheEntry.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError):
            self.logging_manager.log_cache_operation(
                "load", title, hit=False, reason="invalid"
            )
            return None

        self.logging_manager.log_cache_operation(
            "load", title, hit=True, tombstone=not entry.found
        )
        return entry

    def store_page(self, title: str, page: WikiPage | None) -> CacheEntry:
        """Record a found page, or a tombstone when ``page`` is None."""
        entry = CacheEntry.of(page)
        atomic_write_text(self.page_file(title), json.dumps(entry.to_dict()))
        self.logging_manager.log_cache_operation("store", title, tombstone=page is None)
        return entry

    def load_link(self, link_id: str) -> str | None:
        """Return the URL a tiny link was resolved to, if known."""
        try:
            url = self.link_file(link_id).read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return url or None

    def store_link(self, link_id: str, url: str) -> None:
        atomic_write_text(self.link_file(link_id), url)
        self.logging_manager.log_cache_operation("store", f"{link_id}.link")

    def clear(self) -> int:
        """Remove all page and link records. Returns the number removed."""
        removed = 0
        for pattern in ("*.page", "*.link"):
            for cache_file in self.cache_dir.glob(pattern):
                cache_file.unlink(missing_ok=True)
                removed += 1
        return removed
