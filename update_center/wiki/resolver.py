"""
Resolves plugins to their wiki pages.

The wiki is a best-effort source: lookups are cached on disk for a day,
failures are cached as tombstones, and a failure for one plugin is reported
to the caller rather than aborting the run.
"""

import re
from pathlib import Path

from ..shared_utilities import get_logger, trace_operation
from .client import DEFAULT_WIKI_URL, WikiClient
from .data_models import WikiPage
from .exceptions import (
    ResolverNotInitializedError,
    UnresolvableReferenceError,
    WikiFetchError,
)
from .matching import find_nearest_title, normalize_title
from .page_cache import PageCache

WIKI_PREFIXES = (
    "https://wiki.jenkins-ci.org/display/JENKINS/",
    "http://wiki.jenkins-ci.org/display/JENKINS/",
    "http://wiki.hudson-ci.org/display/HUDSON/",
    "http://hudson.gotdns.com/wiki/display/HUDSON/",
)
TINYLINK_PATTERN = re.compile(r".*/x/(\w+)")
LABEL_PREFIX = "plugin-"
MAX_NEAREST_DISTANCE = 1


class WikiMetadataResolver:
    """
    Maps plugin artifactIds and wiki URLs to wiki pages.

    Call :meth:`initialize` once before any lookup. The session cookie used
    for tiny links and the label cache belong to this instance only.
    """

    def __init__(
        self,
        client: WikiClient | None = None,
        cache: PageCache | None = None,
        wiki_url: str = DEFAULT_WIKI_URL,
        cache_dir: str | Path | None = None,
        parent_page: str = "Plugins",
    ):
        """
        Initialize the resolver.

        Args:
            client: Wiki client (one for ``wiki_url`` if None)
            cache: Page cache (one in ``cache_dir`` if None)
            wiki_url: Wiki root, used when no client is given
            cache_dir: Cache directory, used when no cache is given
            parent_page: Title of the page whose children are the plugin pages
        """
        self.logger = get_logger(__name__)
        self.client = client or WikiClient(wiki_url)
        self.cache = cache or PageCache(cache_dir)
        self.parent_page = parent_page

        self._children: dict[str, dict[str, str]] = {}
        self._normalized_titles: list[str] | None = None
        self._session_cookie: str | None = None
        self._label_cache: dict[str, tuple[str, ...]] = {}

    @property
    def initialized(self) -> bool:
        return self._normalized_titles is not None

    def initialize(self) -> None:
        """List the plugin pages once and index them by normalized title."""
        with trace_operation("wiki_initialize", {"parent_page": self.parent_page}):
            parent = self.client.get_page(self.parent_page)
            children = self.client.get_children(parent["id"])

        self._children = {}
        for child in children:
            self._children[normalize_title(child["title"])] = child
        self._normalized_titles = list(self._children)
        self.logger.info(f"Indexed {len(self._normalized_titles)} wiki plugin pages")

    def _check_initialized(self) -> None:
        if self._normalized_titles is None:
            raise ResolverNotInitializedError(
                "Wiki resolver is not initialized. Call 'initialize()' first."
            )

    def find_nearest(self, identifier: str) -> WikiPage | None:
        """
        Find the page whose normalized title is closest to ``identifier``.

        Returns:
            The page if its title is at most one edit away, else None

        Raises:
            WikiFetchError: If the matched page cannot be loaded
        """
        self._check_initialized()

        identifier = identifier.lower()
        nearest = find_nearest_title(identifier, self._normalized_titles)
        if nearest is None or nearest[1] > MAX_NEAREST_DISTANCE:
            return None

        title = self._children[nearest[0]]["title"]
        self.logger.info(
            f"No wiki page specified, picking one with similar name: "
            f"using '{nearest[0]}' for {identifier}"
        )
        return self.load_page(title)

    def resolve(self, url: str) -> WikiPage | None:
        """
        Resolve a wiki page URL or tiny link to its page.

        Returns:
            The page, or None if a cached tombstone says it does not exist

        Raises:
            UnresolvableReferenceError: If the URL matches no known form
            WikiFetchError: If the wiki fails to answer
        """
        self._check_initialized()

        tinylink = TINYLINK_PATTERN.fullmatch(url)
        if tinylink:
            url = self._resolve_tiny_link(tinylink.group(1))

        for prefix in WIKI_PREFIXES:
            if not url.startswith(prefix):
                continue

            page_name = url[len(prefix) :].replace("+", " ")
            if page_name.endswith("/"):
                page_name = page_name[:-1]
            return self.load_page(page_name)

        raise UnresolvableReferenceError(f"Failed to resolve {url}")

    def _resolve_tiny_link(self, link_id: str) -> str:
        cached = self.cache.load_link(link_id)
        if cached is not None:
            return cached

        # one session per run keeps the wiki from accumulating sessions
        if self._session_cookie is None:
            self._session_cookie = self.client.open_session()
        try:
            url = self.client.check_redirect(
                self.client.tiny_link_url(link_id), self._session_cookie
            )
        except WikiFetchError as e:
            raise WikiFetchError(f"Failed to look up tiny link {link_id}: {e}") from e

        self._store_quietly(self.cache.store_link, link_id, url)
        return url

    def _store_quietly(self, store, key: str, value) -> None:
        """Write a cache record; a failed write only costs a future cache miss."""
        try:
            store(key, value)
        except OSError as e:
            self.logger.warning(f"Could not cache {key}: {e}")

    def load_page(self, title: str) -> WikiPage | None:
        """
        Load a page by title, consulting the cache first.

        A fresh cached tombstone returns None without contacting the wiki. A
        failed fetch stores a tombstone and re-raises.
        """
        entry = self.cache.load_page(title)
        if entry is not None:
            return entry.page

        try:
            with trace_operation("wiki_load_page", {"title": title}):
                raw = self.client.get_page(title)
                labels = self.client.get_labels(raw["id"])
        except WikiFetchError:
            self._store_quietly(self.cache.store_page, title, None)
            raise

        page = WikiPage(
            id=raw["id"],
            title=raw["title"],
            url=raw["url"],
            content=raw["content"],
            labels=tuple(labels),
        )
        self._store_quietly(self.cache.store_page, title, page)
        return page

    def get_labels(self, page: WikiPage) -> tuple[str, ...]:
        """Plugin labels of a page, with the ``plugin-`` prefix removed."""
        self._check_initialized()

        labels = self._label_cache.get(page.id)
        if labels is None:
            labels = tuple(
                label[len(LABEL_PREFIX) :]
                for label in page.labels
                if label.startswith(LABEL_PREFIX)
            )
            self._label_cache[page.id] = labels
        return labels


class NoWikiResolver(WikiMetadataResolver):
    """Resolver for runs that must not contact the wiki at all."""

    def __init__(self):
        # no client or cache: nothing here may reach the wiki or the disk
        self.logger = get_logger(__name__)
        self.client = None
        self.cache = None
        self.parent_page = None
        self._children = {}
        self._normalized_titles = None
        self._session_cookie = None
        self._label_cache = {}

    def initialize(self) -> None:
        self._normalized_titles = []

    def find_nearest(self, identifier: str) -> WikiPage | None:
        self._check_initialized()
        return None

    def resolve(self, url: str) -> WikiPage | None:
        self._check_initialized()
        return None

    def load_page(self, title: str) -> WikiPage | None:
        return None

    def get_labels(self, page: WikiPage) -> tuple[str, ...]:
        self._check_initialized()
        return ()
