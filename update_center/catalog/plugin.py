"""
The catalog record of one plugin release joined with its wiki page.
"""

from datetime import datetime, timezone
from typing import Any

from ..repository import PluginHistory, PluginRelease
from ..wiki import UnresolvableReferenceError, WikiMetadataResolver, WikiPage

DEPRECATED_LABEL = "deprecated"


def format_release_timestamp(timestamp: int) -> str:
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 10000:02d}Z"


def find_page(release: PluginRelease, resolver: WikiMetadataResolver) -> WikiPage | None:
    """
    Locate the wiki page for a release.

    The URL declared in the POM wins; if it is missing or not a wiki URL the
    page with the title closest to the artifactId is used.

    Raises:
        WikiError: If the wiki fails while looking the page up
    """
    if release.wiki_url:
        try:
            return resolver.resolve(release.wiki_url)
        except UnresolvableReferenceError:
            pass
    return resolver.find_nearest(release.artifact_id)


class Plugin:
    """A plugin release as it appears in the catalog."""

    def __init__(
        self,
        history: PluginHistory,
        release: PluginRelease | None = None,
        page: WikiPage | None = None,
        labels: tuple[str, ...] = (),
    ):
        self.history = history
        self.release = release if release is not None else history.latest()
        self.page = page
        self.labels = labels

    @classmethod
    def from_release(
        cls,
        history: PluginHistory,
        release: PluginRelease,
        resolver: WikiMetadataResolver,
    ) -> "Plugin":
        """
        Build the record, fetching wiki metadata through ``resolver``.

        Raises:
            WikiError: If the wiki lookup fails
        """
        page = find_page(release, resolver)
        labels = resolver.get_labels(page) if page is not None else ()
        return cls(history, release, page, labels)

    @property
    def artifact_id(self) -> str:
        return self.release.artifact_id

    @property
    def deprecated(self) -> bool:
        return DEPRECATED_LABEL in self.labels

    @property
    def title(self) -> str:
        if self.page is not None and self.page.title:
            return self.page.title
        return self.artifact_id

    @property
    def wiki(self) -> str:
        return self.page.url if self.page is not None else ""

    @property
    def excerpt(self) -> str | None:
        if self.page is not None and self.page.excerpt:
            return self.page.excerpt
        return self.release.description

    def to_json(self) -> dict[str, Any]:
        release = self.release
        json_data: dict[str, Any] = {
            "name": self.artifact_id,
            "version": release.coordinate.version,
            "title": self.title,
            "wiki": self.wiki,
            "url": release.url,
        }
        if self.excerpt:
            json_data["excerpt"] = self.excerpt
        json_data["labels"] = list(self.labels)
        json_data["gav"] = release.coordinate.gav
        json_data["releaseTimestamp"] = format_release_timestamp(release.timestamp)
        json_data["buildDate"] = release.build_date
        if release.required_core:
            json_data["requiredCore"] = release.required_core
        json_data["dependencies"] = [d.to_json() for d in release.dependencies]

        previous = self.history.previous(release) if release in self.history.releases else None
        if previous is not None:
            json_data["previousVersion"] = previous.coordinate.version
            json_data["previousTimestamp"] = format_release_timestamp(previous.timestamp)
        if release.sha1:
            json_data["sha1"] = release.sha1
        return json_data
