"""
Pytest configuration and shared fixtures.
"""

import pytest
from loguru import logger

from update_center.repository import (
    ArtifactCoordinate,
    CoreRelease,
    InMemoryRepository,
    PluginRelease,
)
from update_center.wiki import PageCache, WikiFetchError, WikiMetadataResolver

JAN_1_2020 = 1577836800000
JUN_1_2020 = 1590969600000
DAY = 24 * 60 * 60 * 1000


def make_release(artifact_id: str, version: str, timestamp: int = JAN_1_2020, **kwargs):
    """Build a plugin release with sensible defaults."""
    kwargs.setdefault(
        "url", f"http://repo.example.org/plugins/{artifact_id}/{version}/{artifact_id}.hpi"
    )
    return PluginRelease(
        coordinate=ArtifactCoordinate(
            "org.jenkins-ci.plugins", artifact_id, version, timestamp
        ),
        **kwargs,
    )


def make_core(version: str, timestamp: int = JAN_1_2020):
    return CoreRelease(
        coordinate=ArtifactCoordinate("org.jenkins-ci.main", "jenkins-war", version, timestamp),
        url=f"http://repo.example.org/war/{version}/jenkins.war",
    )


class FakeWikiClient:
    """In-memory stand-in for WikiClient that counts remote calls."""

    wiki_url = "https://wiki.jenkins-ci.org/"

    def __init__(self, titles=(), labels=None, redirects=None, failing=()):
        self.pages = {"Plugins": {"id": "1", "title": "Plugins", "content": ""}}
        for index, title in enumerate(titles, start=100):
            self.pages[title] = {
                "id": str(index),
                "title": title,
                "content": f"{{excerpt}}About {title}{{excerpt}}",
            }
        self.labels = labels or {}
        self.redirects = redirects or {}
        self.failing = set(failing)
        self.page_requests: list[str] = []
        self.sessions_opened = 0
        self.redirect_requests: list[tuple[str, str | None]] = []

    def page_url(self, title):
        return f"{self.wiki_url}display/JENKINS/{title.replace(' ', '+')}"

    def get_page(self, title):
        self.page_requests.append(title)
        if title in self.failing or title not in self.pages:
            raise WikiFetchError(f"No wiki page titled '{title}'")
        page = self.pages[title]
        return {**page, "url": self.page_url(title)}

    def get_children(self, page_id):
        return [
            {"id": page["id"], "title": page["title"]}
            for title, page in self.pages.items()
            if title != "Plugins"
        ]

    def get_labels(self, page_id):
        for title, page in self.pages.items():
            if page["id"] == page_id:
                return list(self.labels.get(title, []))
        return []

    def open_session(self):
        self.sessions_opened += 1
        return "JSESSIONID=abc123"

    def tiny_link_url(self, link_id):
        return f"{self.wiki_url}pages/tinyurl.action?urlIdentifier={link_id}"

    def check_redirect(self, url, session_cookie=None):
        self.redirect_requests.append((url, session_cookie))
        link_id = url.rsplit("=", 1)[-1]
        if link_id not in self.redirects:
            raise WikiFetchError(f"{url} did not redirect")
        return self.redirects[link_id]


@pytest.fixture
def captured_logs():
    """Messages logged at DEBUG level or above while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def cache_dir(tmp_path):
    """Empty wiki cache directory."""
    return tmp_path / "wiki-cache"


@pytest.fixture
def fake_wiki():
    """Wiki with a Git Plugin page and an SSH Credentials page."""
    return FakeWikiClient(
        titles=["Git Plugin", "SSH Credentials Plugin"],
        labels={"Git Plugin": ["plugin-scm", "plugin-git", "featured"]},
    )


@pytest.fixture
def resolver(fake_wiki, cache_dir):
    """Initialized resolver over the fake wiki."""
    wiki_resolver = WikiMetadataResolver(client=fake_wiki, cache=PageCache(cache_dir))
    wiki_resolver.initialize()
    return wiki_resolver


@pytest.fixture
def git_and_mail_repository():
    """git released 1.0 and 1.1, mail released 1.0."""
    return InMemoryRepository(
        plugins=[
            make_release("git", "1.0", JAN_1_2020),
            make_release("git", "1.1", JUN_1_2020),
            make_release("mail", "1.0", JAN_1_2020),
        ],
        core=[make_core("2.0", JAN_1_2020), make_core("2.1", JUN_1_2020)],
    )
