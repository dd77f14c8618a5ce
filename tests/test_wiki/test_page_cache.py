"""
Tests for the on-disk wiki page cache.
"""

import json
import os
import time
from datetime import timedelta
from unittest.mock import patch

import pytest

from update_center.wiki import PageCache, WikiPage


@pytest.fixture
def page_cache(cache_dir):
    return PageCache(cache_dir)


@pytest.fixture
def git_page():
    return WikiPage(
        id="100",
        title="Git Plugin",
        url="https://wiki.jenkins-ci.org/display/JENKINS/Git+Plugin",
        content="{excerpt}Git support{excerpt}",
        labels=("plugin-scm",),
    )


def age(path, seconds):
    """Move a file's mtime into the past."""
    past = time.time() - seconds
    os.utime(path, (past, past))


class TestPageCache:
    """Test page records and tombstones."""

    def test_creates_directory(self, cache_dir):
        """Test the cache directory is created on construction."""
        PageCache(cache_dir)
        assert cache_dir.is_dir()

    def test_miss_when_empty(self, page_cache):
        assert page_cache.load_page("Git Plugin") is None

    def test_store_and_load_page(self, page_cache, git_page):
        """Test a stored page is returned intact."""
        page_cache.store_page("Git Plugin", git_page)

        entry = page_cache.load_page("Git Plugin")

        assert entry.found is True
        assert entry.page == git_page
        assert entry.page.excerpt == "Git support"

    def test_tombstone(self, page_cache):
        """Test a failed lookup is remembered as a tombstone."""
        page_cache.store_page("Missing Plugin", None)

        entry = page_cache.load_page("Missing Plugin")

        assert entry is not None
        assert entry.found is False
        assert entry.page is None

    def test_expired_entry_is_a_miss(self, page_cache, git_page):
        """Test entries older than the TTL are ignored."""
        page_cache.store_page("Git Plugin", git_page)
        age(page_cache.page_file("Git Plugin"), timedelta(days=1, minutes=1).total_seconds())

        assert page_cache.load_page("Git Plugin") is None

    def test_entry_just_under_ttl_is_fresh(self, page_cache):
        page_cache.store_page("Missing Plugin", None)
        age(page_cache.page_file("Missing Plugin"), timedelta(hours=23).total_seconds())

        assert page_cache.load_page("Missing Plugin") is not None

    def test_custom_ttl(self, cache_dir, git_page):
        short_cache = PageCache(cache_dir, ttl=timedelta(minutes=5))
        short_cache.store_page("Git Plugin", git_page)
        age(short_cache.page_file("Git Plugin"), 600)

        assert short_cache.load_page("Git Plugin") is None

    @pytest.mark.parametrize(
        "content",
        ["{not json", json.dumps(["a", "list"]), json.dumps({"found": True, "cached_at": 1})],
    )
    def test_invalid_entry_is_a_miss(self, page_cache, content):
        """Test corrupt records are treated as missing."""
        page_cache.page_file("Git Plugin").write_text(content)

        assert page_cache.load_page("Git Plugin") is None

    def test_titles_with_slashes(self, page_cache, git_page):
        page_cache.store_page("CI/CD Plugin", git_page)

        assert page_cache.page_file("CI/CD Plugin").parent == page_cache.cache_dir
        assert page_cache.load_page("CI/CD Plugin").page == git_page

    def test_no_temporary_files_left(self, page_cache, git_page):
        page_cache.store_page("Git Plugin", git_page)
        page_cache.store_link("abc", "https://wiki.jenkins-ci.org/display/JENKINS/Git+Plugin")

        assert list(page_cache.cache_dir.glob("*.tmp")) == []

    def test_failed_write_keeps_previous_entry(self, page_cache, git_page):
        """Test an interrupted write leaves the old record and no temp file."""
        page_cache.store_page("Git Plugin", git_page)

        with patch(
            "update_center.shared_utilities.output_manager.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(OSError):
                page_cache.store_page("Git Plugin", None)

        assert page_cache.load_page("Git Plugin").page == git_page
        assert list(page_cache.cache_dir.glob("*.tmp")) == []


class TestLinkCache:
    """Test tiny link records."""

    def test_store_and_load_link(self, page_cache):
        url = "https://wiki.jenkins-ci.org/display/JENKINS/Git+Plugin"
        page_cache.store_link("AbC1", url)

        assert page_cache.load_link("AbC1") == url
        assert page_cache.link_file("AbC1").name == "AbC1.link"

    def test_unknown_link(self, page_cache):
        assert page_cache.load_link("nope") is None

    def test_clear(self, page_cache, git_page):
        page_cache.store_page("Git Plugin", git_page)
        page_cache.store_link("AbC1", "https://example.org/")

        assert page_cache.clear() == 2
        assert page_cache.load_page("Git Plugin") is None
        assert page_cache.load_link("AbC1") is None
