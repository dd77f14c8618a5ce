"""
HTTP client for the wiki's REST API
"""

from typing import Any
from urllib.parse import quote_plus

import requests

from ..shared_utilities import get_logger, get_logging_manager
from .exceptions import WikiFetchError

DEFAULT_WIKI_URL = "https://wiki.jenkins-ci.org/"
DEFAULT_SPACE = "JENKINS"


class WikiClient:
    """
    Thin client over the handful of wiki calls the generator needs.

    Every failure, whether a connection error or an error status, is raised
    as :class:`WikiFetchError`.
    """

    def __init__(
        self,
        wiki_url: str = DEFAULT_WIKI_URL,
        space: str = DEFAULT_SPACE,
        session: requests.Session | None = None,
        timeout: float | None = None,
        page_size: int = 500,
    ):
        """
        Initialize the client.

        Args:
            wiki_url: Root URL of the wiki, with or without trailing slash
            space: Wiki space holding the plugin pages
            session: HTTP session to use (a new one if None)
            timeout: Per-request timeout in seconds; None waits indefinitely
            page_size: Number of child pages requested per call
        """
        self.wiki_url = wiki_url if wiki_url.endswith("/") else wiki_url + "/"
        self.space = space
        self.session = session or requests.Session()
        self.timeout = timeout
        self.page_size = page_size
        self.logger = get_logger(__name__)
        self.logging_manager = get_logging_manager()

    def page_url(self, title: str) -> str:
        """Display URL of a page in the configured space."""
        return f"{self.wiki_url}display/{self.space}/{quote_plus(title, safe='')}"

    def _request(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        allow_redirects: bool = True,
    ) -> requests.Response:
        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                allow_redirects=allow_redirects,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise WikiFetchError(f"Request to {url} failed: {e}") from e

        self.logging_manager.log_api_request("GET", url, response.status_code)
        if response.status_code >= 400:
            raise WikiFetchError(f"Wiki returned HTTP {response.status_code} for {url}")
        return response

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._request(self.wiki_url + path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise WikiFetchError(f"Invalid JSON from {path}: {e}") from e

    def get_page(self, title: str) -> dict[str, Any]:
        """
        Fetch a page by title.

        Returns:
            ``{"id", "title", "content", "url"}`` for the page

        Raises:
            WikiFetchError: If the request fails or no such page exists
        """
        data = self._get_json(
            "rest/api/content",
            params={"spaceKey": self.space, "title": title, "expand": "body.storage"},
        )
        results = data.get("results") or []
        if not results:
            raise WikiFetchError(f"No wiki page titled '{title}'")

        page = results[0]
        content = page.get("body", {}).get("storage", {}).get("value", "")
        return {
            "id": str(page["id"]),
            "title": page.get("title", title),
            "content": content,
            "url": self.page_url(page.get("title", title)),
        }

    def get_children(self, page_id: str) -> list[dict[str, str]]:
        """List ``{"id", "title"}`` of every child page of ``page_id``."""
        children: list[dict[str, str]] = []
        start = 0
        while True:
            data = self._get_json(
                f"rest/api/content/{page_id}/child/page",
                params={"start": start, "limit": self.page_size},
            )
            results = data.get("results") or []
            children.extend(
                {"id": str(child["id"]), "title": child["title"]} for child in results
            )
            if len(results) < self.page_size:
                break
            start += len(results)

        self.logger.debug(f"Page {page_id} has {len(children)} children")
        return children

    def get_labels(self, page_id: str) -> list[str]:
        """Names of all labels attached to a page."""
        data = self._get_json(f"rest/api/content/{page_id}/label")
        return [label["name"] for label in data.get("results") or []]

    def open_session(self) -> str:
        """
        Start a wiki session.

        Returns:
            The session cookie (``name=value``) without its attributes
        """
        response = self._request(self.wiki_url, allow_redirects=False)
        cookie = response.headers.get("Set-Cookie")
        if not cookie:
            raise WikiFetchError(f"No session cookie returned by {self.wiki_url}")
        return cookie.split(";", 1)[0]

    def check_redirect(self, url: str, session_cookie: str | None = None) -> str:
        """Return the ``Location`` that ``url`` redirects to."""
        headers = {"Cookie": session_cookie} if session_cookie else None
        response = self._request(url, headers=headers, allow_redirects=False)
        location = response.headers.get("Location")
        if not location:
            raise WikiFetchError(f"{url} did not redirect")
        return location

    def tiny_link_url(self, link_id: str) -> str:
        return f"{self.wiki_url}pages/tinyurl.action?urlIdentifier={link_id}"
