"""
Data models for wiki pages and their on-disk cache records.
"""

import re
import time
from dataclasses import asdict, dataclass, field
from typing import Any

_EXCERPT_PATTERN = re.compile(r"\{excerpt(?::[^}]*)?\}(.*?)\{excerpt\}", re.DOTALL)


@dataclass(frozen=True)
class WikiPage:
    """A plugin page as stored on the wiki."""

    id: str
    title: str
    url: str
    content: str = ""
    labels: tuple[str, ...] = field(default=())

    @property
    def excerpt(self) -> str | None:
        """Text of the ``{excerpt}...{excerpt}`` block, if the page has one."""
        match = _EXCERPT_PATTERN.search(self.content)
        if match is None:
            return None
        return match.group(1).strip() or None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["labels"] = list(self.labels)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WikiPage":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            url=data["url"],
            content=data.get("content", ""),
            labels=tuple(data.get("labels", ())),
        )


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached result of a page lookup.

    Either a found page or a tombstone (``found=False``) recording that the
    lookup failed, so it is not retried until the entry expires.
    """

    found: bool
    page: WikiPage | None = None
    cached_at: float = field(default_factory=time.time)

    @classmethod
    def of(cls, page: WikiPage | None) -> "CacheEntry":
        return cls(found=page is not None, page=page)

    def to_dict(self) -> dict[str, Any]:
        return {
            "found": self.found,
            "page": self.page.to_dict() if self.page is not None else None,
            "cached_at": self.cached_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        """
        Rebuild an entry from its serialized form.

        Raises:
            TypeError, KeyError, ValueError: If the record has the wrong shape
        """
        if not isinstance(data, dict) or not isinstance(data.get("found"), bool):
            raise TypeError("Cache record is not a page entry")
        if data["found"]:
            if not isinstance(data.get("page"), dict):
                raise TypeError("Found cache record has no page")
            page = WikiPage.from_dict(data["page"])
        else:
            page = None
        return cls(found=data["found"], page=page, cached_at=float(data["cached_at"]))
