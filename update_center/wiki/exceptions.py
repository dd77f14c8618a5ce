"""
Errors raised while resolving wiki metadata.
"""


class ResolverNotInitializedError(RuntimeError):
    """A resolver was queried before ``initialize()`` was called."""

    pass


class WikiError(Exception):
    """Base class for failures that affect a single wiki lookup."""

    pass


class UnresolvableReferenceError(WikiError, ValueError):
    """A wiki URL or tiny link matches none of the known patterns."""

    pass


class WikiFetchError(WikiError):
    """The wiki service failed to answer or reported an error."""

    pass
