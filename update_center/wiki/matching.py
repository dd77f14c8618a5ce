"""
Fuzzy matching between plugin artifactIds and wiki page titles.
"""

from collections.abc import Iterable

PLUGIN_SUFFIX = "plugin"


def normalize_title(title: str) -> str:
    """
    Make a page title as close to an artifactId as possible.

    Lowercases and trims the title, strips a trailing ``plugin`` (and the
    whitespace before it) and turns the remaining spaces into hyphens, so
    ``"Git Plugin"`` becomes ``"git"``.
    """
    title = title.lower().strip()
    if title.endswith(PLUGIN_SUFFIX):
        title = title[: -len(PLUGIN_SUFFIX)].strip()
    return title.replace(" ", "-")


def edit_distance(a: str, b: str) -> int:
    """
    Edit distance between two strings.

    Counts insertions, deletions, substitutions and transpositions of two
    adjacent characters, so ``"credentails"`` is one edit away from
    ``"credentials"``.
    """
    rows = [list(range(len(b) + 1))]
    for i in range(1, len(a) + 1):
        row = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            row[j] = min(
                rows[i - 1][j] + 1,  # deletion
                row[j - 1] + 1,  # insertion
                rows[i - 1][j - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                row[j] = min(row[j], rows[i - 2][j - 2] + 1)  # transposition
        rows.append(row)
    return rows[-1][-1]


def find_nearest_title(identifier: str, titles: Iterable[str]) -> tuple[str, int] | None:
    """
    Find the title closest to ``identifier``.

    Returns:
        ``(title, distance)`` for the closest title, the first one winning
        ties, or None when there are no titles at all
    """
    best: tuple[str, int] | None = None
    for title in titles:
        distance = edit_distance(identifier, title)
        if best is None or distance < best[1]:
            best = (title, distance)
            if distance == 0:
                break
    return best
