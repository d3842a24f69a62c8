"""Text list cleanup and keyword bag aggregation."""

from collections.abc import Iterable
from typing import Any


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = value.strip() if isinstance(value, str) else str(value).strip()
    return text or None


def clean_text_list(values: Iterable[Any] | None) -> list[str]:
    """Trim every entry and drop null or blank ones, keeping order.

    Duplicates are kept.

    Args:
        values: Any iterable of optional values. Non-strings are converted
            with str().

    Returns:
        Trimmed, non-empty strings in input order.
    """
    if values is None:
        return []
    cleaned = (_clean(value) for value in values)
    return [text for text in cleaned if text is not None]


def normalize_text_list(values: Iterable[Any] | None) -> set[str]:
    """Trim, drop blanks and deduplicate a list of tags.

    Deduplication is exact and case-sensitive: "Testing" and "testing"
    are both kept.

    Args:
        values: Any iterable of optional values, or None.

    Returns:
        Set of distinct trimmed strings.

    Examples:
        >>> sorted(normalize_text_list([" Testing ", "Testing", "", None, "QA"]))
        ['QA', 'Testing']
    """
    return set(clean_text_list(values))


def merged_terms(*lists: Iterable[Any] | None) -> list[str]:
    """Union several lists into one sorted, normalized term list."""
    terms: set[str] = set()
    for values in lists:
        terms |= normalize_text_list(values)
    return sorted(terms)


def build_keyword_bag(
    scalars: Iterable[Any] | None = None,
    lists: Iterable[Iterable[Any] | None] | None = None,
) -> dict[str, list[str]]:
    """Fold scalar fields and term lists into a flat keyword bag.

    Scalars come first, then each list in order. Blank and null entries
    are dropped; duplicates are kept.

    Args:
        scalars: Single values such as category, status or a person's name.
        lists: Term lists such as skills or languages.

    Returns:
        Mapping of the form {"keywords": [...]}.
    """
    keywords = clean_text_list(scalars)
    for values in lists or ():
        keywords.extend(clean_text_list(values))
    return {"keywords": keywords}
