"""Four-tier weighted token index built from document text.

Each text field is tokenized on its own and its tokens land in the tier
column that field belongs to:

- Tier A: title
- Tier B: summary and tags
- Tier C: description
- Tier D: keyword bag (category, status, country, people's names, ...)

The document store writes the four tiers into an FTS5 table and ranks
matches with bm25() using TIER_WEIGHTS as column weights, so a title hit
always outranks the same hit in a lower tier.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

# Emails and URLs stay whole; everything else splits into word runs.
_TOKEN_PATTERN = re.compile(
    r"(?P<url>https?://[^\s\"'<>()]+)"
    r"|(?P<email>[\w+-][\w.+-]*@[\w-]+(?:\.[\w-]+)+)"
    r"|(?P<word>[^\W_]+)"
)
_URL_TRAILING = ".,;:!?"


class Tier(str, Enum):
    """Index priority tiers, highest first."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


TIER_WEIGHTS: dict[Tier, float] = {
    Tier.A: 10.0,
    Tier.B: 4.0,
    Tier.C: 2.0,
    Tier.D: 1.0,
}

WeightedToken = tuple[str, Tier]


def tokenize(text: str | None, tier: Tier) -> list[WeightedToken]:
    """Split text into lowercase tokens tagged with a tier.

    Email addresses and http(s) URLs are kept as single tokens. No
    stemming or stopword removal is applied, so every word a user could
    type is findable as-is.

    Args:
        text: Field text, may be None.
        tier: Tier every token from this text belongs to.

    Returns:
        Tokens in text order.

    Examples:
        >>> tokenize("Intro to Testing!", Tier.A)
        [('intro', <Tier.A: 'A'>), ('to', <Tier.A: 'A'>), ('testing', <Tier.A: 'A'>)]
        >>> tokenize("Mail ada@example.com", Tier.D)
        [('mail', <Tier.D: 'D'>), ('ada@example.com', <Tier.D: 'D'>)]
        >>> tokenize(None, Tier.C)
        []
    """
    if not text:
        return []
    tokens: list[WeightedToken] = []
    for match in _TOKEN_PATTERN.finditer(text.lower()):
        token = match.group()
        if match.lastgroup == "url":
            token = token.rstrip(_URL_TRAILING)
        tokens.append((token, tier))
    return tokens


class WeightedTokenIndex(BaseModel):
    """Tokens grouped by tier, in document order.

    Attributes:
        a: Tier A tokens.
        b: Tier B tokens.
        c: Tier C tokens.
        d: Tier D tokens.
    """

    model_config = ConfigDict(frozen=True)

    a: tuple[str, ...] = ()
    b: tuple[str, ...] = ()
    c: tuple[str, ...] = ()
    d: tuple[str, ...] = ()

    @classmethod
    def from_tokens(cls, tokens: Iterable[WeightedToken]) -> "WeightedTokenIndex":
        """Group tokens into their tier columns, keeping order."""
        columns: dict[Tier, list[str]] = {tier: [] for tier in Tier}
        for token, tier in tokens:
            columns[tier].append(token)
        return cls(**{tier.value.lower(): tuple(col) for tier, col in columns.items()})

    def column(self, tier: Tier) -> tuple[str, ...]:
        """Tokens of one tier."""
        return getattr(self, tier.value.lower())

    def tokens(self) -> list[str]:
        """Distinct tokens across every tier, sorted."""
        return sorted({token for tier in Tier for token in self.column(tier)})

    def tiers(self, token: str) -> set[Tier]:
        """Every tier the token occurs in."""
        return {tier for tier in Tier if token in self.column(tier)}

    def best_tier(self, token: str) -> Tier | None:
        """Highest-priority tier the token occurs in, or None."""
        for tier in Tier:
            if token in self.column(tier):
                return tier
        return None

    def __contains__(self, token: object) -> bool:
        return any(token in self.column(tier) for tier in Tier)

    @property
    def is_empty(self) -> bool:
        return not any(self.column(tier) for tier in Tier)

    def column_text(self) -> tuple[str, str, str, str]:
        """Space-joined token text per tier, in FTS column order."""
        return tuple(" ".join(self.column(tier)) for tier in Tier)

    def serialize(self) -> str:
        """Render as compact JSON for the search_vector column."""
        return self.model_dump_json()

    @classmethod
    def parse(cls, text: str | None) -> "WeightedTokenIndex":
        """Inverse of serialize(); empty text gives an empty index."""
        if not text:
            return cls()
        return cls.model_validate_json(text)


def merge(indexes: Iterable[WeightedTokenIndex]) -> WeightedTokenIndex:
    """Concatenate indexes tier by tier.

    Every occurrence keeps its own tier, so a token present in both a
    tier A and a tier C index is recorded in both columns.
    """
    columns: dict[Tier, list[str]] = {tier: [] for tier in Tier}
    for index in indexes:
        for tier in Tier:
            columns[tier].extend(index.column(tier))
    return WeightedTokenIndex(**{tier.value.lower(): tuple(col) for tier, col in columns.items()})


def build_search_vector(
    title: str | None,
    summary: str | None,
    description: str | None,
    tags: Iterable[str] | None,
    keyword_bag: Mapping[str, Sequence[str]] | None,
) -> WeightedTokenIndex:
    """Build the weighted index for one document.

    Args:
        title: Tier A text.
        summary: Tier B text.
        description: Tier C text.
        tags: Normalized tags, indexed at tier B in sorted order.
        keyword_bag: Mapping with a "keywords" list, indexed at tier D.

    Returns:
        Merged index. Absent fields contribute nothing.
    """
    keywords = [k for k in (keyword_bag or {}).get("keywords", ()) if k]
    return merge(
        [
            WeightedTokenIndex.from_tokens(tokenize(title, Tier.A)),
            WeightedTokenIndex.from_tokens(tokenize(summary, Tier.B)),
            WeightedTokenIndex.from_tokens(tokenize(description, Tier.C)),
            WeightedTokenIndex.from_tokens(tokenize(" ".join(sorted(tags or ())), Tier.B)),
            WeightedTokenIndex.from_tokens(tokenize(" ".join(keywords), Tier.D)),
        ]
    )


def match_expression(query: str | None) -> str | None:
    """Turn free text into an FTS5 MATCH expression.

    The query is tokenized like document text. Every token is quoted so
    FTS5 syntax characters are inert, and the last token is a prefix
    match for typeahead.

    Returns:
        MATCH expression, or None when the query has no tokens.

    Examples:
        >>> match_expression("Intro to test")
        '"intro" "to" "test"*'
        >>> match_expression("  !! ") is None
        True
    """
    tokens = [token for token, _ in tokenize(query, Tier.A)]
    if not tokens:
        return None
    parts = [f'"{token}"' for token in tokens]
    parts[-1] += "*"
    return " ".join(parts)
