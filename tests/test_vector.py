"""Weighted token index tests."""

from searchsync.documents.vector import (
    Tier,
    WeightedTokenIndex,
    build_search_vector,
    match_expression,
    merge,
    tokenize,
)


def test_tokenize_lowercases_and_splits() -> None:
    assert tokenize("Intro to Testing!", Tier.A) == [
        ("intro", Tier.A),
        ("to", Tier.A),
        ("testing", Tier.A),
    ]


def test_tokenize_absent_text() -> None:
    assert tokenize(None, Tier.B) == []
    assert tokenize("", Tier.B) == []
    assert tokenize("  --  ", Tier.B) == []


def test_tokenize_keeps_emails_whole() -> None:
    tokens = [token for token, _ in tokenize("Contact Ada.Lovelace+qa@Example.co.uk.", Tier.D)]
    assert tokens == ["contact", "ada.lovelace+qa@example.co.uk"]


def test_tokenize_keeps_urls_whole() -> None:
    tokens = [token for token, _ in tokenize("See https://cdn.example.com/c/42?x=1, thanks", Tier.C)]
    assert tokens == ["see", "https://cdn.example.com/c/42?x=1", "thanks"]


def test_merge_concatenates_tiers() -> None:
    first = WeightedTokenIndex.from_tokens(tokenize("alpha beta", Tier.A))
    second = WeightedTokenIndex.from_tokens(tokenize("beta", Tier.C))
    merged = merge([first, second])
    assert merged.column(Tier.A) == ("alpha", "beta")
    assert merged.column(Tier.C) == ("beta",)
    assert merged.tiers("beta") == {Tier.A, Tier.C}
    assert merged.best_tier("beta") is Tier.A
    assert merged.best_tier("gamma") is None


def test_merge_of_nothing_is_empty() -> None:
    merged = merge([])
    assert merged.is_empty
    assert merged.column_text() == ("", "", "", "")


def test_build_assigns_each_field_its_tier() -> None:
    index = build_search_vector(
        title="Kubernetes",
        summary="cluster basics",
        description="pods and services",
        tags={"devops"},
        keyword_bag={"keywords": ["Ada Lovelace"]},
    )
    assert index.best_tier("kubernetes") is Tier.A
    assert index.best_tier("cluster") is Tier.B
    assert index.best_tier("devops") is Tier.B
    assert index.best_tier("pods") is Tier.C
    assert index.best_tier("lovelace") is Tier.D
    assert index.column_text() == (
        "kubernetes",
        "cluster basics devops",
        "pods and services",
        "ada lovelace",
    )


def test_build_ignores_absent_fields() -> None:
    index = build_search_vector("Only title", None, None, None, None)
    assert index.tokens() == ["only", "title"]


def test_build_is_deterministic_for_unordered_tags() -> None:
    a = build_search_vector("t", None, None, {"b", "a", "c"}, {"keywords": []})
    b = build_search_vector("t", None, None, {"c", "a", "b"}, {"keywords": []})
    assert a.serialize() == b.serialize()


def test_serialize_round_trips() -> None:
    index = build_search_vector("Intro to Testing", "QA", "testing tips", {"QA"}, {"keywords": ["qa"]})
    assert WeightedTokenIndex.parse(index.serialize()) == index
    assert WeightedTokenIndex.parse("") == WeightedTokenIndex()


def test_match_expression_quotes_tokens_and_prefixes_last() -> None:
    assert match_expression("Intro to test") == '"intro" "to" "test"*'
    assert match_expression('NEAR("x" OR y)') == '"near" "x" "or" "y"*'
    assert match_expression("ada@example.com") == '"ada@example.com"*'


def test_match_expression_without_tokens() -> None:
    assert match_expression("") is None
    assert match_expression(None) is None
    assert match_expression(" -- ") is None
