"""Search document model, text normalization, weighted index and store."""

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import (
    build_keyword_bag,
    clean_text_list,
    normalize_text_list,
)
from searchsync.documents.schemas import (
    Document,
    EntityType,
    IndexText,
    KeywordSources,
    ProjectedFields,
    RefreshOutcome,
    ResyncReport,
    SearchHit,
    SearchResults,
)
from searchsync.documents.store import DocumentStore
from searchsync.documents.vector import (
    Tier,
    WeightedTokenIndex,
    build_search_vector,
    match_expression,
    merge,
    tokenize,
)

__all__ = [
    "AttributeMap",
    "Document",
    "DocumentStore",
    "EntityType",
    "IndexText",
    "KeywordSources",
    "ProjectedFields",
    "RefreshOutcome",
    "ResyncReport",
    "SearchHit",
    "SearchResults",
    "Tier",
    "WeightedTokenIndex",
    "build_keyword_bag",
    "build_search_vector",
    "clean_text_list",
    "match_expression",
    "merge",
    "normalize_text_list",
    "tokenize",
]
