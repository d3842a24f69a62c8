"""Community projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import clean_text_list, merged_terms
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_object, text_of


class CommunityProjector(EntityProjector):
    """Communities. Soft-deleted rows (deleted_at set) count as absent.

    Most display fields live in the community's metadata JSON.
    """

    entity_type = EntityType.COMMUNITIES.value
    table = "communities"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            "SELECT * FROM communities WHERE id = ? AND deleted_at IS NULL",
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        meta = json_object(row["metadata"], "metadata")
        tags = _meta_list(meta, "tags")
        languages = _meta_list(meta, "languages")
        category = text_of(meta.get("category"))
        country = text_of(meta.get("country"))
        short_description = text_of(meta.get("shortDescription"))

        filters = (
            AttributeMap()
            .set("visibility", row["visibility"])
            .set("category", category)
            .set("timezone", text_of(meta.get("timezone")))
            .set_list("languages", languages)
            .set("country", country)
            .set_list("tags", tags)
        )
        metadata = (
            AttributeMap()
            .set("memberCount", text_of(meta.get("memberCount")))
            .set("trendScore", text_of(meta.get("trendScore")))
            .set("country", country)
            .set("category", category)
        )
        media = AttributeMap().set("coverImageUrl", text_of(meta.get("coverImageUrl")))

        return ProjectedFields(
            slug=row["slug"],
            title=row["name"],
            subtitle=text_of(meta.get("tagline")),
            summary=short_description,
            description=row["description"],
            tags=tags,
            filters=filters.build(),
            metadata=metadata.build(),
            media=media.build(),
            index_text=IndexText(summary=short_description, description=row["description"]),
            keywords=KeywordSources(
                scalars=[category, row["visibility"], country],
                lists=[merged_terms(tags, languages)],
            ),
        )


def _meta_list(meta: dict, key: str) -> list[str]:
    value = meta.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"metadata.{key} must be a JSON array")
    return clean_text_list(value)
