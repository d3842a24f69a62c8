"""E-book projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import merged_terms
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_list


class EbookProjector(EntityProjector):
    """E-books. The subtitle doubles as the summary."""

    entity_type = EntityType.EBOOKS.value
    table = "ebooks"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute("SELECT * FROM ebooks WHERE id = ?", (entity_id,)).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        tags = json_list(row["tags"], "tags")
        categories = json_list(row["categories"], "categories")
        languages = json_list(row["languages"], "languages")

        filters = (
            AttributeMap()
            .set_list("categories", categories)
            .set_list("languages", languages)
            .set_list("tags", tags)
        )
        metadata = (
            AttributeMap()
            .nest("price", currency=row["price_currency"], amount=row["price_amount"])
            .nest("rating", average=row["rating_average"], count=row["rating_count"])
            .set("readingTimeMinutes", row["reading_time_minutes"])
            .set("status", row["status"])
        )
        media = (
            AttributeMap()
            .set("coverImageUrl", row["cover_image_url"])
            .set("sampleDownloadUrl", row["sample_download_url"])
        )

        return ProjectedFields(
            slug=row["slug"],
            title=row["title"],
            subtitle=row["subtitle"],
            summary=row["subtitle"],
            description=row["description"],
            tags=tags,
            filters=filters.build(),
            metadata=metadata.build(),
            media=media.build(),
            index_text=IndexText(summary=row["subtitle"], description=row["description"]),
            keywords=KeywordSources(lists=[merged_terms(tags, categories, languages)]),
        )
