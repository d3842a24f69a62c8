"""Ad campaign projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import merged_terms
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_list


class AdCampaignProjector(EntityProjector):
    """Ad campaigns. Targeting keywords are the tags; audiences and
    locations only reach the keyword bag."""

    entity_type = EntityType.ADS.value
    table = "ads_campaigns"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            "SELECT * FROM ads_campaigns WHERE id = ?",
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        keywords = json_list(row["targeting_keywords"], "targeting_keywords")
        audiences = json_list(row["targeting_audiences"], "targeting_audiences")
        locations = json_list(row["targeting_locations"], "targeting_locations")

        filters = AttributeMap().set("objective", row["objective"]).set("status", row["status"])
        metadata = (
            AttributeMap()
            .set("performanceScore", row["performance_score"])
            .set("ctr", row["ctr"])
            .nest("budget", currency=row["budget_currency"], amount=row["budget_daily_cents"])
            .nest("spend", currency=row["spend_currency"], amount=row["spend_total_cents"])
        )
        media = AttributeMap().set("creativeUrl", row["creative_url"])

        return ProjectedFields(
            slug=row["public_id"],
            title=row["name"],
            subtitle=row["objective"],
            summary=row["creative_description"],
            description=row["creative_description"],
            tags=keywords,
            filters=filters.build(),
            metadata=metadata.build(),
            media=media.build(),
            index_text=IndexText(
                summary=row["objective"],
                description=row["creative_description"],
            ),
            keywords=KeywordSources(
                scalars=[row["status"]],
                lists=[merged_terms(keywords, audiences, locations)],
            ),
        )
