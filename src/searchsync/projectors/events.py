"""Community event projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_object, text_of


class EventProjector(EntityProjector):
    """Community events, with the parent community's name and country.

    The visibility is the only tag. Events whose community is gone still
    project; they just lose the community fields.
    """

    entity_type = EntityType.EVENTS.value
    table = "community_events"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            """
            SELECT
                e.*,
                c.name AS community_name,
                c.metadata AS community_metadata
            FROM community_events e
            LEFT JOIN communities c ON c.id = e.community_id
            WHERE e.id = ?
            """,
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        community_meta = json_object(row["community_metadata"], "communities.metadata")
        community_country = text_of(community_meta.get("country")) or ""
        community_name = row["community_name"]

        filters = (
            AttributeMap()
            .set("status", row["status"])
            .set("timezone", row["timezone"])
            .set("visibility", row["visibility"])
        )
        metadata = (
            AttributeMap()
            .set("startAt", row["start_at"])
            .nest("attendance", limit=row["attendance_limit"], count=row["attendance_count"])
            .set("communityName", community_name)
            .set("communityCountry", community_country)
        )

        return ProjectedFields(
            slug=row["slug"],
            title=row["title"],
            subtitle=community_name,
            summary=row["summary"],
            description=row["description"],
            tags=[row["visibility"]],
            filters=filters.build(),
            metadata=metadata.build(),
            index_text=IndexText(summary=row["summary"], description=row["description"]),
            keywords=KeywordSources(
                scalars=[community_name, community_country, row["timezone"], row["status"]],
            ),
        )
