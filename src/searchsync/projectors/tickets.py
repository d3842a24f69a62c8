"""Support ticket projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_object, text_of


class TicketProjector(EntityProjector):
    """Learner support cases, with the requester's email joined from users.

    The category is both the subtitle and the only tag. It is also what
    the index treats as the summary; the displayed summary and description
    come from the ticket's metadata JSON.
    """

    entity_type = EntityType.TICKETS.value
    table = "learner_support_cases"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            """
            SELECT c.*, u.email AS requester_email
            FROM learner_support_cases c
            LEFT JOIN users u ON u.id = c.user_id
            WHERE c.id = ?
            """,
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        meta = json_object(row["metadata"], "metadata")
        description = text_of(meta.get("description"))

        filters = (
            AttributeMap()
            .set("category", row["category"])
            .set("priority", row["priority"])
            .set("status", row["status"])
            .set("channel", row["channel"])
        )
        metadata = (
            AttributeMap()
            .set("reference", row["reference"])
            .set("satisfaction", row["satisfaction"])
            .set("channel", row["channel"])
            .set("requester", row["requester_email"])
        )

        return ProjectedFields(
            slug=row["reference"],
            title=row["subject"],
            subtitle=row["category"],
            summary=text_of(meta.get("summary")),
            description=description,
            tags=[row["category"]],
            filters=filters.build(),
            metadata=metadata.build(),
            index_text=IndexText(summary=row["category"], description=description),
            keywords=KeywordSources(
                scalars=[
                    row["priority"],
                    row["status"],
                    row["channel"],
                    row["requester_email"],
                ],
            ),
        )
