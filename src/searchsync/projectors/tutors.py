"""Tutor profile projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import merged_terms
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_list


class TutorProjector(EntityProjector):
    """Tutor profiles. Skills double as tags; the headline is indexed as
    the tier B summary although the document has no summary of its own."""

    entity_type = EntityType.TUTORS.value
    table = "tutor_profiles"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            "SELECT * FROM tutor_profiles WHERE id = ?",
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        skills = json_list(row["skills"], "skills")
        languages = json_list(row["languages"], "languages")
        is_verified = None if row["is_verified"] is None else bool(row["is_verified"])

        filters = (
            AttributeMap()
            .set_list("languages", languages)
            .set_list("skills", skills)
            .set("country", row["country"])
            .set("isVerified", is_verified)
            .set("hourlyRate.amount", row["hourly_rate_amount"])
            .set("hourlyRate.currency", row["hourly_rate_currency"])
        )
        metadata = (
            AttributeMap()
            .nest("rating", average=row["rating_average"], count=row["rating_count"])
            .set("completedSessions", row["completed_sessions"])
            .set("responseTimeMinutes", row["response_time_minutes"])
            .set("country", row["country"])
            .set("isVerified", is_verified)
            .nest(
                "hourlyRate",
                amount=row["hourly_rate_amount"],
                currency=row["hourly_rate_currency"],
            )
        )

        return ProjectedFields(
            title=row["display_name"],
            subtitle=row["headline"],
            description=row["bio"],
            tags=skills,
            filters=filters.build(),
            metadata=metadata.build(),
            index_text=IndexText(summary=row["headline"], description=row["bio"]),
            keywords=KeywordSources(
                scalars=[row["country"]],
                lists=[merged_terms(skills, languages)],
            ),
        )
