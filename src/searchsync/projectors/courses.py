"""Course projector."""

import sqlite3

from searchsync.documents.attributes import AttributeMap
from searchsync.documents.normalizer import merged_terms
from searchsync.documents.schemas import EntityType, IndexText, KeywordSources, ProjectedFields
from searchsync.projectors.base import EntityProjector, json_list


class CourseProjector(EntityProjector):
    """Courses, with the instructor's name joined from users.

    The tags field holds course tags only; skills and languages reach the
    index through the keyword bag.
    """

    entity_type = EntityType.COURSES.value
    table = "courses"

    def load(self, conn: sqlite3.Connection, entity_id: int) -> sqlite3.Row | None:
        return conn.execute(
            """
            SELECT
                c.*,
                NULLIF(TRIM(COALESCE(u.first_name, '') || ' ' || COALESCE(u.last_name, '')), '')
                    AS instructor_name
            FROM courses c
            LEFT JOIN users u ON u.id = c.instructor_id
            WHERE c.id = ?
            """,
            (entity_id,),
        ).fetchone()

    def project(self, row: sqlite3.Row) -> ProjectedFields:
        tags = json_list(row["tags"], "tags")
        skills = json_list(row["skills"], "skills")
        languages = json_list(row["languages"], "languages")
        instructor = row["instructor_name"]
        is_published = row["is_published"]

        filters = (
            AttributeMap()
            .set("level", row["level"])
            .set("category", row["category"])
            .set("deliveryFormat", row["delivery_format"])
            .set("price.currency", row["price_currency"])
            .set("price.amount", row["price_amount"])
            .set_list("languages", languages)
            .set_list("skills", skills)
            .set_list("tags", tags)
        )
        metadata = (
            AttributeMap()
            .set("instructorName", instructor)
            .nest("price", currency=row["price_currency"], amount=row["price_amount"])
            .nest("rating", average=row["rating_average"], count=row["rating_count"])
            .set("enrolmentCount", row["enrolment_count"])
            .set("releaseAt", row["release_at"])
            .set("status", row["status"])
            .set("isPublished", None if is_published is None else bool(is_published))
            .set("category", row["category"])
            .set("level", row["level"])
        )
        media = (
            AttributeMap()
            .set("thumbnailUrl", row["thumbnail_url"])
            .set("heroImageUrl", row["hero_image_url"])
            .set("trailerUrl", row["trailer_url"])
            .set("promoVideoUrl", row["promo_video_url"])
            .set("syllabusUrl", row["syllabus_url"])
        )

        return ProjectedFields(
            slug=row["slug"],
            title=row["title"],
            subtitle=instructor,
            summary=row["summary"],
            description=row["description"],
            tags=tags,
            filters=filters.build(),
            metadata=metadata.build(),
            media=media.build(),
            index_text=IndexText(summary=row["summary"], description=row["description"]),
            keywords=KeywordSources(
                scalars=[instructor, row["category"], row["level"]],
                lists=[merged_terms(tags, skills, languages)],
            ),
        )
