"""Per-entity projectors and the default projector registry."""

from searchsync.projectors.ads import AdCampaignProjector
from searchsync.projectors.base import EntityProjector, ProjectorRegistry
from searchsync.projectors.communities import CommunityProjector
from searchsync.projectors.courses import CourseProjector
from searchsync.projectors.ebooks import EbookProjector
from searchsync.projectors.events import EventProjector
from searchsync.projectors.tickets import TicketProjector
from searchsync.projectors.tutors import TutorProjector


def default_registry() -> ProjectorRegistry:
    """Registry with a projector for each of the seven entity types."""
    return ProjectorRegistry(
        [
            CourseProjector(),
            CommunityProjector(),
            TutorProjector(),
            TicketProjector(),
            EbookProjector(),
            AdCampaignProjector(),
            EventProjector(),
        ]
    )


__all__ = [
    "AdCampaignProjector",
    "CommunityProjector",
    "CourseProjector",
    "EbookProjector",
    "EntityProjector",
    "EventProjector",
    "ProjectorRegistry",
    "TicketProjector",
    "TutorProjector",
    "default_registry",
]
