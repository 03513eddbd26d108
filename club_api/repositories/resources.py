"""
Repositories for the linked resources: events, gallery items and team members.

Listing rules differ per resource: events show published rows only, team
members active rows only, the gallery everything.
"""
from club_api.models import Event, GalleryItem, TeamMember
from club_api.repositories.base import ResourceRepository


class EventRepository(ResourceRepository[Event]):
    model = Event
    resource_name = "Event"

    def list_criteria(self):
        return (Event.is_published.is_(True),)

    def ordering(self):
        # Newest first, undated events last
        return (Event.event_date.desc().nulls_last(), Event.id.asc())


class GalleryRepository(ResourceRepository[GalleryItem]):
    model = GalleryItem
    resource_name = "Gallery item"

    def ordering(self):
        return (GalleryItem.display_order.asc().nulls_last(), GalleryItem.id.asc())


class TeamMemberRepository(ResourceRepository[TeamMember]):
    model = TeamMember
    resource_name = "Team member"

    def list_criteria(self):
        return (TeamMember.is_active.is_(True),)

    def ordering(self):
        return (TeamMember.display_order.asc().nulls_last(), TeamMember.id.asc())
