"""
CRUD routes for events, gallery items and team members.

The three resources share one route layout; build_resource_router wires a
repository, its request schemas and its projector onto it.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable, Type
import logging

from club_api.database import get_db
from club_api.projections import project_event, project_gallery_item, project_team_member
from club_api.repositories.base import ResourceRepository
from club_api.repositories.resources import EventRepository, GalleryRepository, TeamMemberRepository
from club_api.schemas import (
    DeleteResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
    GalleryItemCreate,
    GalleryItemResponse,
    GalleryItemUpdate,
    ListResponse,
    PatchModel,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
)

logger = logging.getLogger(__name__)


def build_resource_router(
    prefix: str,
    repository_class: Type[ResourceRepository],
    create_schema,
    update_schema: Type[PatchModel],
    response_schema,
    project: Callable,
) -> APIRouter:
    """
    Create an APIRouter exposing POST/GET/GET{id}/PUT{id}/DELETE{id} for one resource.

    Args:
        prefix: URL prefix, e.g. "/events"
        repository_class: repository bound to the resource's model
        create_schema: request body model for POST
        update_schema: patch model for PUT
        response_schema: public DTO
        project: entity -> DTO mapping
    """
    router = APIRouter(prefix=prefix)
    name = repository_class.resource_name

    def get_repository(db: AsyncSession = Depends(get_db)) -> ResourceRepository:
        return repository_class(db)

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_resource(
        payload: create_schema,
        repository: ResourceRepository = Depends(get_repository),
    ):
        entity = await repository.create(payload.model_dump())
        logger.info(f"{name} created: ID {entity.id}")
        return project(entity)

    @router.get("", response_model=ListResponse[response_schema])
    async def list_resources(repository: ResourceRepository = Depends(get_repository)):
        entities = await repository.list()
        logger.info(f"Retrieved {len(entities)} {name.lower()} rows")
        return {"data": [project(entity) for entity in entities], "total": len(entities)}

    @router.get("/{entity_id}", response_model=response_schema)
    async def get_resource(entity_id: int, repository: ResourceRepository = Depends(get_repository)):
        entity = await repository.get(entity_id)
        logger.info(f"Retrieved {name.lower()}: ID {entity_id}")
        return project(entity)

    @router.put("/{entity_id}", response_model=response_schema)
    async def update_resource(
        entity_id: int,
        patch: update_schema,
        repository: ResourceRepository = Depends(get_repository),
    ):
        changes = patch.changes()
        entity = await repository.update(entity_id, changes)
        logger.info(f"{name} updated: ID {entity_id} (fields: {sorted(changes) or 'none'})")
        return project(entity)

    @router.delete("/{entity_id}", response_model=DeleteResponse)
    async def delete_resource(entity_id: int, repository: ResourceRepository = Depends(get_repository)):
        await repository.delete(entity_id)
        logger.info(f"{name} deleted: ID {entity_id}")
        return {"success": True, "message": f"{name} deleted successfully"}

    return router


events_router = build_resource_router(
    "/events", EventRepository, EventCreate, EventUpdate, EventResponse, project_event,
)
gallery_router = build_resource_router(
    "/gallery", GalleryRepository, GalleryItemCreate, GalleryItemUpdate, GalleryItemResponse, project_gallery_item,
)
team_router = build_resource_router(
    "/team-members", TeamMemberRepository, TeamMemberCreate, TeamMemberUpdate, TeamMemberResponse, project_team_member,
)
