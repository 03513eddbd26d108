"""
Entity -> response DTO mapping.

Linked resources expose image_url instead of image_id. The URL is built from
the id alone; the referenced image is never looked up.
"""
from functools import partial
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

from club_api.schemas import (
    EventResponse,
    GalleryItemResponse,
    TeamMemberResponse,
    ImageMetadataResponse,
    ImageUploadResponse,
)

IMAGE_URL_PREFIX = "/api/images/"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def image_url_for(image_id: Optional[int]) -> Optional[str]:
    """Public URL of an image, or None when there is no image."""
    if image_id is None:
        return None
    return f"{IMAGE_URL_PREFIX}{image_id}"


def project_linked(entity, schema: Type[ResponseT]) -> ResponseT:
    """Copy the schema's fields off the entity, swapping image_id for image_url."""
    data = {
        name: getattr(entity, name)
        for name in schema.model_fields
        if name != "image_url"
    }
    data["image_url"] = image_url_for(entity.image_id)
    return schema(**data)


project_event = partial(project_linked, schema=EventResponse)
project_gallery_item = partial(project_linked, schema=GalleryItemResponse)
project_team_member = partial(project_linked, schema=TeamMemberResponse)


def project_image_metadata(image) -> ImageMetadataResponse:
    return ImageMetadataResponse.model_validate(image)


def project_image_upload(image) -> ImageUploadResponse:
    return ImageUploadResponse.model_validate(image)
