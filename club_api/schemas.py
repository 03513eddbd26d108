"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.

Update schemas are patches: a field left out of the request keeps its stored
value, a field sent as null clears it. Fields that may not be null reject an
explicit null.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from datetime import date, datetime, time
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


def _reject_null(value, info: ValidationInfo):
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value


class PatchModel(BaseModel):
    """Base for partial updates."""

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict:
        """Fields the caller actually sent, including explicit nulls."""
        return self.model_dump(exclude_unset=True)


# Events

class EventCreate(BaseModel):
    """Request schema for POST /api/events."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    event_type: Optional[str] = Field(default=None, max_length=100)
    image_id: Optional[int] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(default=None, max_length=255)
    is_published: bool = False


class EventUpdate(PatchModel):
    """Request schema for PUT /api/events/{id}."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    event_type: Optional[str] = Field(default=None, max_length=100)
    image_id: Optional[int] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(default=None, max_length=255)
    is_published: Optional[bool] = None

    @field_validator("title", "is_published")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    event_type: Optional[str] = None
    image_url: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime


# Gallery

class GalleryItemCreate(BaseModel):
    """Request schema for POST /api/gallery."""
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    image_id: Optional[int] = None
    display_order: Optional[int] = None
    is_featured: bool = False
    gallery_category: Optional[str] = Field(default=None, max_length=100)


class GalleryItemUpdate(PatchModel):
    """Request schema for PUT /api/gallery/{id}."""
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    image_id: Optional[int] = None
    display_order: Optional[int] = None
    is_featured: Optional[bool] = None
    gallery_category: Optional[str] = Field(default=None, max_length=100)

    @field_validator("is_featured")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)


class GalleryItemResponse(BaseModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    is_featured: bool
    gallery_category: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# Team members

class TeamMemberCreate(BaseModel):
    """Request schema for POST /api/team-members."""
    name: str = Field(min_length=1, max_length=255)
    position: str = Field(min_length=1, max_length=255)
    bio: Optional[str] = None
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    image_id: Optional[int] = None
    display_order: Optional[int] = None
    is_active: bool = True


class TeamMemberUpdate(PatchModel):
    """Request schema for PUT /api/team-members/{id}."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    position: Optional[str] = Field(default=None, min_length=1, max_length=255)
    bio: Optional[str] = None
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    image_id: Optional[int] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("name", "position", "is_active")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)


class TeamMemberResponse(BaseModel):
    id: int
    name: str
    position: str
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# Images

class ImageMetadataResponse(BaseModel):
    """
    Image metadata without the binary payload.
    Used by GET /api/images and PUT /api/images/{id}.
    """
    id: int
    image_name: str
    content_type: str
    file_size: int
    category: Optional[str] = None
    description: Optional[str] = None
    uploaded_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ImageUploadResponse(BaseModel):
    """Summary returned by POST /api/images."""
    id: int
    image_name: str
    file_size: int
    content_type: str
    category: Optional[str] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ImageUpdate(PatchModel):
    """Request schema for PUT /api/images/{id}."""
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None


# Envelopes

class ListResponse(BaseModel, Generic[T]):
    """Unpaginated listing: {data, total}."""
    data: List[T]
    total: int


class ImagePageResponse(BaseModel):
    """Paginated image listing. total counts the whole filtered set, not the page."""
    data: List[ImageMetadataResponse]
    total: int
    page: int
    page_size: int


class DeleteResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str
