"""
Image routes: multipart upload, raw content serving, metadata listing,
metadata update and delete.
"""
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import ClientDisconnect
from typing import Optional
from urllib.parse import quote
import logging

from club_api.config import Settings
from club_api.database import get_app_settings, get_db
from club_api.errors import MultipartError
from club_api.projections import project_image_metadata, project_image_upload
from club_api.repositories.images import ImageRepository, clamp_pagination
from club_api.schemas import (
    DeleteResponse,
    ImageMetadataResponse,
    ImagePageResponse,
    ImageUpdate,
    ImageUploadResponse,
)
from club_api.services.image_ingest import check_declared_length, ingest_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images")


def get_image_repository(db: AsyncSession = Depends(get_db)) -> ImageRepository:
    return ImageRepository(db)


def content_disposition(filename: str) -> str:
    """inline disposition with an ASCII fallback name and the UTF-8 original."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'").replace("\\", "_")
    if fallback == filename:
        return f'inline; filename="{fallback}"'
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.post("", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    repository: ImageRepository = Depends(get_image_repository),
):
    """
    Upload an image as multipart form data.

    Form fields:
        file: the image (required)
        category: optional category label
        description: optional free text

    Returns:
        ImageUploadResponse: summary of the stored image

    Raises:
        BadRequest: no file, an empty one, or a file sent as category/description
        InvalidFileType: content type outside the allow-list
        PayloadTooLarge: file larger than MAX_FILE_SIZE
        MultipartError: malformed body or client disconnect
    """
    max_size = settings.MAX_FILE_SIZE
    check_declared_length(request.headers.get("content-length"), max_size)

    try:
        ingested = await ingest_image(request.stream(), request.headers.get("content-type"), max_size)
    except ClientDisconnect:
        logger.warning("Client disconnected during image upload")
        raise MultipartError("Upload aborted by client")

    image = await repository.create_from_upload(ingested)
    logger.info(f"Image uploaded: {image.image_name} (ID: {image.id}, {image.file_size:,} bytes)")
    return project_image_upload(image)


@router.get("", response_model=ImagePageResponse)
async def list_images(
    category: Optional[str] = None,
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None),
    repository: ImageRepository = Depends(get_image_repository),
):
    """
    List image metadata, newest first.

    Args:
        category: only images in this category
        page: 1-based page number (values below 1 become 1)
        page_size: images per page, clamped to [1, 100] (default 20)

    Returns:
        ImagePageResponse: one page plus the total number of matching images
    """
    page, page_size = clamp_pagination(page, page_size)
    images = await repository.list_metadata(category=category, page=page, page_size=page_size)
    total = await repository.count(category=category)

    logger.info(f"Retrieved {len(images)} of {total} images (category: {category}, page: {page})")

    return ImagePageResponse(
        data=[project_image_metadata(image) for image in images],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{image_id}")
async def get_image(image_id: int, repository: ImageRepository = Depends(get_image_repository)):
    """Serve the stored bytes with their original content type."""
    image = await repository.get(image_id)
    logger.info(f"Image retrieved: ID {image_id}")
    return Response(
        content=image.image_data,
        media_type=image.content_type,
        headers={"Content-Disposition": content_disposition(image.image_name)},
    )


@router.put("/{image_id}", response_model=ImageMetadataResponse)
async def update_image(
    image_id: int,
    patch: ImageUpdate,
    repository: ImageRepository = Depends(get_image_repository),
):
    """Update category and/or description."""
    image = await repository.update(image_id, patch.changes())
    logger.info(f"Image updated: ID {image_id}")
    return project_image_metadata(image)


@router.delete("/{image_id}", response_model=DeleteResponse)
async def delete_image(image_id: int, repository: ImageRepository = Depends(get_image_repository)):
    await repository.delete(image_id)
    logger.info(f"Image deleted: ID {image_id}")
    return {"success": True, "message": "Image deleted successfully"}
