"""
Image repository: rows carry the binary payload.

get() loads the payload for raw serving; list_metadata() never does.
"""
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import defer
from typing import List, Optional

from club_api.errors import translate_db_error
from club_api.models import Image
from club_api.repositories.base import MAX_ID, ResourceRepository
from club_api.services.image_ingest import IngestedImage

DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


def clamp_pagination(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    """page defaults to 1 and is at least 1; page_size defaults to 20 and stays within [1, 100]."""
    page = max(page or 1, 1)
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)
    return page, page_size


class ImageRepository(ResourceRepository[Image]):
    model = Image
    resource_name = "Image"

    def ordering(self):
        return (Image.uploaded_at.desc(), Image.id.desc())

    def _category_criteria(self, category: Optional[str]):
        if category is None:
            return ()
        return (Image.category == category,)

    async def create_from_upload(self, upload: IngestedImage) -> Image:
        """Store payload and metadata as a single row."""
        return await self.create({
            "image_name": upload.image_name,
            "image_data": upload.data,
            "content_type": upload.content_type,
            "file_size": upload.file_size,
            "category": upload.category,
            "description": upload.description,
        })

    async def list_metadata(
        self,
        category: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> List[Image]:
        """One page of images, newest first, without their payloads."""
        offset = (page - 1) * page_size
        if offset > MAX_ID:
            # Past the last possible row; the offset would not fit a bind parameter
            return []
        stmt = (
            select(Image)
            .options(defer(Image.image_data, raiseload=True))
            .where(*self._category_criteria(category))
            .order_by(*self.ordering())
            .limit(page_size)
            .offset(offset)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise translate_db_error(e, self.resource_name) from e
        return list(result.scalars().all())

    async def count(self, category: Optional[str] = None) -> int:
        """Number of images matching the filter, across all pages."""
        stmt = select(func.count(Image.id)).where(*self._category_criteria(category))
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise translate_db_error(e, self.resource_name) from e
        return result.scalar_one()
