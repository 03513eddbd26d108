"""
Generic CRUD repository.

One repository per resource kind; each operation is a single SQL statement.
Store failures are translated into the application error taxonomy.
"""
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from club_api.errors import NotFound, translate_db_error

ModelT = TypeVar("ModelT")

# Primary keys are 32-bit INTEGER columns; ids outside this range cannot exist
MAX_ID = 2**31 - 1


def id_in_range(entity_id: int) -> bool:
    return 1 <= entity_id <= MAX_ID


class ResourceRepository(Generic[ModelT]):
    """
    Create/list/get/update/delete for one ORM model.

    Subclasses set `model` and `resource_name`, and override
    `list_criteria()` and `ordering()` for their listing rules.
    """

    model: Type[ModelT]
    resource_name: str = "Resource"

    def __init__(self, session: AsyncSession):
        self.session = session

    def list_criteria(self) -> Sequence[Any]:
        """WHERE clauses applied by list(). Not applied by get()."""
        return ()

    def ordering(self) -> Sequence[Any]:
        return (self.model.id.asc(),)

    def _require_valid_id(self, entity_id: int) -> None:
        if not id_in_range(entity_id):
            raise NotFound(f"{self.resource_name} not found")

    async def create(self, fields: dict) -> ModelT:
        """
        Insert one row and return it with store-generated id and timestamps.

        Raises:
            PersistenceError: constraint violation or connectivity failure
        """
        stmt = insert(self.model).values(**fields).returning(self.model)
        try:
            result = await self.session.execute(stmt)
            entity = result.scalar_one()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise translate_db_error(e, self.resource_name) from e
        return entity

    async def list(self) -> List[ModelT]:
        stmt = select(self.model).where(*self.list_criteria()).order_by(*self.ordering())
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise translate_db_error(e, self.resource_name) from e
        return list(result.scalars().all())

    async def get(self, entity_id: int) -> ModelT:
        """
        Fetch one row by id, regardless of visibility flags.

        Raises:
            NotFound: no row with that id
            PersistenceError: connectivity failure
        """
        self._require_valid_id(entity_id)
        stmt = select(self.model).where(self.model.id == entity_id)
        try:
            result = await self.session.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise translate_db_error(e, self.resource_name) from e

    async def update(self, entity_id: int, changes: dict) -> ModelT:
        """
        Apply a partial update in one statement.

        Columns named in `changes` are overwritten (None clears them), every
        other column keeps its stored value. updated_at is always refreshed.

        Raises:
            NotFound: no row with that id
            PersistenceError: constraint violation or connectivity failure
        """
        self._require_valid_id(entity_id)
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**changes, updated_at=func.now())
            .returning(self.model)
        )
        try:
            result = await self.session.execute(
                stmt,
                execution_options={"synchronize_session": False, "populate_existing": True},
            )
            entity: Optional[ModelT] = result.scalar_one_or_none()
            if entity is None:
                await self.session.rollback()
                raise NotFound(f"{self.resource_name} not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise translate_db_error(e, self.resource_name) from e
        return entity

    async def delete(self, entity_id: int) -> None:
        """
        Delete one row by id.

        Raises:
            NotFound: zero rows removed (including a repeated delete)
            PersistenceError: connectivity failure
        """
        self._require_valid_id(entity_id)
        stmt = delete(self.model).where(self.model.id == entity_id)
        try:
            result = await self.session.execute(stmt, execution_options={"synchronize_session": False})
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFound(f"{self.resource_name} not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise translate_db_error(e, self.resource_name) from e
