from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.sql.expression import SelectOfScalar
from catalog_admin.core.database.transaction import in_transaction
from catalog_admin.core.exceptions import errors
from catalog_admin.core.types import IDType
from catalog_admin.domain.schemas import OffsetPaginationRequest, OffsetPaginationResponse

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base repository providing id lookups, persistence and page/limit pagination
    for SQLModel models.\n

    Inside a :class:`~catalog_admin.core.database.transaction.Transaction`
    writes are only flushed, so the outermost transaction decides whether
    they commit. Outside of one every write commits immediately.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _save_changes(self, refresh_obj=None):
        """
        Flush or commit pending changes, then optionally refresh an object.

        Raises:
            DatabaseError: If the database rejects the changes
        """
        try:
            if in_transaction(self.session):
                await self.session.flush()
            else:
                await self.session.commit()

            if refresh_obj is not None:
                await self.session.refresh(refresh_obj)
        except SQLAlchemyError as e:
            if not in_transaction(self.session):
                await self.session.rollback()
            raise errors.DatabaseError(
                message="Failed to save changes",
                detail="An error occurred while saving changes to the database.",
            ) from e

    async def _execute(self, statement: Any) -> Any:
        """
        Execute a statement and return its result.

        Raises:
            DatabaseError: If the statement fails
        """
        try:
            return await self.session.exec(statement)  # type: ignore
        except SQLAlchemyError as e:
            raise errors.DatabaseError(
                message="Failed to execute statement",
                detail="An error occurred while executing the query.",
            ) from e

    async def find_one_by(self, id: IDType) -> ModelType | None:
        """
        Get a single record by ID.

        Args:
            id (IDType): The id of the record to retrieve

        Returns:
            ModelType | None: The found record or None
        """
        if not id:
            return None

        query = select(self.model).where(col(self.model.id) == id)  # type: ignore
        return (await self._execute(query)).one_or_none()

    async def find_by_ids(self, ids: Sequence[IDType]) -> list[ModelType]:
        """
        Get every record whose id is in ``ids``, in no particular order.
        """
        if not ids:
            return []

        query = select(self.model).where(col(self.model.id).in_(list(ids)))  # type: ignore
        return list((await self._execute(query)).all())

    async def paginate(
        self,
        query: SelectOfScalar[ModelType],
        pagination: OffsetPaginationRequest,
    ) -> OffsetPaginationResponse[ModelType]:
        """
        Run an already filtered and ordered query one page at a time.

        Args:
            query: The select to paginate
            pagination: Page and limit

        Returns:
            OffsetPaginationResponse: The page of records with its metadata
        """
        count_query = select(func.count()).select_from(query.subquery())
        total_count = (await self._execute(count_query)).one()

        paginated_query = query.offset(pagination.get_offset()).limit(pagination.limit)
        items = list((await self._execute(paginated_query)).all())

        return OffsetPaginationResponse.build(
            items,
            page=pagination.page,
            per_page=pagination.limit,
            total_count=total_count,
        )

    async def create(self, schema: CreateSchemaType | dict[str, Any]) -> ModelType:
        """
        Create a new record from a schema or a mapping of field values.
        """
        if isinstance(schema, BaseModel):
            schema = schema.model_dump()

        db_obj = self.model(**schema)
        return await self.save(db_obj)

    async def save(self, db_obj: ModelType) -> ModelType:
        """
        Persist a new record, or pending changes made directly on a loaded one.
        """
        self.session.add(db_obj)
        await self._save_changes(refresh_obj=db_obj)
        return db_obj

    async def save_all(self, db_objs: Sequence[ModelType]) -> None:
        """
        Persist pending changes made directly on several loaded records at once.
        """
        self.session.add_all(list(db_objs))
        await self._save_changes()

    async def delete(self, id: IDType) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if the record was deleted, False if not found
        """
        result = await self.find_one_by(id)

        if not result:
            return False

        await self.session.delete(result)
        await self._save_changes()
        return True
