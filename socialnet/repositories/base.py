"""
Base Repository - Generic repository with common CRUD operations.

This provides:
1. Generic CRUD operations for all models
2. Type safety with generics
3. Page/count helpers shared by every listing
4. Async database operations
"""

from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.database import Base

# Generic type for any database model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing common CRUD operations.

    This is the foundation of our Repository pattern:
    - All specific repositories inherit from this
    - Provides type-safe operations
    - Consistent interface across the application

    Writes commit by default; pass `commit=False` to stage several writes
    and let the service commit them together.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model type and database session.

        Args:
            model: The SQLAlchemy model class (User, Post, etc.)
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_data: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Create a new record.

        Args:
            obj_data: Dictionary of field values
            commit: Commit immediately, or only flush to get the id

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_data)
        self.db.add(db_obj)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        await self.db.refresh(db_obj)
        return db_obj

    async def get(self, id: int) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: int, obj_data: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update a record by ID.

        Args:
            id: Primary key value
            obj_data: Dictionary of fields to update

        Returns:
            Updated model instance or None if not found
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.db.commit()
        await self.db.refresh(db_obj)
        return db_obj

    async def delete(self, id: int) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        await self.db.commit()
        return result.rowcount > 0

    async def count(self) -> int:
        """Count every record of the model."""
        result = await self.db.execute(select(func.count(self.model.id)))
        return result.scalar() or 0

    async def exists(self, id: int) -> bool:
        """
        Check if record exists by ID.

        Returns:
            True if exists, False otherwise
        """
        result = await self.db.execute(select(self.model.id).where(self.model.id == id))
        return result.first() is not None

    async def count_query(self, query: Select) -> int:
        """Count the rows a select would return."""
        result = await self.db.execute(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        return result.scalar() or 0

    async def paginate(
        self,
        query: Select,
        skip: int = 0,
        limit: int = 10,
        options: Sequence[Any] = (),
    ) -> Tuple[List[Any], int]:
        """
        Run one page of a query and count all of its matches.

        Rows loaded with eager-load options are refreshed so their
        relations reflect the database.

        The page and the count are two statements, so under concurrent
        writes they can observe different snapshots.

        Returns:
            (page rows, number of rows matching the query)
        """
        results_count = await self.count_query(query)
        page_query = query.offset(max(skip, 0)).limit(limit)
        if options:
            page_query = page_query.options(*options).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(page_query)
        return list(result.scalars().all()), results_count
