"""
Base repository implementing common CRUD operations using SQLAlchemy 2.0.

Model-specific repositories extend this class with their own queries. Every
method takes the session explicitly; committing is left to the caller.
"""

from __future__ import annotations
from typing import Generic, TypeVar, Type, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

# Generic type variable for the model
T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for CRUD operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self):
                super().__init__(User)
    """

    def __init__(self, model: Type[T]):
        self.model = model

    async def get(
        self,
        db: AsyncSession,
        id: UUID
    ) -> Optional[T]:
        """
        Retrieve a single record by ID.

        Returns:
            Model instance if found, None otherwise
        """
        try:
            stmt = select(self.model).where(self.model.id == id)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching {self.model.__name__} by id {id}: {e}")
            raise

    async def create(
        self,
        db: AsyncSession,
        obj_in: dict
    ) -> T:
        """
        Create a new record and flush it so database defaults are populated.

        Raises:
            IntegrityError: If constraints are violated (e.g. a second active
                recommendation for the same pair)
        """
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)
            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"Integrity error creating {self.model.__name__}: {e}")
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model.__name__}: {e}")
            await db.rollback()
            raise

    async def update(
        self,
        db: AsyncSession,
        db_obj: T,
        obj_in: dict
    ) -> T:
        """Update only the provided fields of an existing record."""
        try:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"Integrity error updating {self.model.__name__}: {e}")
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model.__name__}: {e}")
            await db.rollback()
            raise

