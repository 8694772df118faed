"""
User repository with the candidate-pool queries used by the recommendation collectors.
"""

from __future__ import annotations
from typing import Iterable, Sequence
from uuid import UUID
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from obimo.models.user import User
from .base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self):
        super().__init__(User)

    async def get_many(
        self,
        db: AsyncSession,
        user_ids: Sequence[UUID]
    ) -> list[User]:
        """
        Fetch several users in one query.

        Missing ids are silently absent from the result; order is not preserved.
        """
        if not user_ids:
            return []
        try:
            stmt = select(User).where(User.id.in_(list(user_ids)))
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching {len(user_ids)} users: {e}")
            raise

    async def list_onboarded_excluding(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 50,
        exclude_ids: Iterable[UUID] = ()
    ) -> list[User]:
        """
        List onboarded users other than ``user_id``, newest first.

        Args:
            db: Active database session
            user_id: The user the pool is built for (never returned)
            limit: Maximum pool size
            exclude_ids: Additional user ids to leave out of the pool

        Returns:
            Up to ``limit`` users
        """
        try:
            conditions = [User.id != user_id, User.onboarding_completed == True]
            excluded = [uid for uid in exclude_ids if uid != user_id]
            if excluded:
                conditions.append(User.id.notin_(excluded))

            stmt = (
                select(User)
                .where(and_(*conditions))
                .order_by(User.created_at.desc())
                .limit(limit)
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing candidate pool for user {user_id}: {e}")
            raise
