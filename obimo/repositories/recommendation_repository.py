"""
Recommendation repository.

Recommendations are keyed naturally by (user_id, recommended_user_id); at most
one row per pair may be active, enforced by a partial unique index.
"""

from __future__ import annotations
from typing import Optional
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, and_, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from obimo.models.recommendation import Recommendation
from .base import BaseRepository

logger = logging.getLogger(__name__)


class RecommendationRepository(BaseRepository[Recommendation]):
    """
    Repository for Recommendation model.

    Provides methods for:
    - Looking up the active row for a user/candidate pair
    - Listing a user's live (active, unexpired) recommendations
    - Scoped lookups so a user can only touch their own rows
    """

    def __init__(self):
        super().__init__(Recommendation)

    async def find_active(
        self,
        db: AsyncSession,
        user_id: UUID,
        recommended_user_id: UUID
    ) -> Optional[Recommendation]:
        """
        Get the active recommendation for a user/candidate pair.

        Returns:
            The active row, or None if the pair has no active recommendation
        """
        try:
            stmt = (
                select(Recommendation)
                .where(
                    and_(
                        Recommendation.user_id == user_id,
                        Recommendation.recommended_user_id == recommended_user_id,
                        Recommendation.is_active == True
                    )
                )
                .limit(1)
            )
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching active recommendation {user_id} -> {recommended_user_id}: {e}")
            raise

    async def list_active_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        now: datetime,
        limit: int = 20
    ) -> list[Recommendation]:
        """
        List active, unexpired recommendations ordered by confidence (highest first).
        """
        try:
            stmt = (
                select(Recommendation)
                .where(
                    and_(
                        Recommendation.user_id == user_id,
                        Recommendation.is_active == True,
                        or_(
                            Recommendation.expires_at.is_(None),
                            Recommendation.expires_at > now
                        )
                    )
                )
                .order_by(desc(Recommendation.confidence_score), desc(Recommendation.updated_at))
                .limit(limit)
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing recommendations for user {user_id}: {e}")
            raise

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        recommendation_id: UUID
    ) -> Optional[Recommendation]:
        """Get a recommendation by id, only if it belongs to ``user_id``."""
        try:
            stmt = select(Recommendation).where(
                and_(
                    Recommendation.id == recommendation_id,
                    Recommendation.user_id == user_id
                )
            )
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching recommendation {recommendation_id} for user {user_id}: {e}")
            raise
