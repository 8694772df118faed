"""
Interaction repository for the append-only user interaction log.
"""

from __future__ import annotations
from typing import Optional, Sequence
from uuid import UUID
from sqlalchemy import select, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from obimo.models.interaction import Interaction, InteractionType
from .base import BaseRepository

logger = logging.getLogger(__name__)


class InteractionRepository(BaseRepository[Interaction]):
    """
    Repository for Interaction model.

    Interactions are only ever inserted and read back; there is no update path.
    """

    def __init__(self):
        super().__init__(Interaction)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        interaction_type: Optional[InteractionType] = None,
        limit: int = 100
    ) -> list[Interaction]:
        """
        List interactions performed by a user, most recent first.

        Args:
            db: Active database session
            user_id: Acting user
            interaction_type: Restrict to one interaction type
            limit: Maximum number of rows

        Returns:
            List of interactions
        """
        try:
            stmt = select(Interaction).where(Interaction.user_id == user_id)
            if interaction_type is not None:
                stmt = stmt.where(Interaction.interaction_type == interaction_type)
            stmt = stmt.order_by(desc(Interaction.created_at)).limit(limit)

            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing interactions for user {user_id}: {e}")
            raise

    async def find_reciprocal(
        self,
        db: AsyncSession,
        user_id: UUID,
        target_id: UUID,
        interaction_types: Sequence[InteractionType]
    ) -> Optional[Interaction]:
        """
        Find an interaction of one of ``interaction_types`` made by ``target_id``
        toward ``user_id``.

        Returns:
            The most recent matching interaction, or None
        """
        try:
            stmt = (
                select(Interaction)
                .where(
                    and_(
                        Interaction.user_id == target_id,
                        Interaction.target_id == user_id,
                        Interaction.interaction_type.in_(list(interaction_types))
                    )
                )
                .order_by(desc(Interaction.created_at))
                .limit(1)
            )
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up reciprocal interaction {target_id} -> {user_id}: {e}")
            raise
