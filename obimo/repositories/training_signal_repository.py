"""
Training signal repository for the append-only telemetry table.
"""

from __future__ import annotations
from typing import Sequence
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from obimo.models.training_signal import TrainingSignal
from .base import BaseRepository

logger = logging.getLogger(__name__)


class TrainingSignalRepository(BaseRepository[TrainingSignal]):
    """Repository for TrainingSignal model."""

    def __init__(self):
        super().__init__(TrainingSignal)

    async def list_unprocessed(
        self,
        db: AsyncSession,
        limit: int = 100
    ) -> list[TrainingSignal]:
        """List signals not yet consumed by a training job, oldest first."""
        try:
            stmt = (
                select(TrainingSignal)
                .where(TrainingSignal.processed == False)
                .order_by(TrainingSignal.created_at)
                .limit(limit)
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing unprocessed training signals: {e}")
            raise

    async def mark_processed(
        self,
        db: AsyncSession,
        signal_ids: Sequence[UUID]
    ) -> int:
        """
        Flag signals as processed.

        Returns:
            Number of rows updated
        """
        if not signal_ids:
            return 0
        try:
            stmt = (
                update(TrainingSignal)
                .where(TrainingSignal.id.in_(list(signal_ids)))
                .values(processed=True)
            )
            result = await db.execute(stmt)
            await db.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error marking {len(signal_ids)} training signals processed: {e}")
            await db.rollback()
            raise
