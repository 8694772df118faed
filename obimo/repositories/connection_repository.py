"""
Connection repository.
"""

from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, and_, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from obimo.models.connection import Connection, ConnectionStatus
from .base import BaseRepository

logger = logging.getLogger(__name__)


class ConnectionRepository(BaseRepository[Connection]):
    """Repository for Connection model."""

    def __init__(self):
        super().__init__(Connection)

    async def list_involving(
        self,
        db: AsyncSession,
        user_id: UUID,
        status: ConnectionStatus,
        limit: int = 50
    ) -> list[Connection]:
        """
        List connections with ``status`` where the user is on either side.

        Returns:
            Up to ``limit`` connections, newest first
        """
        try:
            stmt = (
                select(Connection)
                .where(
                    and_(
                        or_(
                            Connection.user_id == user_id,
                            Connection.connected_user_id == user_id
                        ),
                        Connection.status == status
                    )
                )
                .order_by(desc(Connection.created_at))
                .limit(limit)
            )
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing {status.value} connections for user {user_id}: {e}")
            raise
