"""
Data-access facade used by the recommendation services.

Every operation opens its own short-lived session from the session factory and
commits writes immediately, so callers can run several reads concurrently
(``asyncio.gather``) without sharing an ``AsyncSession``. There are no
cross-call transactions.
"""

from __future__ import annotations
from typing import Any, Iterable, Optional, Sequence
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from obimo.models.connection import Connection, ConnectionStatus
from obimo.models.interaction import Interaction, InteractionType
from obimo.models.recommendation import Recommendation
from obimo.models.training_signal import TrainingSignal
from obimo.models.user import User
from .connection_repository import ConnectionRepository
from .interaction_repository import InteractionRepository
from .recommendation_repository import RecommendationRepository
from .training_signal_repository import TrainingSignalRepository
from .user_repository import UserRepository


class RecommendationStore:
    """
    Session-per-operation access to users, interactions, connections,
    recommendations and training signals.

    Example:
        store = RecommendationStore(AsyncSessionLocal)
        user = await store.get_user(user_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        user_repo: Optional[UserRepository] = None,
        interaction_repo: Optional[InteractionRepository] = None,
        connection_repo: Optional[ConnectionRepository] = None,
        recommendation_repo: Optional[RecommendationRepository] = None,
        signal_repo: Optional[TrainingSignalRepository] = None,
    ):
        self.session_factory = session_factory
        self.user_repo = user_repo or UserRepository()
        self.interaction_repo = interaction_repo or InteractionRepository()
        self.connection_repo = connection_repo or ConnectionRepository()
        self.recommendation_repo = recommendation_repo or RecommendationRepository()
        self.signal_repo = signal_repo or TrainingSignalRepository()

    # Users

    async def get_user(self, user_id: UUID) -> Optional[User]:
        async with self.session_factory() as db:
            return await self.user_repo.get(db, user_id)

    async def get_users(self, user_ids: Sequence[UUID]) -> list[User]:
        async with self.session_factory() as db:
            return await self.user_repo.get_many(db, user_ids)

    async def list_onboarded_users_excluding(
        self,
        user_id: UUID,
        limit: int,
        exclude_ids: Iterable[UUID] = ()
    ) -> list[User]:
        async with self.session_factory() as db:
            return await self.user_repo.list_onboarded_excluding(
                db, user_id, limit=limit, exclude_ids=exclude_ids
            )

    # Interactions

    async def list_interactions(
        self,
        user_id: UUID,
        interaction_type: Optional[InteractionType] = None,
        limit: int = 100
    ) -> list[Interaction]:
        async with self.session_factory() as db:
            return await self.interaction_repo.list_for_user(
                db, user_id, interaction_type=interaction_type, limit=limit
            )

    async def insert_interaction(self, values: dict[str, Any]) -> Interaction:
        async with self.session_factory() as db:
            interaction = await self.interaction_repo.create(db, values)
            await db.commit()
            return interaction

    async def find_reciprocal_interaction(
        self,
        user_id: UUID,
        target_id: UUID,
        interaction_types: Sequence[InteractionType]
    ) -> Optional[Interaction]:
        async with self.session_factory() as db:
            return await self.interaction_repo.find_reciprocal(
                db, user_id, target_id, interaction_types
            )

    # Connections

    async def list_ended_connections_involving(
        self,
        user_id: UUID,
        limit: int = 50
    ) -> list[Connection]:
        async with self.session_factory() as db:
            return await self.connection_repo.list_involving(
                db, user_id, ConnectionStatus.ended, limit=limit
            )

    # Recommendations

    async def find_active_recommendation(
        self,
        user_id: UUID,
        recommended_user_id: UUID
    ) -> Optional[Recommendation]:
        async with self.session_factory() as db:
            return await self.recommendation_repo.find_active(db, user_id, recommended_user_id)

    async def create_recommendation(self, values: dict[str, Any]) -> Recommendation:
        """
        Insert a recommendation.

        Raises:
            IntegrityError: If the pair already has an active recommendation
        """
        async with self.session_factory() as db:
            recommendation = await self.recommendation_repo.create(db, values)
            await db.commit()
            return recommendation

    async def update_recommendation(
        self,
        recommendation_id: UUID,
        values: dict[str, Any],
        user_id: Optional[UUID] = None
    ) -> Optional[Recommendation]:
        """
        Update a recommendation in place.

        When ``user_id`` is given the row must belong to that user.

        Returns:
            The updated row, or None if no matching row exists
        """
        async with self.session_factory() as db:
            if user_id is not None:
                recommendation = await self.recommendation_repo.get_for_user(db, user_id, recommendation_id)
            else:
                recommendation = await self.recommendation_repo.get(db, recommendation_id)
            if recommendation is None:
                return None
            recommendation = await self.recommendation_repo.update(db, recommendation, values)
            await db.commit()
            return recommendation

    async def list_active_recommendations(
        self,
        user_id: UUID,
        now: datetime,
        limit: int = 20
    ) -> list[Recommendation]:
        async with self.session_factory() as db:
            return await self.recommendation_repo.list_active_for_user(db, user_id, now, limit=limit)

    # Training signals

    async def insert_training_signal(
        self,
        signal_type: str,
        payload: dict[str, Any],
        user_id: Optional[UUID] = None
    ) -> TrainingSignal:
        async with self.session_factory() as db:
            signal = await self.signal_repo.create(
                db,
                {"signal_type": signal_type, "payload": payload, "user_id": user_id, "processed": False}
            )
            await db.commit()
            return signal

    async def list_unprocessed_signals(self, limit: int = 100) -> list[TrainingSignal]:
        async with self.session_factory() as db:
            return await self.signal_repo.list_unprocessed(db, limit=limit)

    async def mark_signals_processed(self, signal_ids: Sequence[UUID]) -> int:
        async with self.session_factory() as db:
            count = await self.signal_repo.mark_processed(db, signal_ids)
            await db.commit()
            return count
