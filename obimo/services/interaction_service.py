"""
Interaction processor.

Records raw user actions and checks positive actions for a mutual match. A
mutual match is only reported as a training signal; creating the connection
and notifying the users is left to whoever consumes that signal.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import structlog

from obimo.models.interaction import Interaction, InteractionType, POSITIVE_INTERACTION_TYPES
from obimo.repositories.store import RecommendationStore
from obimo.services.training_signal_service import SignalType, TrainingSignalLogger

logger = structlog.get_logger(__name__)


INTERACTION_WEIGHTS: Dict[str, int] = {
    InteractionType.like.value: 5,
    InteractionType.super_like.value: 10,
    InteractionType.view.value: 1,
    InteractionType.click.value: 2,
    InteractionType.pass_.value: -3,
    InteractionType.visit.value: 3,
    InteractionType.message.value: 4,
}
DEFAULT_INTERACTION_WEIGHT = 1


def interaction_weight(interaction_type: str) -> int:
    return INTERACTION_WEIGHTS.get(interaction_type, DEFAULT_INTERACTION_WEIGHT)


class InteractionService:
    """Service for recording interactions and detecting mutual interest."""

    def __init__(
        self,
        store: RecommendationStore,
        signal_logger: Optional[TrainingSignalLogger] = None
    ):
        self.store = store
        self.signal_logger = signal_logger or TrainingSignalLogger(store)

    async def record_interaction(
        self,
        user_id: UUID,
        interaction_type: str,
        target_id: Optional[UUID] = None,
        location_id: Optional[str] = None,
        duration_ms: Optional[int] = None,
        context: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Interaction]:
        """
        Record one user action.

        Known interaction types are stored in the interaction log; every call
        logs a weighted ``user_interaction`` training signal. For likes and
        super likes, a prior like/super like from the target back to the user
        is reported as a ``mutual_match`` signal. Acting on yourself never
        counts as a match.

        Storage failures propagate, after the training signal is logged.

        Returns:
            The stored interaction, or None for unrecognised types
        """
        try:
            known_type: Optional[InteractionType] = InteractionType(interaction_type)
        except ValueError:
            known_type = None
            logger.warning("unrecognised interaction type", user_id=str(user_id), interaction_type=interaction_type)

        now = datetime.now(timezone.utc).isoformat()
        interaction = None
        try:
            if known_type is not None:
                interaction = await self.store.insert_interaction({
                    "user_id": user_id,
                    "target_id": target_id,
                    "location_id": location_id,
                    "interaction_type": known_type,
                    "duration_ms": duration_ms,
                    "context": context,
                    "event_metadata": metadata or {},
                })
        finally:
            await self.signal_logger.log(
                SignalType.USER_INTERACTION,
                {
                    "interaction_type": interaction_type,
                    "target_id": str(target_id) if target_id else None,
                    "weight": interaction_weight(interaction_type),
                    "timestamp": now,
                },
                user_id=user_id,
            )

        if (
            known_type in POSITIVE_INTERACTION_TYPES
            and target_id is not None
            and target_id != user_id
        ):
            await self._check_mutual_match(user_id, target_id, now)

        return interaction

    async def _check_mutual_match(self, user_id: UUID, target_id: UUID, timestamp: str) -> bool:
        reciprocal = await self.store.find_reciprocal_interaction(
            user_id, target_id, POSITIVE_INTERACTION_TYPES
        )
        if reciprocal is None:
            return False

        logger.info("mutual match detected", user_id=str(user_id), matched_user_id=str(target_id))
        await self.signal_logger.log(
            SignalType.MUTUAL_MATCH,
            {
                "user_id": str(user_id),
                "matched_user_id": str(target_id),
                "timestamp": timestamp,
            },
            user_id=user_id,
        )
        return True
