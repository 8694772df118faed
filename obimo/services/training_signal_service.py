"""
Training signal logger.

Append-only sink for pipeline telemetry (generation counts, AI re-rank
outcomes, interactions, mutual matches). Writes are best-effort: a failing
insert is logged and dropped so it can never break the caller.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog

from obimo.models.training_signal import TrainingSignal
from obimo.repositories.store import RecommendationStore

logger = structlog.get_logger(__name__)


class SignalType:
    RECOMMENDATIONS_GENERATED = "recommendations_generated"
    AI_RERANK = "ai_rerank"
    USER_INTERACTION = "user_interaction"
    MUTUAL_MATCH = "mutual_match"


class TrainingSignalLogger:
    """Best-effort writer for the ai_training_signals table."""

    def __init__(self, store: RecommendationStore):
        self.store = store

    async def log(
        self,
        signal_type: str,
        payload: Dict[str, Any],
        user_id: Optional[UUID] = None
    ) -> None:
        """
        Insert one training signal.

        Args:
            signal_type: One of the ``SignalType`` tags
            payload: JSON-serialisable payload (stringify UUIDs and datetimes)
            user_id: User the signal is about, if any
        """
        try:
            await self.store.insert_training_signal(signal_type, payload, user_id=user_id)
        except Exception as e:
            logger.warning(
                "training signal dropped",
                signal_type=signal_type,
                user_id=str(user_id) if user_id else None,
                error=str(e),
            )

    async def fetch_unprocessed(self, limit: int = 100) -> List[TrainingSignal]:
        """Page of signals a training job has not consumed yet."""
        return await self.store.list_unprocessed_signals(limit=limit)

    async def mark_processed(self, signal_ids: Sequence[UUID]) -> int:
        count = await self.store.mark_signals_processed(signal_ids)
        logger.info("training signals processed", count=count)
        return count
