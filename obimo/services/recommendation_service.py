"""
Recommendation engine.

Orchestrates one generation run for a user:

1. load the source user (the only step whose failure aborts the run)
2. run the proximity, interaction-similarity and reunion collectors concurrently
3. aggregate per candidate
4. re-rank through the external model (optional, never fails)
5. sort descending, keep the top N
6. upsert each survivor as an active recommendation
7. log one ``recommendations_generated`` training signal

Also exposes the recommendation lifecycle used by the API: listing live
recommendations, marking them viewed and recording the user's action.
"""

from __future__ import annotations
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Awaitable, List, Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from obimo.models.recommendation import Recommendation, RecommendationAction
from obimo.repositories.store import RecommendationStore
from obimo.services.generative_model import GenerativeModel
from obimo.services.rank_adjuster_service import RankAdjusterService
from obimo.services.scoring_service import CandidateScore, ScoringService
from obimo.services.signal_collectors import SignalCollectorService
from obimo.services.training_signal_service import SignalType, TrainingSignalLogger

logger = structlog.get_logger(__name__)


class RecommendationPersister:
    """
    Upserts recommendations by their natural key (user, recommended user).

    An existing active row is refreshed in place; otherwise a new active row is
    inserted. If a concurrent run inserted the same pair first, the unique
    index rejects our insert and we fall back to updating that row.
    """

    def __init__(self, store: RecommendationStore, ttl_hours: int = 72):
        self.store = store
        self.ttl_hours = ttl_hours

    async def persist(self, user_id: UUID, candidate: CandidateScore) -> Recommendation:
        values = {
            "confidence_score": round(candidate.score),
            "reasons": list(candidate.reasons),
            "category": candidate.category,
            "expires_at": datetime.now(timezone.utc) + timedelta(hours=self.ttl_hours),
        }

        existing = await self.store.find_active_recommendation(user_id, candidate.candidate_id)
        if existing is None:
            try:
                return await self.store.create_recommendation({
                    "user_id": user_id,
                    "recommended_user_id": candidate.candidate_id,
                    "is_active": True,
                    **values,
                })
            except IntegrityError:
                logger.info(
                    "active recommendation created concurrently, updating instead",
                    user_id=str(user_id),
                    candidate_id=str(candidate.candidate_id),
                )
                existing = await self.store.find_active_recommendation(user_id, candidate.candidate_id)
                if existing is None:
                    raise

        updated = await self.store.update_recommendation(existing.id, values)
        if updated is None:
            raise LookupError(f"Recommendation {existing.id} disappeared during update")
        return updated


class RecommendationEngine:
    """
    People recommendation pipeline for one process (or request).

    Collaborators are injected; build one with ``RecommendationEngine.create``
    for the default wiring.
    """

    def __init__(
        self,
        store: RecommendationStore,
        collectors: SignalCollectorService,
        adjuster: RankAdjusterService,
        persister: RecommendationPersister,
        signal_logger: TrainingSignalLogger,
        limit: int = 20,
    ):
        self.store = store
        self.collectors = collectors
        self.adjuster = adjuster
        self.persister = persister
        self.signal_logger = signal_logger
        self.limit = limit

    @classmethod
    def create(
        cls,
        store: RecommendationStore,
        model: Optional[GenerativeModel] = None,
        limit: int = 20,
        ttl_hours: int = 72,
        model_timeout: float = 5.0,
    ) -> "RecommendationEngine":
        signal_logger = TrainingSignalLogger(store)
        return cls(
            store=store,
            collectors=SignalCollectorService(store),
            adjuster=RankAdjusterService(store, signal_logger, model=model, timeout=model_timeout),
            persister=RecommendationPersister(store, ttl_hours=ttl_hours),
            signal_logger=signal_logger,
            limit=limit,
        )

    async def generate_recommendations(self, user_id: UUID) -> List[Recommendation]:
        """
        Generate, rank and persist recommendations for ``user_id``.

        Returns:
            The persisted recommendations, best first. Empty when the user
            does not exist or cannot be loaded.
        """
        with structlog.contextvars.bound_contextvars(user_id=str(user_id)):
            return await self._generate(user_id)

    async def _generate(self, user_id: UUID) -> List[Recommendation]:
        try:
            user = await self.store.get_user(user_id)
        except Exception as e:
            logger.error("could not load user for recommendations", error=str(e))
            return []
        if user is None:
            logger.info("recommendations requested for unknown user")
            return []

        proximity, similarity, reunion = await asyncio.gather(
            self._safe_collect("proximity", self.collectors.collect_proximity(user_id, user)),
            self._safe_collect("interaction_similarity", self.collectors.collect_interaction_similarity(user_id)),
            self._safe_collect("reunion", self.collectors.collect_reunion(user_id, user)),
        )

        aggregated = ScoringService.aggregate(proximity + similarity + reunion)
        # The model only sees the first candidates, so hand it the strongest ones
        aggregated.sort(key=lambda c: c.score, reverse=True)

        adjusted = await self.adjuster.adjust(user_id, user, aggregated)
        ranked = sorted(adjusted, key=lambda c: c.score, reverse=True)[:self.limit]

        saved: List[Recommendation] = []
        for candidate in ranked:
            try:
                saved.append(await self.persister.persist(user_id, candidate))
            except Exception as e:
                logger.error(
                    "failed to save recommendation",
                    candidate_id=str(candidate.candidate_id),
                    error=str(e),
                )

        await self.signal_logger.log(
            SignalType.RECOMMENDATIONS_GENERATED,
            {
                "count": len(saved),
                "top_score": ranked[0].score if ranked else 0,
                "collected": {
                    "proximity": len(proximity),
                    "interaction_similarity": len(similarity),
                    "reunion": len(reunion),
                },
            },
            user_id=user_id,
        )
        logger.info(
            "recommendations generated",
            candidates=len(aggregated),
            saved=len(saved),
        )
        return saved

    async def _safe_collect(
        self,
        name: str,
        collector: Awaitable[List[CandidateScore]]
    ) -> List[CandidateScore]:
        try:
            return await collector
        except Exception as e:
            logger.error("signal collector failed", collector=name, error=str(e))
            return []

    async def list_recommendations(self, user_id: UUID, limit: Optional[int] = None) -> List[Recommendation]:
        """Active, unexpired recommendations, highest confidence first."""
        return await self.store.list_active_recommendations(
            user_id, datetime.now(timezone.utc), limit=limit or self.limit
        )

    async def mark_viewed(self, user_id: UUID, recommendation_id: UUID) -> Optional[Recommendation]:
        return await self.store.update_recommendation(
            recommendation_id, {"is_viewed": True}, user_id=user_id
        )

    async def record_action(
        self,
        user_id: UUID,
        recommendation_id: UUID,
        action: RecommendationAction
    ) -> Optional[Recommendation]:
        """
        Record the user's decision and retire the recommendation.

        Returns:
            The updated recommendation, or None if it does not belong to the user
        """
        recommendation = await self.store.update_recommendation(
            recommendation_id,
            {"action": action, "is_acted_on": True, "is_viewed": True, "is_active": False},
            user_id=user_id,
        )
        if recommendation is not None:
            logger.info(
                "recommendation acted on",
                user_id=str(user_id),
                recommendation_id=str(recommendation_id),
                action=action.value,
            )
        return recommendation
