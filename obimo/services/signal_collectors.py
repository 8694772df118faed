"""
Signal collectors for people recommendations.

Each collector turns one kind of evidence into CandidateScore entries for a
source user:

- proximity: onboarded users within 100km
- interaction similarity: complete profiles the user has not liked yet
- reunion: past travel companions (ended connections) within 50km

Missing prerequisite data (no location, no likes, no past connections) yields
an empty list. Collectors do not order their output.
"""

from __future__ import annotations
from typing import List
from uuid import UUID

import structlog

from obimo.models.interaction import InteractionType
from obimo.models.recommendation import RecommendationCategory
from obimo.models.user import User
from obimo.repositories.store import RecommendationStore
from obimo.services.scoring_service import CandidateScore, ScoringService
from obimo.utils.geo import distance_km, user_coordinates

logger = structlog.get_logger(__name__)


class SignalCollectorService:
    """Collects candidate scores from the store for one source user."""

    PROXIMITY_POOL_SIZE = 50
    LIKE_HISTORY_LIMIT = 100
    SIMILARITY_POOL_SIZE = 100
    PAST_CONNECTION_LIMIT = 50

    SIMILARITY_REASON = "Based on your preferences"

    def __init__(self, store: RecommendationStore):
        self.store = store

    async def collect_proximity(self, user_id: UUID, user: User) -> List[CandidateScore]:
        origin = user_coordinates(user)
        if origin is None:
            return []

        pool = await self.store.list_onboarded_users_excluding(
            user_id, limit=self.PROXIMITY_POOL_SIZE
        )

        scores: List[CandidateScore] = []
        for candidate in pool:
            position = user_coordinates(candidate)
            if position is None:
                continue

            distance = distance_km(origin[0], origin[1], position[0], position[1])
            if distance > ScoringService.PROXIMITY_RADIUS_KM:
                continue

            scores.append(CandidateScore(
                user_id=user_id,
                candidate_id=candidate.id,
                score=ScoringService.proximity_score(distance),
                reasons=[f"{round(distance)}km away"],
                category=RecommendationCategory.user,
            ))

        logger.debug("proximity collected", user_id=str(user_id), pool=len(pool), scored=len(scores))
        return scores

    async def collect_interaction_similarity(self, user_id: UUID) -> List[CandidateScore]:
        likes = await self.store.list_interactions(
            user_id, interaction_type=InteractionType.like, limit=self.LIKE_HISTORY_LIMIT
        )
        if not likes:
            return []

        liked_ids = {like.target_id for like in likes if like.target_id is not None}
        pool = await self.store.list_onboarded_users_excluding(
            user_id, limit=self.SIMILARITY_POOL_SIZE, exclude_ids=liked_ids
        )

        scores: List[CandidateScore] = []
        for candidate in pool:
            if candidate.id in liked_ids:
                continue

            score = ScoringService.completeness_score(candidate)
            if score <= 0:
                continue

            scores.append(CandidateScore(
                user_id=user_id,
                candidate_id=candidate.id,
                score=float(score),
                reasons=[self.SIMILARITY_REASON],
                category=RecommendationCategory.user,
            ))

        logger.debug("similarity collected", user_id=str(user_id), likes=len(likes), scored=len(scores))
        return scores

    async def collect_reunion(self, user_id: UUID, user: User) -> List[CandidateScore]:
        origin = user_coordinates(user)
        if origin is None:
            return []

        connections = await self.store.list_ended_connections_involving(
            user_id, limit=self.PAST_CONNECTION_LIMIT
        )
        if not connections:
            return []

        # One batched lookup instead of one query per connection; same result
        partner_ids = [connection.other_party(user_id) for connection in connections]
        partners = {p.id: p for p in await self.store.get_users(list(set(partner_ids)))}

        scores: List[CandidateScore] = []
        for partner_id in partner_ids:
            partner = partners.get(partner_id)
            position = user_coordinates(partner) if partner is not None else None
            if position is None:
                continue

            distance = distance_km(origin[0], origin[1], position[0], position[1])
            if distance > ScoringService.REUNION_RADIUS_KM:
                continue

            scores.append(CandidateScore(
                user_id=user_id,
                candidate_id=partner_id,
                score=ScoringService.reunion_score(distance),
                reasons=[f"Past travel companion nearby ({round(distance)}km)"],
                category=RecommendationCategory.reunion,
            ))

        logger.debug("reunion collected", user_id=str(user_id), connections=len(connections), scored=len(scores))
        return scores
