"""
Scoring rules shared by the signal collectors and the aggregation step.

Formulas are pure static methods; ``CandidateScore`` is the transient unit
that flows from the collectors through aggregation and re-ranking.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List
from uuid import UUID

from obimo.models.recommendation import RecommendationCategory
from obimo.models.user import User
from obimo.utils.geo import user_coordinates


@dataclass
class CandidateScore:
    """A candidate's raw, additive score for one source user."""

    user_id: UUID
    candidate_id: UUID
    score: float
    reasons: List[str] = field(default_factory=list)
    category: RecommendationCategory = RecommendationCategory.user

    def copy(self) -> "CandidateScore":
        return replace(self, reasons=list(self.reasons))


class ScoringService:
    """Scoring rules for the recommendation signals"""

    PROXIMITY_RADIUS_KM = 100
    REUNION_RADIUS_KM = 50
    REUNION_BASE_SCORE = 80

    @staticmethod
    def proximity_score(distance: float) -> float:
        """Closer is better: 100 at the same spot, 0 at the edge of the radius"""
        return max(0.0, ScoringService.PROXIMITY_RADIUS_KM - distance)

    @staticmethod
    def reunion_score(distance: float) -> float:
        """Past companions start at 80, with up to 20 extra points inside 20km"""
        return ScoringService.REUNION_BASE_SCORE + max(0.0, 20 - distance)

    @staticmethod
    def completeness_score(candidate: User) -> int:
        """Profile completeness: +5 display name, +10 photos, +5 location"""
        score = 0
        if candidate.first_name:
            score += 5
        if candidate.photos:
            score += 10
        if user_coordinates(candidate) is not None:
            score += 5
        return score

    @staticmethod
    def aggregate(scores: List[CandidateScore]) -> List[CandidateScore]:
        """Merge per-collector scores into one entry per candidate.

        Scores are summed and reasons concatenated in emission order. A reunion
        contribution makes the merged entry a reunion; otherwise the first
        category seen is kept. Input entries are left untouched.
        """
        aggregated: Dict[UUID, CandidateScore] = {}

        for score in scores:
            existing = aggregated.get(score.candidate_id)
            if existing is None:
                aggregated[score.candidate_id] = score.copy()
                continue

            existing.score += score.score
            existing.reasons.extend(score.reasons)
            if score.category == RecommendationCategory.reunion:
                existing.category = RecommendationCategory.reunion

        return list(aggregated.values())
