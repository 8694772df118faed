"""
External rank adjuster.

Sends the top aggregated candidates plus a short behaviour summary to the
external generative model and applies the bounded multipliers it suggests.
The adjuster never fails its caller: timeouts, transport errors and
unparseable replies all fall back to the unadjusted list.
"""

from __future__ import annotations
import asyncio
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from pydantic import ValidationError

from obimo.models.interaction import Interaction, InteractionType
from obimo.models.user import User
from obimo.repositories.store import RecommendationStore
from obimo.schemas.rank_adjustment import ModelAdjustment
from obimo.services.generative_model import GenerativeModel
from obimo.services.scoring_service import CandidateScore
from obimo.services.training_signal_service import SignalType, TrainingSignalLogger
from obimo.utils.json_extract import extract_json_object

logger = structlog.get_logger(__name__)


class RankAdjusterService:
    """
    Re-ranks candidates with an optional external model.

    Without a model (or with nothing to rank) ``adjust`` is a pass-through.
    """

    HISTORY_LIMIT = 20
    PROMPT_CANDIDATES = 10
    MIN_MULTIPLIER = 0.5
    MAX_MULTIPLIER = 2.0

    def __init__(
        self,
        store: RecommendationStore,
        signal_logger: TrainingSignalLogger,
        model: Optional[GenerativeModel] = None,
        timeout: float = 5.0,
    ):
        self.store = store
        self.signal_logger = signal_logger
        self.model = model
        self.timeout = timeout

    async def adjust(
        self,
        user_id: UUID,
        user: User,
        candidates: List[CandidateScore]
    ) -> List[CandidateScore]:
        """
        Apply model-suggested multipliers to ``candidates``.

        Returns:
            A new list with adjusted copies, or ``candidates`` itself when the
            model is disabled or anything goes wrong
        """
        if not candidates or self.model is None:
            return candidates

        adjusted = candidates
        applied = 0
        try:
            adjusted, applied, outcome = await self._rerank(user_id, user, candidates)
        except Exception as e:
            outcome = "failed"
            logger.warning(
                "ai re-rank failed, keeping original scores",
                user_id=str(user_id),
                error_type=type(e).__name__,
                error=str(e),
            )

        await self.signal_logger.log(
            SignalType.AI_RERANK,
            {
                "candidate_count": len(candidates),
                "adjusted_count": applied,
                "outcome": outcome,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            user_id=user_id,
        )
        return adjusted

    async def _rerank(
        self,
        user_id: UUID,
        user: User,
        candidates: List[CandidateScore]
    ) -> Tuple[List[CandidateScore], int, str]:
        history = await self.store.list_interactions(user_id, limit=self.HISTORY_LIMIT)
        prompt = self.build_prompt(user, self.behavior_counts(history), candidates)

        reply = await asyncio.wait_for(self.model.generate(prompt), timeout=self.timeout)

        data = extract_json_object(reply)
        if data is None:
            logger.warning("ai re-rank reply had no JSON object", user_id=str(user_id))
            return candidates, 0, "unparseable"

        adjustments = self.parse_adjustments(data)
        adjusted, applied = self.apply_adjustments(candidates, adjustments)
        logger.info(
            "ai re-rank applied",
            user_id=str(user_id),
            suggested=len(adjustments),
            applied=applied,
        )
        return adjusted, applied, "adjusted" if applied else "unchanged"

    @staticmethod
    def behavior_counts(interactions: Iterable[Interaction]) -> Dict[str, int]:
        counts = {"likes": 0, "super_likes": 0, "passes": 0}
        for interaction in interactions:
            if interaction.interaction_type == InteractionType.like:
                counts["likes"] += 1
            elif interaction.interaction_type == InteractionType.super_like:
                counts["super_likes"] += 1
            elif interaction.interaction_type == InteractionType.pass_:
                counts["passes"] += 1
        return counts

    def build_prompt(
        self,
        user: User,
        counts: Dict[str, int],
        candidates: List[CandidateScore]
    ) -> str:
        lines = [
            "You help rank people recommendations for a van-life travel community app.",
            f"User profile complete: {'yes' if user.has_complete_profile else 'no'}",
            (
                f"Recent behaviour (last {self.HISTORY_LIMIT} interactions): "
                f"{counts['likes']} likes, {counts['super_likes']} super likes, {counts['passes']} passes"
            ),
            "",
            "Candidates:",
        ]
        for index, candidate in enumerate(candidates[:self.PROMPT_CANDIDATES]):
            reasons = "; ".join(candidate.reasons) or "none"
            lines.append(
                f"{index}. score={candidate.score:.1f} category={candidate.category.value} reasons={reasons}"
            )
        lines += [
            "",
            "Suggest score multipliers for candidates that deserve a boost or a penalty.",
            f"Multipliers must be between {self.MIN_MULTIPLIER} and {self.MAX_MULTIPLIER}.",
            "Reply with JSON only, in this shape:",
            '{"adjustments": [{"index": 0, "multiplier": 1.2, "additionalReason": "short reason"}]}',
        ]
        return "\n".join(lines)

    @staticmethod
    def parse_adjustments(data: dict) -> List[ModelAdjustment]:
        raw = data.get("adjustments")
        if not isinstance(raw, list):
            return []

        adjustments = []
        for item in raw:
            try:
                adjustments.append(ModelAdjustment.model_validate(item))
            except ValidationError as e:
                logger.debug("skipping malformed adjustment", item=repr(item)[:200], errors=e.error_count())
        return adjustments

    def apply_adjustments(
        self,
        candidates: List[CandidateScore],
        adjustments: List[ModelAdjustment]
    ) -> Tuple[List[CandidateScore], int]:
        """
        Apply adjustments to copies of ``candidates``.

        Out-of-range indices are ignored; multipliers are clamped to
        [MIN_MULTIPLIER, MAX_MULTIPLIER].
        """
        adjusted = [candidate.copy() for candidate in candidates]
        applied = 0
        for adjustment in adjustments:
            if not 0 <= adjustment.index < len(adjusted):
                logger.debug("ignoring adjustment with out-of-range index", index=adjustment.index)
                continue

            multiplier = min(self.MAX_MULTIPLIER, max(self.MIN_MULTIPLIER, adjustment.multiplier))
            target = adjusted[adjustment.index]
            target.score *= multiplier
            if adjustment.additional_reason:
                target.reasons.append(adjustment.additional_reason)
            applied += 1
        return adjusted, applied
