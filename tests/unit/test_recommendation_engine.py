"""
Unit tests for RecommendationEngine and RecommendationPersister with mocked
collaborators.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from obimo.models.recommendation import RecommendationAction, RecommendationCategory
from obimo.models.user import User
from obimo.services.recommendation_service import RecommendationEngine, RecommendationPersister
from obimo.services.scoring_service import CandidateScore
from obimo.services.training_signal_service import SignalType

USER_ID = uuid.UUID(int=1)


def _candidate(score: float, category=RecommendationCategory.user, candidate_id=None, reasons=None) -> CandidateScore:
    return CandidateScore(
        user_id=USER_ID,
        candidate_id=candidate_id or uuid.uuid4(),
        score=score,
        reasons=reasons or [f"{score}"],
        category=category,
    )


def _make_engine(
    proximity=None,
    similarity=None,
    reunion=None,
    adjust=None,
    persist=None,
    limit: int = 20,
):
    store = MagicMock()
    store.get_user = AsyncMock(return_value=User(id=USER_ID, first_name="Sam", photos=["a.jpg"]))

    collectors = MagicMock()
    collectors.collect_proximity = AsyncMock(return_value=proximity or [])
    collectors.collect_interaction_similarity = AsyncMock(return_value=similarity or [])
    collectors.collect_reunion = AsyncMock(return_value=reunion or [])

    adjuster = MagicMock()
    adjuster.adjust = AsyncMock(side_effect=adjust or (lambda user_id, user, candidates: candidates))

    persister = MagicMock()
    persister.persist = AsyncMock(
        side_effect=persist or (lambda user_id, c: SimpleNamespace(recommended_user_id=c.candidate_id, score=c.score))
    )

    signal_logger = MagicMock()
    signal_logger.log = AsyncMock()

    engine = RecommendationEngine(store, collectors, adjuster, persister, signal_logger, limit=limit)
    return engine, SimpleNamespace(
        store=store, collectors=collectors, adjuster=adjuster, persister=persister, signal_logger=signal_logger
    )


class TestGenerateRecommendations:
    async def test_no_signals_produces_nothing(self):
        engine, mocks = _make_engine()

        assert await engine.generate_recommendations(USER_ID) == []

        mocks.persister.persist.assert_not_awaited()
        mocks.signal_logger.log.assert_awaited_once()
        signal_type, payload = mocks.signal_logger.log.await_args.args
        assert signal_type == SignalType.RECOMMENDATIONS_GENERATED
        assert payload["count"] == 0
        assert payload["top_score"] == 0
        assert mocks.signal_logger.log.await_args.kwargs["user_id"] == USER_ID

    async def test_unknown_user_returns_empty(self):
        engine, mocks = _make_engine(proximity=[_candidate(50)])
        mocks.store.get_user = AsyncMock(return_value=None)

        assert await engine.generate_recommendations(USER_ID) == []
        mocks.collectors.collect_proximity.assert_not_awaited()
        mocks.signal_logger.log.assert_not_awaited()

    async def test_user_lookup_failure_returns_empty(self):
        engine, mocks = _make_engine(proximity=[_candidate(50)])
        mocks.store.get_user = AsyncMock(side_effect=RuntimeError("connection refused"))

        assert await engine.generate_recommendations(USER_ID) == []
        mocks.persister.persist.assert_not_awaited()

    async def test_failing_collector_is_treated_as_empty(self):
        survivor = _candidate(40)
        engine, mocks = _make_engine(reunion=[survivor])
        mocks.collectors.collect_proximity = AsyncMock(side_effect=RuntimeError("boom"))

        saved = await engine.generate_recommendations(USER_ID)

        assert [r.recommended_user_id for r in saved] == [survivor.candidate_id]
        collected = mocks.signal_logger.log.await_args.args[1]["collected"]
        assert collected == {"proximity": 0, "interaction_similarity": 0, "reunion": 1}

    async def test_scores_aggregated_sorted_and_truncated(self):
        shared = uuid.uuid4()
        engine, mocks = _make_engine(
            proximity=[_candidate(30, candidate_id=shared), _candidate(70), _candidate(10)],
            similarity=[_candidate(20)],
            reunion=[_candidate(60, RecommendationCategory.reunion, candidate_id=shared)],
            limit=2,
        )

        saved = await engine.generate_recommendations(USER_ID)

        assert [r.score for r in saved] == [90, 70]
        assert saved[0].recommended_user_id == shared
        merged = mocks.persister.persist.await_args_list[0].args[1]
        assert merged.category == RecommendationCategory.reunion
        payload = mocks.signal_logger.log.await_args.args[1]
        assert payload["count"] == 2
        assert payload["top_score"] == 90

    async def test_adjuster_receives_strongest_first(self):
        engine, mocks = _make_engine(proximity=[_candidate(10), _candidate(90), _candidate(50)])

        await engine.generate_recommendations(USER_ID)

        handed_over = mocks.adjuster.adjust.await_args.args[2]
        assert [c.score for c in handed_over] == [90, 50, 10]

    async def test_adjusted_scores_reorder_results(self):
        low, high = _candidate(10), _candidate(20)

        def boost_low(user_id, user, candidates):
            return [c if c.candidate_id != low.candidate_id else _candidate(40, candidate_id=low.candidate_id)
                    for c in candidates]

        engine, _ = _make_engine(proximity=[low, high], adjust=boost_low)

        saved = await engine.generate_recommendations(USER_ID)

        assert [r.recommended_user_id for r in saved] == [low.candidate_id, high.candidate_id]

    async def test_persistence_failure_skips_candidate(self):
        broken = _candidate(80)

        def persist(user_id, c):
            if c.candidate_id == broken.candidate_id:
                raise RuntimeError("deadlock detected")
            return SimpleNamespace(recommended_user_id=c.candidate_id, score=c.score)

        ok = _candidate(50)
        engine, mocks = _make_engine(proximity=[broken, ok], persist=persist)

        saved = await engine.generate_recommendations(USER_ID)

        assert [r.recommended_user_id for r in saved] == [ok.candidate_id]
        assert mocks.persister.persist.await_count == 2
        assert mocks.signal_logger.log.await_args.args[1]["count"] == 1


class TestLifecycle:
    async def test_list_uses_default_limit(self):
        engine, mocks = _make_engine(limit=7)
        mocks.store.list_active_recommendations = AsyncMock(return_value=[])

        await engine.list_recommendations(USER_ID)

        args = mocks.store.list_active_recommendations.await_args
        assert args.args[0] == USER_ID
        assert args.kwargs["limit"] == 7

    async def test_record_action_retires_recommendation(self):
        engine, mocks = _make_engine()
        rec_id = uuid.uuid4()
        mocks.store.update_recommendation = AsyncMock(return_value=SimpleNamespace(id=rec_id))

        result = await engine.record_action(USER_ID, rec_id, RecommendationAction.liked)

        assert result.id == rec_id
        mocks.store.update_recommendation.assert_awaited_once_with(
            rec_id,
            {"action": RecommendationAction.liked, "is_acted_on": True, "is_viewed": True, "is_active": False},
            user_id=USER_ID,
        )

    async def test_record_action_on_foreign_recommendation(self):
        engine, mocks = _make_engine()
        mocks.store.update_recommendation = AsyncMock(return_value=None)

        assert await engine.record_action(USER_ID, uuid.uuid4(), RecommendationAction.passed) is None


class TestRecommendationPersister:
    def _store(self, existing=None):
        store = MagicMock()
        store.find_active_recommendation = AsyncMock(return_value=existing)
        store.create_recommendation = AsyncMock(side_effect=lambda values: SimpleNamespace(id=uuid.uuid4(), **values))
        store.update_recommendation = AsyncMock(
            side_effect=lambda rec_id, values: SimpleNamespace(id=rec_id, **values)
        )
        return store

    async def test_creates_new_active_row(self):
        store = self._store()
        candidate = _candidate(87.6, RecommendationCategory.reunion, reasons=["1km away"])

        before = datetime.now(timezone.utc)
        rec = await RecommendationPersister(store, ttl_hours=72).persist(USER_ID, candidate)

        values = store.create_recommendation.await_args.args[0]
        assert values["user_id"] == USER_ID
        assert values["recommended_user_id"] == candidate.candidate_id
        assert values["is_active"] is True
        assert values["confidence_score"] == 88
        assert values["reasons"] == ["1km away"]
        assert values["category"] == RecommendationCategory.reunion
        assert before + timedelta(hours=72) <= values["expires_at"] <= datetime.now(timezone.utc) + timedelta(hours=72)
        assert rec.confidence_score == 88
        store.update_recommendation.assert_not_awaited()

    async def test_refreshes_existing_row(self):
        existing = SimpleNamespace(id=uuid.uuid4())
        store = self._store(existing=existing)

        rec = await RecommendationPersister(store).persist(USER_ID, _candidate(42.4))

        store.create_recommendation.assert_not_awaited()
        assert rec.id == existing.id
        assert store.update_recommendation.await_args.args[1]["confidence_score"] == 42

    async def test_concurrent_insert_falls_back_to_update(self):
        winner = SimpleNamespace(id=uuid.uuid4())
        store = self._store()
        store.find_active_recommendation = AsyncMock(side_effect=[None, winner])
        store.create_recommendation = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("duplicate")))

        rec = await RecommendationPersister(store).persist(USER_ID, _candidate(10))

        assert rec.id == winner.id
        assert store.find_active_recommendation.await_count == 2

    async def test_integrity_error_without_conflicting_row_propagates(self):
        store = self._store()
        store.create_recommendation = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("fk violation")))

        with pytest.raises(IntegrityError):
            await RecommendationPersister(store).persist(USER_ID, _candidate(10))

    async def test_row_vanishing_during_update_raises(self):
        store = self._store(existing=SimpleNamespace(id=uuid.uuid4()))
        store.update_recommendation = AsyncMock(return_value=None)

        with pytest.raises(LookupError):
            await RecommendationPersister(store).persist(USER_ID, _candidate(10))
