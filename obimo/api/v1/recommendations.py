"""
People recommendation endpoints.

Mounted under /api/v1/users. Authentication happens upstream; these routes
trust the user id in the path.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from uuid import UUID
from typing import List

from obimo.api.deps import get_existing_user, get_recommendation_engine
from obimo.models.user import User
from obimo.schemas.recommendation import (
    Recommendation as RecommendationSchema,
    RecommendationActionCreate,
    RecommendationList,
)
from obimo.services.recommendation_service import RecommendationEngine

router = APIRouter()


@router.post("/{user_id}/recommendations/generate", response_model=List[RecommendationSchema])
async def generate_recommendations(
    user: User = Depends(get_existing_user),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """Recompute and persist recommendations for the user"""
    return await engine.generate_recommendations(user.id)


@router.get("/{user_id}/recommendations", response_model=RecommendationList)
async def list_recommendations(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_existing_user),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """Active, unexpired recommendations, highest confidence first"""
    items = await engine.list_recommendations(user.id, limit=limit)
    return RecommendationList(items=items, total=len(items))


@router.post("/{user_id}/recommendations/{recommendation_id}/view", response_model=RecommendationSchema)
async def mark_recommendation_viewed(
    recommendation_id: UUID,
    user: User = Depends(get_existing_user),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    recommendation = await engine.mark_viewed(user.id, recommendation_id)
    if recommendation is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return recommendation


@router.post("/{user_id}/recommendations/{recommendation_id}/action", response_model=RecommendationSchema)
async def record_recommendation_action(
    recommendation_id: UUID,
    payload: RecommendationActionCreate,
    user: User = Depends(get_existing_user),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """Record like/pass/super like on a recommendation and retire it"""
    recommendation = await engine.record_action(user.id, recommendation_id, payload.action)
    if recommendation is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return recommendation
