from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status

from obimo.core.config import settings
from obimo.core.database import AsyncSessionLocal
from obimo.models.user import User
from obimo.repositories.store import RecommendationStore
from obimo.services.generative_model import GenerativeModel, build_generative_model
from obimo.services.interaction_service import InteractionService
from obimo.services.recommendation_service import RecommendationEngine


def get_store() -> RecommendationStore:
    """Data-access facade bound to the application's session factory"""
    return RecommendationStore(AsyncSessionLocal)


@lru_cache
def get_generative_model() -> Optional[GenerativeModel]:
    return build_generative_model(settings)


def get_recommendation_engine(
    store: RecommendationStore = Depends(get_store),
    model: Optional[GenerativeModel] = Depends(get_generative_model),
) -> RecommendationEngine:
    return RecommendationEngine.create(
        store,
        model=model,
        limit=settings.recommendation_limit,
        ttl_hours=settings.recommendation_ttl_hours,
        model_timeout=settings.ai_timeout_seconds,
    )


def get_interaction_service(
    store: RecommendationStore = Depends(get_store),
) -> InteractionService:
    return InteractionService(store)


async def get_existing_user(
    user_id: UUID,
    store: RecommendationStore = Depends(get_store),
) -> User:
    """Resolve the ``user_id`` path parameter or fail with 404"""
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user
