from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import uuid
from obimo.models.recommendation import RecommendationAction, RecommendationCategory


class Recommendation(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    recommended_user_id: uuid.UUID
    category: RecommendationCategory
    confidence_score: int
    reasons: List[str] = []
    is_active: bool
    is_viewed: bool
    is_acted_on: bool
    action: Optional[RecommendationAction] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecommendationActionCreate(BaseModel):
    action: RecommendationAction


class RecommendationList(BaseModel):
    """Response model for a user's live recommendations"""
    items: List[Recommendation]
    total: int
