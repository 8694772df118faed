from .recommendation import Recommendation, RecommendationActionCreate, RecommendationList
from .interaction import Interaction, InteractionCreate
from .rank_adjustment import ModelAdjustment

__all__ = [
    "Recommendation",
    "RecommendationActionCreate",
    "RecommendationList",
    "Interaction",
    "InteractionCreate",
    "ModelAdjustment",
]
