from .user import User
from .interaction import Interaction, InteractionType, POSITIVE_INTERACTION_TYPES
from .connection import Connection, ConnectionStatus, ConnectionType
from .recommendation import Recommendation, RecommendationAction, RecommendationCategory
from .training_signal import TrainingSignal

__all__ = [
    "User", "Interaction", "InteractionType", "POSITIVE_INTERACTION_TYPES",
    "Connection", "ConnectionStatus", "ConnectionType",
    "Recommendation", "RecommendationAction", "RecommendationCategory",
    "TrainingSignal",
]
