# Repositories package
from .base import BaseRepository
from .user_repository import UserRepository
from .interaction_repository import InteractionRepository
from .connection_repository import ConnectionRepository
from .recommendation_repository import RecommendationRepository
from .training_signal_repository import TrainingSignalRepository
from .store import RecommendationStore

__all__ = [
    "BaseRepository",
    "UserRepository",
    "InteractionRepository",
    "ConnectionRepository",
    "RecommendationRepository",
    "TrainingSignalRepository",
    "RecommendationStore",
]
