from .scoring_service import CandidateScore, ScoringService
from .signal_collectors import SignalCollectorService
from .rank_adjuster_service import RankAdjusterService
from .recommendation_service import RecommendationEngine, RecommendationPersister
from .interaction_service import InteractionService
from .training_signal_service import TrainingSignalLogger, SignalType
from .generative_model import GeminiModelClient, GenerativeModel, build_generative_model

__all__ = [
    "CandidateScore",
    "ScoringService",
    "SignalCollectorService",
    "RankAdjusterService",
    "RecommendationEngine",
    "RecommendationPersister",
    "InteractionService",
    "TrainingSignalLogger",
    "SignalType",
    "GeminiModelClient",
    "GenerativeModel",
    "build_generative_model",
]
