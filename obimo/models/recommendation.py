from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Boolean, Enum, Index, text
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
import uuid
import enum
from obimo.core.database import Base


class RecommendationCategory(str, enum.Enum):
    user = "user"
    location = "location"
    reunion = "reunion"


class RecommendationAction(str, enum.Enum):
    liked = "liked"
    passed = "passed"
    super_liked = "super_liked"


class Recommendation(Base):
    __tablename__ = "recommendations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    recommended_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    category = Column(
        Enum(RecommendationCategory, name="recommendationcategory"),
        nullable=False,
        default=RecommendationCategory.user,
    )
    confidence_score = Column(Integer, nullable=False, default=0)
    reasons = Column(JSONB, default=list)  # Ordered reason codes

    # Lifecycle
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_viewed = Column(Boolean, nullable=False, default=False)
    is_acted_on = Column(Boolean, nullable=False, default=False)
    action = Column(Enum(RecommendationAction, name="recommendationaction"), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    recommended_user = relationship("User", foreign_keys=[recommended_user_id])

    # At most one active recommendation per user/candidate pair
    __table_args__ = (
        Index(
            "uq_active_recommendation_pair",
            "user_id",
            "recommended_user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    def __repr__(self):
        return (
            f"<Recommendation(user_id={self.user_id}, recommended_user_id={self.recommended_user_id}, "
            f"confidence={self.confidence_score}, active={self.is_active})>"
        )
