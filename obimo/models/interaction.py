from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Enum
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
import uuid
import enum
from obimo.core.database import Base


class InteractionType(str, enum.Enum):
    view = "view"
    click = "click"
    like = "like"
    pass_ = "pass"
    super_like = "super_like"
    share = "share"
    visit = "visit"
    message = "message"


# Interaction types that express interest in the target user
POSITIVE_INTERACTION_TYPES = (InteractionType.like, InteractionType.super_like)


class Interaction(Base):
    __tablename__ = "user_interactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    target_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    location_id = Column(String(64), nullable=True)  # Map marker id

    interaction_type = Column(
        Enum(InteractionType, name="interactiontype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )

    # Context data for future personalization
    duration_ms = Column(Integer)
    context = Column(String(50))  # discover, map, likes, ...
    event_metadata = Column("metadata", JSONB, default=dict)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    target = relationship("User", foreign_keys=[target_id])

    def __repr__(self):
        return f"<Interaction(user_id={self.user_id}, target_id={self.target_id}, type={self.interaction_type})>"
