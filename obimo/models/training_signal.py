from sqlalchemy import Column, DateTime, ForeignKey, String, Boolean
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID, JSONB
import uuid
from obimo.core.database import Base


class TrainingSignal(Base):
    __tablename__ = "ai_training_signals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    signal_type = Column(String(50), nullable=False, index=True)
    payload = Column(JSONB, nullable=False, default=dict)
    processed = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<TrainingSignal(id={self.id}, type={self.signal_type}, processed={self.processed})>"
