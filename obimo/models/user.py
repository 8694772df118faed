from sqlalchemy import Column, String, DateTime, JSON, Boolean
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID
import uuid
from obimo.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Profile information
    first_name = Column(String(100))
    photos = Column(JSON, default=list)  # List of photo URLs
    onboarding_completed = Column(Boolean, nullable=False, default=False, index=True)

    # Last reported position, stored as decimal strings the way the client sends them
    latitude = Column(String(32))
    longitude = Column(String(32))

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def has_complete_profile(self) -> bool:
        return bool(self.first_name) and bool(self.photos)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
