from sqlalchemy import Column, DateTime, ForeignKey, String, Enum
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
import enum
from obimo.core.database import Base


class ConnectionStatus(str, enum.Enum):
    pending = "pending"
    active = "active"
    ended = "ended"
    blocked = "blocked"

    @classmethod
    def _missing_(cls, value):
        # Older clients report accepted connections as "connected"
        if value == "connected":
            return cls.active
        return None


class ConnectionType(str, enum.Enum):
    standard = "standard"
    super = "super"


class Connection(Base):
    __tablename__ = "connections"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    connected_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    status = Column(
        Enum(ConnectionStatus, name="connectionstatus"),
        nullable=False,
        default=ConnectionStatus.pending,
        index=True,
    )
    connection_type = Column(
        Enum(ConnectionType, name="connectiontype"),
        nullable=False,
        default=ConnectionType.standard,
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    connected_user = relationship("User", foreign_keys=[connected_user_id])

    def other_party(self, user_id):
        """Return the id of the participant that is not ``user_id``."""
        return self.connected_user_id if self.user_id == user_id else self.user_id

    def __repr__(self):
        return f"<Connection(user_id={self.user_id}, connected_user_id={self.connected_user_id}, status={self.status})>"
