from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
import uuid
from obimo.models.interaction import InteractionType


class InteractionCreate(BaseModel):
    interaction_type: InteractionType
    target_id: Optional[uuid.UUID] = None
    location_id: Optional[str] = Field(default=None, max_length=64)
    duration_ms: Optional[int] = Field(default=None, ge=0)
    context: Optional[str] = Field(default=None, max_length=50)
    metadata: Dict[str, Any] = {}


class Interaction(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    target_id: Optional[uuid.UUID] = None
    interaction_type: InteractionType
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
