from pydantic import BaseModel, Field
from typing import Optional


class ModelAdjustment(BaseModel):
    """One re-ranking suggestion returned by the external model"""
    index: int
    multiplier: float = Field(allow_inf_nan=False)
    additional_reason: Optional[str] = Field(default=None, alias="additionalReason")

    class Config:
        populate_by_name = True
