from fastapi import APIRouter, Depends, status

from obimo.api.deps import get_existing_user, get_interaction_service
from obimo.models.user import User
from obimo.schemas.interaction import Interaction as InteractionSchema, InteractionCreate
from obimo.services.interaction_service import InteractionService

router = APIRouter()


@router.post(
    "/{user_id}/interactions",
    response_model=InteractionSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_interaction(
    payload: InteractionCreate,
    user: User = Depends(get_existing_user),
    service: InteractionService = Depends(get_interaction_service),
):
    """Record a user action (view, like, pass, ...) and check for a mutual match"""
    return await service.record_interaction(
        user.id,
        payload.interaction_type.value,
        target_id=payload.target_id,
        location_id=payload.location_id,
        duration_ms=payload.duration_ms,
        context=payload.context,
        metadata=payload.metadata,
    )
