# clinisync/modules/user/user_controller.py

from fastapi import APIRouter, Depends, HTTPException

from clinisync.auth.dependencies import get_current_user
from clinisync.auth.schemas import UserResponse
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.models.models import User
from clinisync.modules.user import schemas, user_service

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """
    Retrieve the profile for the currently authenticated user.
    """
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile_data: schemas.UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Update the profile of the currently authenticated user.

    Only the provided fields will be updated.
    """
    try:
        return await user_service.update_user_profile(store, current_user, profile_data.model_dump())
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
