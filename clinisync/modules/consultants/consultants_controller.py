# clinisync/modules/consultants/consultants_controller.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.models.models import User

from . import consultants_service as service
from .schemas import ConsultantCreate, ConsultantResponse, ConsultantWithStats


router = APIRouter(prefix="/api/consultants", tags=["Consultants"])


@router.get("", response_model=List[ConsultantWithStats])
async def list_consultants(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    List the clinic's active consultants with their patient counts.
    Clinicians only.
    """
    try:
        return await service.list_consultants_with_stats(store, current_user)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("", response_model=ConsultantResponse, status_code=status.HTTP_201_CREATED)
async def create_consultant(
    data: ConsultantCreate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """Add a consultant to the current clinician's clinic."""
    try:
        return await service.create_consultant_relationship(store, current_user, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
