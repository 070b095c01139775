# clinisync/modules/treatment_plans/treatment_plans_controller.py

from fastapi import APIRouter, Depends, HTTPException, status

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.models.models import User

from . import treatment_plans_service as service
from .schemas import TreatmentPlanCreate, TreatmentPlanResponse, TreatmentPlanUpdate


router = APIRouter(prefix="/api", tags=["Treatment Plans"])


@router.post(
    "/patients/{patient_id}/treatment-plans",
    response_model=TreatmentPlanResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_treatment_plan(
    patient_id: str,
    data: TreatmentPlanCreate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """Add a treatment plan step to a patient."""
    try:
        return await service.create_treatment_plan(store, current_user, patient_id, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/treatment-plans/{plan_id}", response_model=TreatmentPlanResponse)
async def update_treatment_plan(
    plan_id: str,
    changes: TreatmentPlanUpdate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """Update the provided fields of a treatment plan step."""
    try:
        return await service.update_treatment_plan(store, current_user, plan_id, changes)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
