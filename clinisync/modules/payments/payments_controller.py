# clinisync/modules/payments/payments_controller.py

from fastapi import APIRouter, Depends, HTTPException, status

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.models.models import User

from . import payments_service as service
from .schemas import PaymentCreate, PaymentResponse


router = APIRouter(prefix="/api/patients", tags=["Payments"])


@router.post("/{patient_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    patient_id: str,
    data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Record a payment against a patient.

    The patient's paid amount and payment status are updated with it.
    """
    try:
        return await service.record_payment(store, current_user, patient_id, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
