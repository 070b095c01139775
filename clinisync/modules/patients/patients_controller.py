# clinisync/modules/patients/patients_controller.py
"""Patient endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.models.models import User

from . import patients_service as service
from .schemas import PatientCreate, PatientDetailResponse, PatientResponse, PatientUpdate, PatientWithRelations


router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("", response_model=List[PatientWithRelations])
async def list_patients(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    List the patients visible under the current role, each with its
    consultant and clinic.
    """
    return await service.list_patients_enriched(store, current_user)


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    data: PatientCreate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Create a patient under a consultant relationship.

    Clinicians create patients for their own clinic. Consultants must name
    the clinic in **clinic_id**.
    """
    try:
        return await service.create_patient(store, current_user, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{patient_id}", response_model=PatientDetailResponse)
async def get_patient(
    patient_id: str,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Get one patient with treatment plans, images and payments.
    """
    try:
        return await service.get_patient_detail(store, current_user, patient_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    changes: PatientUpdate,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """Update the provided patient fields."""
    try:
        return await service.update_patient(store, current_user, patient_id, changes)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
