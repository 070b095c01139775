# clinisync/modules/patients/patients_service.py
"""Patient records: creation, updates and the joined read views."""

import logging
from decimal import Decimal
from typing import List, Optional

from clinisync.auth.schemas import UserResponse
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import ForbiddenError, NotFoundError, ValidationFailedError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.common.utils.identifiers import next_patient_sequence
from clinisync.models.models import (
    ActivityAction, Consultant, Patient, PaymentStatus, TreatmentStatus, User,
)
from clinisync.modules.access import access_service
from clinisync.modules.activities.activity_service import log_activity
from clinisync.modules.images.schemas import MedicalImageResponse
from clinisync.modules.payments.schemas import PaymentResponse
from clinisync.modules.treatment_plans.schemas import TreatmentPlanResponse
from .schemas import (
    PatientCreate, PatientDetailResponse, PatientResponse, PatientUpdate, PatientWithRelations,
)

logger = logging.getLogger(__name__)


def _user_or_none(user: Optional[User]) -> Optional[UserResponse]:
    return UserResponse.model_validate(user) if user else None


async def _related_users(store: EntityStore, patient: Patient):
    """Consultant's user and clinic's user of a patient; missing links give None."""
    consultant = await store.get(Consultant, patient.consultant_id)
    consultant_user = await store.get(User, consultant.user_id) if consultant else None
    clinic = await store.get(User, patient.clinic_id)
    return consultant_user, clinic


async def enrich_patient(store: EntityStore, patient: Patient) -> PatientWithRelations:
    consultant_user, clinic = await _related_users(store, patient)
    return PatientWithRelations(
        **PatientResponse.model_validate(patient).model_dump(),
        consultant=_user_or_none(consultant_user),
        clinic=_user_or_none(clinic),
    )


async def list_patients_enriched(store: EntityStore, user: User) -> List[PatientWithRelations]:
    """Every patient visible to the user, each with its consultant and clinic."""
    patients = await access_service.visible_patients(store, user)
    patients.sort(key=lambda p: p.patient_id)
    return [await enrich_patient(store, patient) for patient in patients]


async def get_patient_detail(store: EntityStore, user: User, patient_id: str) -> PatientDetailResponse:
    """
    Full patient view with treatment plans, images and payments.

    Raises:
        NotFoundError: unknown patient id.
        ForbiddenError: the patient is outside the user's scope.
    """
    patient = await access_service.require_patient_access(store, user, patient_id)
    consultant_user, clinic = await _related_users(store, patient)

    treatment_plans = await store.get_treatment_plans_by_patient(patient.id)
    medical_images = await store.get_medical_images_by_patient(patient.id)
    payments = await store.get_payments_by_patient(patient.id)

    return PatientDetailResponse(
        **PatientResponse.model_validate(patient).model_dump(),
        consultant=_user_or_none(consultant_user),
        clinic=_user_or_none(clinic),
        treatment_plans=[TreatmentPlanResponse.model_validate(p) for p in treatment_plans],
        medical_images=[MedicalImageResponse.model_validate(i) for i in medical_images],
        payments=[PaymentResponse.model_validate(p) for p in payments],
    )


async def _resolve_clinic(store: EntityStore, user: User, data: PatientCreate) -> str:
    """Clinic the new patient belongs to, checked against the consultant relationship."""
    if access_service.is_clinician(user):
        clinic_id = user.id
    elif data.clinic_id:
        clinic_id = data.clinic_id
    else:
        raise ValidationFailedError(GlobalMessages.CLINIC_REQUIRED)

    consultant = await store.get(Consultant, data.consultant_id)
    if consultant is None:
        raise NotFoundError(GlobalMessages.CONSULTANT_NOT_FOUND)
    if access_service.is_consultant(user) and consultant.user_id != user.id:
        raise ForbiddenError(GlobalMessages.ACCESS_DENIED)
    if consultant.clinic_id != clinic_id:
        raise ValidationFailedError(GlobalMessages.CONSULTANT_CLINIC_MISMATCH)
    return clinic_id


async def create_patient(store: EntityStore, user: User, data: PatientCreate) -> Patient:
    clinic_id = await _resolve_clinic(store, user, data)
    fields = data.model_dump(exclude={"clinic_id"})

    patient = await store.create(
        Patient,
        patient_id=await next_patient_sequence(store),
        clinic_id=clinic_id,
        treatment_status=TreatmentStatus.ACTIVE,
        progress_percentage=0,
        amount_paid=Decimal("0"),
        payment_status=PaymentStatus.PENDING,
        **fields,
    )
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.PATIENT_CREATED,
        description=f"Created new patient: {patient.name}",
        patient_id=patient.id,
        metadata={"patientId": patient.id},
    )
    await store.commit()
    logger.info("Patient %s (%s) created by user %s", patient.id, patient.patient_id, user.id)
    return patient


async def update_patient(store: EntityStore, user: User, patient_id: str, changes: PatientUpdate) -> Patient:
    """Apply the fields present in ``changes`` and record which ones were sent."""
    patient = await access_service.require_patient_access(store, user, patient_id)
    updates = changes.model_dump(exclude_unset=True)

    updated = await store.update(Patient, patient.id, updates)
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.PATIENT_UPDATED,
        description=f"Updated patient: {updated.name}",
        patient_id=patient.id,
        metadata={"patientId": patient.id, "updates": list(updates)},
    )
    await store.commit()
    logger.info("Patient %s updated by user %s", patient.id, user.id)
    return updated
