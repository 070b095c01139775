# clinisync/modules/patients/schemas.py

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from clinisync.auth.schemas import UserResponse
from clinisync.models.models import PaymentStatus, TreatmentStatus, to_utc
from clinisync.modules.images.schemas import MedicalImageResponse
from clinisync.modules.payments.schemas import PaymentResponse
from clinisync.modules.treatment_plans.schemas import TreatmentPlanResponse


class PatientCreate(BaseModel):
    """
    New patient record.

    ``clinic_id`` is ignored for clinicians (their own clinic is used) and
    required for consultants.
    """
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    consultant_id: str
    clinic_id: Optional[str] = None
    chief_complaint: Optional[str] = None
    treatment_type: str = Field(..., min_length=1)
    total_cost: Decimal = Field(..., ge=0)
    next_appointment: Optional[datetime] = None
    clinical_notes: Optional[str] = None

    @field_validator("next_appointment")
    def normalize_appointment(cls, value):
        return to_utc(value)


class PatientUpdate(BaseModel):
    """
    Fields a patient update may change.

    Identifiers, ownership and the paid balance are not part of it; the
    balance only moves through recorded payments. Payment status may be set
    here, e.g. to mark a patient overdue.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    chief_complaint: Optional[str] = None
    treatment_type: Optional[str] = Field(None, min_length=1)
    treatment_status: Optional[TreatmentStatus] = None
    progress_percentage: Optional[int] = Field(None, ge=0, le=100)
    total_cost: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    next_appointment: Optional[datetime] = None
    clinical_notes: Optional[str] = None

    @field_validator("next_appointment")
    def normalize_appointment(cls, value):
        return to_utc(value)

    @field_validator(
        "name", "treatment_type", "treatment_status", "progress_percentage", "total_cost", "payment_status",
        mode="before",
    )
    def reject_null(cls, value):
        # Required columns may be left out but never cleared
        if value is None:
            raise ValueError("may not be null")
        return value


class PatientResponse(BaseModel):
    id: str
    patient_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    consultant_id: str
    clinic_id: str
    chief_complaint: Optional[str] = None
    treatment_type: str
    treatment_status: TreatmentStatus
    progress_percentage: int
    total_cost: Decimal
    amount_paid: Decimal
    payment_status: PaymentStatus
    next_appointment: Optional[datetime] = None
    clinical_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PatientWithRelations(PatientResponse):
    """Patient joined with the consultant's user and the clinic's user."""
    consultant: Optional[UserResponse] = None
    clinic: Optional[UserResponse] = None


class PatientDetailResponse(PatientWithRelations):
    treatment_plans: List[TreatmentPlanResponse] = []
    medical_images: List[MedicalImageResponse] = []
    payments: List[PaymentResponse] = []
