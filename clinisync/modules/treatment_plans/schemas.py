# clinisync/modules/treatment_plans/schemas.py
"""Treatment plan step schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from clinisync.models.models import TreatmentPlanStatus, to_utc


class TreatmentPlanCreate(BaseModel):
    step_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    description: str
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Decimal = Field(..., ge=0)
    status: TreatmentPlanStatus = TreatmentPlanStatus.SCHEDULED
    payment_required: bool = True

    @field_validator("scheduled_date", "completed_date")
    def normalize_dates(cls, value):
        return to_utc(value)


class TreatmentPlanUpdate(BaseModel):
    """Fields a treatment plan update may change."""
    step_number: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Optional[Decimal] = Field(None, ge=0)
    status: Optional[TreatmentPlanStatus] = None
    payment_required: Optional[bool] = None

    @field_validator("scheduled_date", "completed_date")
    def normalize_dates(cls, value):
        return to_utc(value)

    @field_validator(
        "step_number", "title", "description", "cost", "status", "payment_required",
        mode="before",
    )
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TreatmentPlanResponse(BaseModel):
    id: str
    patient_id: str
    step_number: int
    title: str
    description: str
    scheduled_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    cost: Decimal
    status: TreatmentPlanStatus
    payment_required: bool
    created_at: datetime

    class Config:
        from_attributes = True
