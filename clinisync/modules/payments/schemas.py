# clinisync/modules/payments/schemas.py
"""Payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = None
    treatment_plan_id: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    patient_id: str
    treatment_plan_id: Optional[str] = None
    amount: Decimal
    payment_date: datetime
    payment_method: str
    notes: Optional[str] = None
    recorded_by: str

    class Config:
        from_attributes = True
