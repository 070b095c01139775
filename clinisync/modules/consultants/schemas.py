# clinisync/modules/consultants/schemas.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from clinisync.auth.schemas import UserResponse
from clinisync.models.models import to_utc


class ConsultantCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    specialty: str = Field(..., min_length=1, max_length=200)
    next_visit: Optional[datetime] = None

    @field_validator("next_visit")
    def normalize_next_visit(cls, value):
        return to_utc(value)


class ConsultantResponse(BaseModel):
    id: str
    user_id: str
    clinic_id: str
    specialty: str
    next_visit: Optional[datetime] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ConsultantWithStats(ConsultantResponse):
    user: Optional[UserResponse] = None
    patient_count: int = 0
