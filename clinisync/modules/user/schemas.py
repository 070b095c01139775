# clinisync/modules/user/schemas.py

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    specialty: Optional[str] = None
    clinic_name: Optional[str] = None
