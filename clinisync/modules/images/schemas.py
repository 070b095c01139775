# clinisync/modules/images/schemas.py
"""Medical image schemas."""

from datetime import datetime
from pydantic import BaseModel

from clinisync.models.models import ImageType


class MedicalImageResponse(BaseModel):
    id: str
    patient_id: str
    filename: str
    original_name: str
    image_type: ImageType
    uploaded_by: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


class DeleteImageResponse(BaseModel):
    success: bool
