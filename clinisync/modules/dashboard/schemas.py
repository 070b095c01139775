# clinisync/modules/dashboard/schemas.py
"""Dashboard module schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import BaseModel

from clinisync.models.models import ActivityAction


class DashboardStatsResponse(BaseModel):
    active_patients: int = 0
    consultants: int = 0
    appointments: int = 0
    revenue: Decimal = Decimal("0.00")


class ActivityResponse(BaseModel):
    id: str
    user_id: str
    patient_id: Optional[str] = None
    action: ActivityAction
    description: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
