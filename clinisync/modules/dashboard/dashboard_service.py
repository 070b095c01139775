# clinisync/modules/dashboard/dashboard_service.py
"""Dashboard statistics and the recent activity feed."""

from decimal import Decimal
from typing import List, Optional

from clinisync.common.config import settings
from clinisync.common.database.store import EntityStore
from clinisync.models.models import Activity, TreatmentStatus, User, utcnow
from clinisync.modules.access import access_service
from .schemas import ActivityResponse, DashboardStatsResponse


def activity_to_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        user_id=activity.user_id,
        patient_id=activity.patient_id,
        action=activity.action,
        description=activity.description,
        metadata=activity.activity_metadata,
        created_at=activity.created_at,
    )


async def dashboard_stats(store: EntityStore, user: User) -> DashboardStatsResponse:
    """
    Headline numbers over the patients the user can see.

    - active_patients: visible patients whose treatment is active
    - consultants: active consultant relationships (the clinic's, or the
      consultant's own)
    - appointments: visible patients with a next appointment after now
    - revenue: total of all payments on visible patients
    """
    patients = await access_service.visible_patients(store, user)
    relationships = await access_service.active_relationships(store, user)
    payments = await store.get_payments_by_patients(p.id for p in patients)

    now = utcnow()
    return DashboardStatsResponse(
        active_patients=sum(1 for p in patients if p.treatment_status == TreatmentStatus.ACTIVE),
        consultants=len(relationships),
        appointments=sum(1 for p in patients if p.next_appointment and p.next_appointment > now),
        revenue=sum((Decimal(p.amount) for p in payments), Decimal("0.00")),
    )


async def recent_activities(store: EntityStore, user: User, limit: Optional[int] = None) -> List[ActivityResponse]:
    """Newest activities visible to the user, at most ``limit`` of them."""
    if limit is None:
        limit = settings.RECENT_ACTIVITY_LIMIT
    activities = await access_service.visible_activities(store, user, limit=limit)
    return [activity_to_response(a) for a in activities]
