# clinisync/modules/activities/activity_service.py
"""Audit trail writes. Activities are append-only."""

from typing import Any, Dict, Optional

from clinisync.common.database.store import EntityStore
from clinisync.models.models import Activity, ActivityAction


async def log_activity(
    store: EntityStore,
    user_id: str,
    action: ActivityAction,
    description: str,
    patient_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Activity:
    """Append one activity in the caller's unit of work."""
    return await store.create(
        Activity,
        user_id=user_id,
        patient_id=patient_id,
        action=action,
        description=description,
        activity_metadata=metadata,
    )
