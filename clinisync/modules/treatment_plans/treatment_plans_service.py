# clinisync/modules/treatment_plans/treatment_plans_service.py

import logging

from clinisync.common.database.store import EntityStore
from clinisync.common.errors import NotFoundError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import ActivityAction, TreatmentPlan, User
from clinisync.modules.access import access_service
from clinisync.modules.activities.activity_service import log_activity
from .schemas import TreatmentPlanCreate, TreatmentPlanUpdate

logger = logging.getLogger(__name__)


async def create_treatment_plan(
    store: EntityStore,
    user: User,
    patient_id: str,
    data: TreatmentPlanCreate,
) -> TreatmentPlan:
    """Add a step to a patient's treatment plan."""
    patient = await access_service.require_patient_access(store, user, patient_id)

    plan = await store.create(TreatmentPlan, patient_id=patient.id, **data.model_dump())
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.TREATMENT_PLAN_CREATED,
        description=f"Added treatment step {plan.step_number}: {plan.title}",
        patient_id=patient.id,
        metadata={"treatmentPlanId": plan.id},
    )
    await store.commit()
    logger.info("Treatment plan %s created for patient %s", plan.id, patient.id)
    return plan


async def update_treatment_plan(
    store: EntityStore,
    user: User,
    plan_id: str,
    changes: TreatmentPlanUpdate,
) -> TreatmentPlan:
    """
    Update a treatment plan step.

    Raises:
        NotFoundError: unknown plan id, or the plan's patient no longer exists.
        ForbiddenError: the plan's patient is outside the user's scope.
    """
    plan = await store.get(TreatmentPlan, plan_id)
    if plan is None:
        raise NotFoundError(GlobalMessages.TREATMENT_PLAN_NOT_FOUND)
    patient = await access_service.require_patient_access(store, user, plan.patient_id)

    updated = await store.update(TreatmentPlan, plan.id, changes.model_dump(exclude_unset=True))
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.TREATMENT_PLAN_UPDATED,
        description=f"Updated treatment step {updated.step_number}: {updated.title}",
        patient_id=patient.id,
        metadata={"treatmentPlanId": plan.id},
    )
    await store.commit()
    logger.info("Treatment plan %s updated by user %s", plan.id, user.id)
    return updated
