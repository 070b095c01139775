# clinisync/modules/consultants/consultants_service.py
"""Consultant relationships of a clinic."""

import logging
from typing import List

from clinisync.auth.schemas import UserResponse
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import ConflictError, NotFoundError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import ActivityAction, Consultant, User
from clinisync.modules.access import access_service
from clinisync.modules.activities.activity_service import log_activity
from .schemas import ConsultantCreate, ConsultantResponse, ConsultantWithStats

logger = logging.getLogger(__name__)


async def list_consultants_with_stats(store: EntityStore, user: User) -> List[ConsultantWithStats]:
    """Active consultants of the user's clinic with their user record and patient count."""
    access_service.require_consultant_manager(user)

    result = []
    for consultant in await access_service.visible_consultants(store, user.id):
        consultant_user = await store.get(User, consultant.user_id)
        patients = await store.get_patients_by_consultant(consultant.id)
        result.append(ConsultantWithStats(
            **ConsultantResponse.model_validate(consultant).model_dump(),
            user=UserResponse.model_validate(consultant_user) if consultant_user else None,
            patient_count=len(patients),
        ))
    return result


async def create_consultant_relationship(store: EntityStore, user: User, data: ConsultantCreate) -> Consultant:
    """
    Link a consultant user to the current clinician's clinic.

    Raises:
        ForbiddenError: the user is not acting as a clinician.
        NotFoundError: the consultant user does not exist.
        ConflictError: a relationship for this user and clinic already exists,
            active or not.
    """
    access_service.require_consultant_manager(user)

    if await store.get(User, data.user_id) is None:
        raise NotFoundError(GlobalMessages.USER_NOT_FOUND)
    if await store.get_consultant_by_user_and_clinic(data.user_id, user.id):
        raise ConflictError(GlobalMessages.CONSULTANT_EXISTS)

    consultant = await store.create(
        Consultant,
        user_id=data.user_id,
        clinic_id=user.id,
        specialty=data.specialty,
        next_visit=data.next_visit,
        is_active=True,
    )
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.CONSULTANT_ADDED,
        description=f"Added new consultant: {consultant.specialty}",
        metadata={"consultantId": consultant.id},
    )
    await store.commit()
    logger.info("Consultant %s added to clinic %s", consultant.id, user.id)
    return consultant
