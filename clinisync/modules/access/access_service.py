# clinisync/modules/access/access_service.py
"""Role-scoped visibility rules.

Everything here is evaluated against ``user.current_role``, never against the
full set of roles a user holds: the same person may run one clinic and visit
another as a consultant.
"""

from typing import List, Optional

from sqlalchemy import or_

from clinisync.common.database.store import EntityStore
from clinisync.common.errors import ForbiddenError, NotFoundError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import Activity, Consultant, Patient, User, UserRole


def is_clinician(user: User) -> bool:
    return user.current_role == UserRole.CLINICIAN


def is_consultant(user: User) -> bool:
    return user.current_role == UserRole.CONSULTANT


async def consultant_relationships(store: EntityStore, user: User) -> List[Consultant]:
    """Every consultant relationship the user holds, active or not, across clinics."""
    return await store.get_consultants_by_user(user.id)


async def visible_patients(store: EntityStore, user: User) -> List[Patient]:
    """Patients the user may see under their current role."""
    if is_clinician(user):
        return await store.get_patients_by_clinic(user.id)
    if is_consultant(user):
        relationships = await consultant_relationships(store, user)
        return await store.get_patients_by_consultants(c.id for c in relationships)
    return []


async def can_access_patient(store: EntityStore, user: User, patient: Optional[Patient]) -> bool:
    """Single-entity form of ``visible_patients``. Never raises."""
    if patient is None:
        return False
    if is_clinician(user):
        return patient.clinic_id == user.id
    if is_consultant(user):
        consultant = await store.get(Consultant, patient.consultant_id)
        return consultant is not None and consultant.user_id == user.id
    return False


async def visible_consultants(store: EntityStore, clinic_id: str) -> List[Consultant]:
    """Active consultant relationships of a clinic."""
    return await store.get_consultants_by_clinic(clinic_id)


def can_manage_consultants(user: User) -> bool:
    """Consultant listing and creation is for clinicians only."""
    return is_clinician(user)


def require_consultant_manager(user: User) -> None:
    if not can_manage_consultants(user):
        raise ForbiddenError(GlobalMessages.ACCESS_DENIED)


async def require_patient_access(store: EntityStore, user: User, patient_id: str) -> Patient:
    """
    Load a patient the user is allowed to act on.

    Raises:
        NotFoundError: the patient id is unknown.
        ForbiddenError: the patient is outside the user's scope.
    """
    patient = await store.get(Patient, patient_id)
    if patient is None:
        raise NotFoundError(GlobalMessages.PATIENT_NOT_FOUND)
    if not await can_access_patient(store, user, patient):
        raise ForbiddenError(GlobalMessages.ACCESS_DENIED)
    return patient


async def active_relationships(store: EntityStore, user: User) -> List[Consultant]:
    """Active consultant rows counted for the user: the clinic's for a clinician, their own for a consultant."""
    if is_clinician(user):
        return await visible_consultants(store, user.id)
    if is_consultant(user):
        return [c for c in await consultant_relationships(store, user) if c.is_active]
    return []


async def visible_activities(store: EntityStore, user: User, limit: Optional[int] = None) -> List[Activity]:
    """
    Activity feed for the user's current role, newest first.

    A clinician sees activities tied to no patient or to a clinic patient,
    whoever performed them. A consultant sees only their own actions.
    """
    if is_clinician(user):
        patient_ids = [p.id for p in await store.get_patients_by_clinic(user.id)]
        return await store.get_activities(
            or_(Activity.patient_id.is_(None), Activity.patient_id.in_(patient_ids)),
            limit=limit,
        )
    if is_consultant(user):
        return await store.get_activities(Activity.user_id == user.id, limit=limit)
    return []
