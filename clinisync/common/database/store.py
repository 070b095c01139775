# clinisync/common/database/store.py
"""Keyed storage for every entity kind, on top of one AsyncSession.

The entity kind is the model class. The store knows nothing about roles or
business rules and does not check foreign keys.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import asc, desc, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinisync.common.utils.identifiers import new_id
from clinisync.models.models import (
    Activity, Consultant, MedicalImage, Patient, Payment, TreatmentPlan, User,
)

T = TypeVar("T")


class EntityStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    async def get(self, model: Type[T], entity_id: Optional[str]) -> Optional[T]:
        if not entity_id:
            return None
        return await self.session.get(model, entity_id)

    async def create(self, model: Type[T], **fields: Any) -> T:
        fields.setdefault("id", new_id())
        entity = model(**fields)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, model: Type[T], entity_id: str, changes: Mapping[str, Any]) -> Optional[T]:
        entity = await self.get(model, entity_id)
        if entity is None:
            return None
        mapped = set(inspect(model).column_attrs.keys())
        for key, value in changes.items():
            if key == "id" or key not in mapped:
                continue
            setattr(entity, key, value)
        if hasattr(model, "updated_at"):
            entity.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return entity

    async def delete(self, model: Type[T], entity_id: str) -> bool:
        entity = await self.get(model, entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True

    async def scan(self, model: Type[T], *criteria: Any, order_by: Sequence[Any] = ()) -> List[T]:
        query = select(model)
        if criteria:
            query = query.where(*criteria)
        if order_by:
            query = query.order_by(*order_by)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_username(self, username: str) -> Optional[User]:
        users = await self.scan(User, User.username == username)
        return users[0] if users else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        users = await self.scan(User, User.email == email)
        return users[0] if users else None

    # ------------------------------------------------------------------
    # Consultants
    # ------------------------------------------------------------------

    async def get_consultants_by_clinic(self, clinic_id: str) -> List[Consultant]:
        """Active relationships of one clinic."""
        return await self.scan(
            Consultant,
            Consultant.clinic_id == clinic_id,
            Consultant.is_active.is_(True),
            order_by=[asc(Consultant.created_at)],
        )

    async def get_consultants_by_user(self, user_id: str) -> List[Consultant]:
        """Every relationship of one consultant-role user, active or not."""
        return await self.scan(Consultant, Consultant.user_id == user_id)

    async def get_consultant_by_user_and_clinic(self, user_id: str, clinic_id: str) -> Optional[Consultant]:
        consultants = await self.scan(
            Consultant,
            Consultant.user_id == user_id,
            Consultant.clinic_id == clinic_id,
        )
        return consultants[0] if consultants else None

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    async def get_patients_by_clinic(self, clinic_id: str) -> List[Patient]:
        return await self.scan(Patient, Patient.clinic_id == clinic_id)

    async def get_patients_by_consultant(self, consultant_id: str) -> List[Patient]:
        return await self.scan(Patient, Patient.consultant_id == consultant_id)

    async def get_patients_by_consultants(self, consultant_ids: Iterable[str]) -> List[Patient]:
        consultant_ids = list(consultant_ids)
        if not consultant_ids:
            return []
        return await self.scan(Patient, Patient.consultant_id.in_(consultant_ids))

    # ------------------------------------------------------------------
    # Patient history
    # ------------------------------------------------------------------

    async def get_treatment_plans_by_patient(self, patient_id: str) -> List[TreatmentPlan]:
        return await self.scan(
            TreatmentPlan,
            TreatmentPlan.patient_id == patient_id,
            order_by=[asc(TreatmentPlan.step_number), asc(TreatmentPlan.created_at)],
        )

    async def get_medical_images_by_patient(self, patient_id: str) -> List[MedicalImage]:
        return await self.scan(
            MedicalImage,
            MedicalImage.patient_id == patient_id,
            order_by=[desc(MedicalImage.uploaded_at)],
        )

    async def get_payments_by_patient(self, patient_id: str) -> List[Payment]:
        return await self.scan(
            Payment,
            Payment.patient_id == patient_id,
            order_by=[desc(Payment.payment_date)],
        )

    async def get_payments_by_patients(self, patient_ids: Iterable[str]) -> List[Payment]:
        patient_ids = list(patient_ids)
        if not patient_ids:
            return []
        return await self.scan(Payment, Payment.patient_id.in_(patient_ids))

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    async def get_activities(self, *criteria: Any, limit: Optional[int] = None) -> List[Activity]:
        """Activities matching ``criteria``, newest first."""
        query = select(Activity)
        if criteria:
            query = query.where(*criteria)
        query = query.order_by(desc(Activity.created_at))
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
